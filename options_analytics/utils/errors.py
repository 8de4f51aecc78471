"""
Error types raised by the analytics core.

Primitives raise these; aggregating layers catch them and report the
failure in their result objects so that one bad leg or symbol never
aborts a whole computation.
"""


class InvalidInputError(ValueError):
    """Input that cannot be priced or evaluated (zero legs, bad strike, expired option, ...)."""


class UnrecognizedConditionError(ValueError):
    """A rule condition that cannot be interpreted (unknown kind, non-numeric threshold)."""
