"""
Numerical constants and defaults for strategy analytics.

This module defines the day-count convention, input thresholds, payoff
grid geometry, outlook classification thresholds and cache/worker
defaults. All values mirror what the trading dashboard displays.
"""

# Pricing conventions
DAYS_PER_YEAR = 365.0  # Calendar days; theta is reported per calendar day
DEFAULT_INTEREST_RATE = 0.05  # 5% annualized, continuous
PERCENT = 100.0  # Volatility inputs are percentages; vega/rho per 1 point

# Normal distribution bounds
MAX_STANDARD_DEVIATIONS = 8.0  # Beyond ±8σ, CDF is effectively 0 or 1
MAX_PDF_ARGUMENT = 10.0  # Beyond ±10σ, PDF is effectively 0

# Zelen & Severo (Abramowitz & Stegun 26.2.17) coefficients
ZS_P = 0.2316419
ZS_B1 = 0.319381530
ZS_B2 = -0.356563782
ZS_B3 = 1.781477937
ZS_B4 = -1.821255978
ZS_B5 = 1.330274429

# Payoff grid
PAYOFF_GRID_STEPS = 40  # 41 points
PAYOFF_PADDING_FRACTION = 0.5  # Half the strike span on each side
DEGENERATE_SPAN_FRACTION = 0.2  # Span used when every leg shares one strike
DEGENERATE_SPAN_FALLBACK = 1.0
BREAK_EVEN_DEDUP_TOLERANCE = 1e-9
BREAK_EVEN_XTOL = 1e-10

# Outlook thresholds
OUTLOOK_DIRECTIONAL_DELTA = 0.5
OUTLOOK_NEUTRAL_DELTA = 0.2
OUTLOOK_GAMMA = 0.01
OUTLOOK_VEGA = 0.5

# Reported precision (decimal places)
ROUNDING = {
    "delta": 3,
    "gamma": 4,
    "theta": 3,
    "vega": 3,
    "rho": 3,
    "cost": 2,
    "risk_reward": 2,
}

# Strategy templates
CONTRACT_MULTIPLIER = 100  # Shares per equity option contract
DEFAULT_STRIKE_STEP = 5.0

# Signal evaluation defaults
DEFAULT_SMA_PERIOD = "50"
DEFAULT_SMA_CROSS_PERIOD = "200"
DEFAULT_EMA_PERIOD = "12"
DEFAULT_EMA_CROSS_PERIOD = "26"
DEFAULT_RSI_PERIOD = "14"
DEFAULT_ATR_PERIOD = "14"
DEFAULT_MACD_LINE = "histogram"
DEFAULT_MAX_WORKERS = 8

# Cache parameters
DEFAULT_CACHE_TTL = 300  # 5 minutes in seconds
DEFAULT_CACHE_SIZE = 256
