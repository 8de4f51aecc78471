"""
Command-line interface for the options strategy analytics engine.

This CLI provides access to:
- Strategy Greeks aggregation
- Expiration payoff curves, break-evens and risk metrics
- Technical entry/exit signal scans
- Predefined strategy templates
"""

import json
import logging

import click

from options_analytics.core.cache import ResultCache
from options_analytics.signals.evaluator import scan_signals
from options_analytics.strategy.analysis import analyze_strategy
from options_analytics.strategy.payoff import to_frame
from options_analytics.strategy.risk import NOT_AVAILABLE, interpret_greeks
from options_analytics.strategy.templates import STRATEGY_TEMPLATES, build_strategy, contract_cost
from options_analytics.utils.constants import DEFAULT_INTEREST_RATE, DEFAULT_MAX_WORKERS, PAYOFF_GRID_STEPS
from options_analytics.utils.types import MarketParameters, RuleSet, Strategy, TechnicalSnapshot


def _load_json(path):
    with open(path, "r", encoding="utf-8") as handle:
        return json.load(handle)


def _load_strategy(strategy_file, template, underlying, vol, days, rate):
    if strategy_file:
        return Strategy.from_dict(_load_json(strategy_file))
    if template:
        if underlying is None:
            raise click.UsageError("--underlying is required with --template")
        return build_strategy(
            template, underlying, volatility_pct=vol, days_to_expiry=days, interest_rate=rate
        )
    raise click.UsageError("Provide a strategy file or --template")


def _fmt(value, format_spec):
    return NOT_AVAILABLE if isinstance(value, str) else format(value, format_spec)


@click.group()
@click.version_option(version="1.0.0")
@click.option("--verbose", is_flag=True, help="Log diagnostics to stderr")
def cli(verbose):
    """Options Strategy Analytics - Greeks, payoffs and trading signals."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


strategy_source = [
    click.argument("strategy_file", required=False, type=click.Path(exists=True, dir_okay=False)),
    click.option("--template", type=click.Choice(sorted(STRATEGY_TEMPLATES)), help="Build from a template"),
    click.option("--underlying", "-S", type=float, help="Underlying price (with --template)"),
    click.option("--vol", "-v", type=float, default=30.0, show_default=True, help="Volatility (%)"),
    click.option("--days", "-d", type=int, default=30, show_default=True, help="Days to expiry"),
    click.option("--rate", "-r", type=float, default=DEFAULT_INTEREST_RATE, show_default=True, help="Risk-free rate"),
]


def with_strategy_source(func):
    for decorator in reversed(strategy_source):
        func = decorator(func)
    return func


@cli.command()
@with_strategy_source
def greeks(strategy_file, template, underlying, vol, days, rate):
    """Aggregate Greeks across the legs of a strategy."""
    try:
        strategy = _load_strategy(strategy_file, template, underlying, vol, days, rate)
        analysis = analyze_strategy(strategy, MarketParameters(vol, days, rate))
    except ValueError as e:
        click.echo(f"\nError: {e}", err=True)
        raise SystemExit(1)

    result = analysis.greeks
    if result is None:
        click.echo("\nStrategy has no legs.")
        return

    click.echo(f"\n{strategy.name or 'Strategy'} @ ${strategy.underlying_price:.2f}")
    for index, leg in enumerate(strategy.legs):
        if index in result.errors:
            click.echo(f"  [{index}] {leg.label:<24} skipped: {result.errors[index]}")
            continue
        contribution = result.legs[index]
        click.echo(
            f"  [{index}] {leg.label:<24} Δ {contribution.delta:>8.3f}  "
            f"Θ {contribution.theta:>8.3f}  V {contribution.vega:>8.3f}"
        )

    click.echo("\nStrategy Greeks:")
    click.echo(f"  Delta:  {result.delta:>10.3f}")
    click.echo(f"  Gamma:  {result.gamma:>10.4f}")
    click.echo(f"  Theta:  {result.theta:>10.3f} (per day)")
    click.echo(f"  Vega:   {result.vega:>10.3f}")
    click.echo(f"  Rho:    {result.rho:>10.3f}")
    click.echo(f"  Cost:   {result.cost:>10.2f}")
    click.echo(f"  Contract cost: ${contract_cost(strategy):,.2f}")

    if analysis.outlook is not None:
        click.echo(f"\nOutlook: {analysis.outlook.outlook}")
        click.echo(f"  {analysis.outlook.description}")
        click.echo(f"  Risk: {analysis.outlook.risk}")

    for name, text in interpret_greeks(result).items():
        click.echo(f"  {name.capitalize()}: {text}")


@cli.command()
@with_strategy_source
@click.option("--steps", type=int, default=PAYOFF_GRID_STEPS, show_default=True, help="Grid intervals")
@click.option("--refine", is_flag=True, help="Polish break-evens on the exact payoff")
@click.option("--table", is_flag=True, help="Print the full payoff table")
def payoff(strategy_file, template, underlying, vol, days, rate, steps, refine, table):
    """Expiration payoff, break-evens and risk metrics."""
    try:
        strategy = _load_strategy(strategy_file, template, underlying, vol, days, rate)
        analysis = analyze_strategy(strategy, MarketParameters(vol, days, rate), steps=steps, refine=refine)
    except ValueError as e:
        click.echo(f"\nError: {e}", err=True)
        raise SystemExit(1)

    for index, message in sorted(analysis.curve.errors.items()):
        click.echo(f"Leg {index} skipped: {message}", err=True)

    risk = analysis.risk
    break_evens = ", ".join(f"${price:.2f}" for price in risk.break_evens) or NOT_AVAILABLE
    click.echo(f"\nMax Profit:    ${risk.max_profit:.2f}")
    click.echo(f"Max Loss:      ${risk.max_loss:.2f}")
    click.echo(f"Break-evens:   {break_evens}")
    click.echo(f"Risk/Reward:   {_fmt(risk.risk_reward_ratio, '.2f')}")

    if table and len(analysis.curve):
        click.echo("")
        click.echo(to_frame(analysis.curve).round(2).to_string(index=False))


@cli.command()
@click.argument("rules_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("snapshots_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--workers", "-w", type=int, default=DEFAULT_MAX_WORKERS, show_default=True, help="Worker threads")
def signals(rules_file, snapshots_file, workers):
    """
    Scan symbols for entry/exit signals.

    SNAPSHOTS_FILE holds a JSON object mapping each symbol to its snapshot.
    """
    try:
        rule_set = RuleSet.from_dict(_load_json(rules_file))
        raw = _load_json(snapshots_file)
        snapshots = {symbol: TechnicalSnapshot.from_dict(data, symbol=symbol) for symbol, data in raw.items()}
    except (ValueError, AttributeError) as e:
        click.echo(f"\nError: {e}", err=True)
        raise SystemExit(1)

    results = scan_signals(rule_set, snapshots, max_workers=workers, cache=ResultCache())

    click.echo(f"\n{'Symbol':<8} {'Signal':<6} {'Entry':<6} {'Exit':<6}")
    for result in results:
        click.echo(
            f"{result.symbol:<8} {result.classification.value:<6} "
            f"{'yes' if result.entry_signal else 'no':<6} {'yes' if result.exit_signal else 'no':<6}"
        )
        for warning in result.warnings:
            click.echo(f"  warning: {warning}", err=True)


@cli.command()
def templates():
    """List predefined strategy templates."""
    for key, template in STRATEGY_TEMPLATES.items():
        click.echo(f"\n{key} ({template.name}, {len(template.legs)} legs)")
        click.echo(f"  {template.description}")


if __name__ == "__main__":
    cli()
