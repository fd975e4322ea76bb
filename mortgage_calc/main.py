"""Command-line interface for the mortgage calculator.

This module uses the ``click`` library to implement a multi-command interface.
Users can compute a loan's EMI and amortization schedule, view only the
summary, or compare several loan scenarios. Results can be printed to the
terminal or exported to JSON/CSV files.
"""

from __future__ import annotations

import csv
import json
import shlex
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import click

from .data_models import AmortizationResult, LoanRequest
from .engine import amortize, compare_scenarios
from .errors import ComputationError, InvalidInputError
from .formatter import print_comparison, print_schedule, print_summary
from .payloads import amortization_payload, comparison_payload
from .utils import parse_amount
from .validation import INTEREST_RATE, LOAN_AMOUNT, LOAN_TENURE, NAME, coerce_loan_request, parse_scenarios


def _amount(value: Optional[str]) -> Any:
    """Expand ``k``/``m`` shorthand; unreadable text is passed on for validation to report."""
    if value is None:
        return None
    try:
        return parse_amount(value)
    except ValueError:
        return value


def _describe(exc: InvalidInputError) -> str:
    return "; ".join(f"{v.field}: {v.message}" for v in exc.violations)


def _run(compute, *args, **kwargs):
    """Call the engine, turning a failed calculation into a CLI error."""
    try:
        return compute(*args, **kwargs)
    except ComputationError as exc:
        raise click.ClickException(str(exc))


def build_request_from_options(
    principal: str,
    rate: str,
    tenure: str,
    property_price: Optional[str] = None,
    down_payment: Optional[str] = None,
    name: Optional[str] = None,
) -> LoanRequest:
    try:
        return coerce_loan_request(
            _amount(principal),
            rate.strip().rstrip("%"),
            tenure,
            _amount(property_price),
            _amount(down_payment),
            name,
        )
    except InvalidInputError as exc:
        raise click.BadParameter(_describe(exc))


def export_to_json(path: Path, result: AmortizationResult) -> None:
    """Export the summary and schedule to a JSON file."""
    with path.open("w", encoding="utf-8") as f:
        json.dump({"results": amortization_payload(result)}, f, indent=2)


def export_to_csv(path: Path, result: AmortizationResult) -> None:
    """Export the schedule to a CSV file."""
    header = ["Month", "EMI", "Principal", "Interest", "Balance"]
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        for e in result.schedule:
            writer.writerow(
                [e.period, e.payment, e.principal_component, e.interest_component, e.remaining_balance]
            )


def loan_options(func):
    """Attach the loan parameter options shared by ``calculate`` and ``summary``."""
    options = [
        click.option("--principal", "-p", "principal", required=True, help="Loan amount (e.g. 4000000, 4m, 4,000,000)"),
        click.option("--rate", "-r", "rate", required=True, help="Annual interest rate (percent)"),
        click.option("--tenure", "-t", "tenure", required=True, help="Loan tenure in years"),
        click.option("--price", "property_price", help="Property price, enables loan-to-value"),
        click.option("--down-payment", "-d", "down_payment", help="Down payment amount"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
def cli() -> None:
    """A command-line mortgage calculator."""
    pass


@cli.command()
@loan_options
@click.option("--full", "full", is_flag=True, help="Compute the schedule for the whole tenure instead of the first 12 months")
@click.option("--output", "output", type=str, help="Output file path (.json or .csv)")
def calculate(
    principal: str,
    rate: str,
    tenure: str,
    property_price: Optional[str],
    down_payment: Optional[str],
    full: bool,
    output: Optional[str],
) -> None:
    """Compute and print the EMI, totals and amortization schedule."""
    request = build_request_from_options(principal, rate, tenure, property_price, down_payment)
    result = _run(amortize, request, preview_periods=None if full else 12)
    if output:
        path = Path(output)
        if path.suffix.lower() == ".json":
            export_to_json(path, result)
        elif path.suffix.lower() == ".csv":
            export_to_csv(path, result)
        else:
            raise click.BadParameter("Unsupported output format; use .json or .csv")
        click.echo(f"Schedule exported to {path}")
        return
    print_summary(result)
    print_schedule(result.schedule)


@cli.command()
@loan_options
@click.option("--output", "output", type=str, help="Output file path (.json)")
def summary(
    principal: str,
    rate: str,
    tenure: str,
    property_price: Optional[str],
    down_payment: Optional[str],
    output: Optional[str],
) -> None:
    """Compute and print only the summary metrics for a loan."""
    request = build_request_from_options(principal, rate, tenure, property_price, down_payment)
    result = _run(amortize, request, preview_periods=0)
    if output:
        path = Path(output)
        if path.suffix.lower() != ".json":
            raise click.BadParameter("Summary export must use .json extension")
        payload = amortization_payload(result)
        with path.open("w", encoding="utf-8") as f:
            json.dump({"summary": payload["summary"]}, f, indent=2)
        click.echo(f"Summary exported to {path}")
    else:
        print_summary(result)


def parse_scenario_opts(opts: str) -> Dict[str, Optional[str]]:
    """Turn a quoted option string such as ``"-p 4m -r 8.5 -t 20 -n 'Bank A'"`` into parameters."""
    tokens = shlex.split(opts)
    params: Dict[str, Optional[str]] = {"principal": None, "rate": None, "tenure": None, "name": None}
    flags = {
        "-p": "principal",
        "--principal": "principal",
        "-r": "rate",
        "--rate": "rate",
        "-t": "tenure",
        "--tenure": "tenure",
        "-n": "name",
        "--name": "name",
    }
    i = 0
    while i < len(tokens):
        token = tokens[i]
        if token not in flags:
            raise click.BadParameter(f"Unknown option in scenario: {token}")
        if i + 1 >= len(tokens):
            raise click.BadParameter(f"Option {token} expects a value")
        params[flags[token]] = tokens[i + 1]
        i += 2
    missing = [key for key in ("principal", "rate", "tenure") if params[key] is None]
    if missing:
        raise click.BadParameter(f"Scenario missing required option(s): {', '.join(missing)}")
    return params


@cli.command()
@click.option("--scenario", "scenario", multiple=True, required=True, help="Scenario options quoted string")
@click.option("--output", "output", type=str, help="Output file path (.json)")
def compare(scenario: Tuple[str, ...], output: Optional[str]) -> None:
    """Compare two or more loan scenarios.

    Scenarios are provided as quoted option strings, for example:

        mortgage-calc compare --scenario "-p 4m -r 8.5 -t 20 -n 'Bank A'" --scenario "-p 4m -r 8.1 -t 25"
    """
    if len(scenario) < 2:
        raise click.UsageError("Provide at least two --scenario options to compare")
    entries: List[Dict[str, Any]] = []
    for opts in scenario:
        params = parse_scenario_opts(opts)
        entries.append(
            {
                LOAN_AMOUNT: _amount(params["principal"]),
                INTEREST_RATE: params["rate"].strip().rstrip("%"),
                LOAN_TENURE: params["tenure"],
                NAME: params["name"],
            }
        )
    try:
        requests = parse_scenarios(entries)
    except InvalidInputError as exc:
        raise click.BadParameter(_describe(exc))
    comparison = _run(compare_scenarios, requests)
    if output:
        path = Path(output)
        if path.suffix.lower() != ".json":
            raise click.BadParameter("Comparison export must use .json extension")
        with path.open("w", encoding="utf-8") as f:
            json.dump({"comparisons": comparison_payload(comparison)}, f, indent=2)
        click.echo(f"Comparison exported to {path}")
    else:
        print_comparison(comparison)


if __name__ == "__main__":
    cli()
