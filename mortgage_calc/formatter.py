"""Output helpers for the mortgage calculator.

This module provides simple functions to render amortization results and
scenario comparisons in a tabular text format using built-in printing and
string formatting.
"""

from __future__ import annotations

from typing import Iterable

from .data_models import AmortizationResult, PeriodicPayment, ScenarioComparison


def print_summary(result: AmortizationResult) -> None:
    """Print a summary of loan metrics in a human-readable format."""
    print("Summary")
    print("-" * 72)
    print(f"Principal          : {result.principal:,.2f}")
    print(f"Monthly payment    : {result.periodic_payment:,}")
    print(f"Number of payments : {result.total_payments}")
    print(f"Total interest     : {result.total_interest:,}")
    print(f"Total cost         : {result.total_paid:,}")
    if result.loan_to_value_percent is not None:
        print(f"Loan to value      : {result.loan_to_value_percent}%")
    if result.down_payment_percent is not None:
        print(f"Down payment       : {result.down_payment_percent}%")
    print("-" * 72)


def print_schedule(schedule: Iterable[PeriodicPayment]) -> None:
    """Print the amortization schedule as a simple table."""
    headers = ["Month", "EMI", "Principal", "Interest", "Balance"]
    print("\t".join(headers))
    for entry in schedule:
        row = [
            str(entry.period),
            str(entry.payment),
            str(entry.principal_component),
            str(entry.interest_component),
            str(entry.remaining_balance),
        ]
        print("\t".join(row))


def print_comparison(comparison: ScenarioComparison) -> None:
    """Print scenarios side by side.

    The last column shows the difference in total interest against the first
    scenario; a negative value means the scenario is cheaper.
    """
    print("Comparison")
    print("=" * 96)
    print(
        f"{'#':>3s} {'Scenario':24s} {'Rate %':>8s} {'Years':>6s} {'EMI':>12s} "
        f"{'Interest':>14s} {'Total':>14s} {'vs #1':>10s}"
    )
    baseline = None
    for scenario in comparison:
        if baseline is None:
            baseline = scenario.total_interest
        diff = scenario.total_interest - baseline
        print(
            f"{scenario.scenario_id:>3d} {scenario.name[:24]:24s} {float(scenario.annual_rate_percent):>8.2f} "
            f"{float(scenario.tenure_years):>6g} {scenario.payment:>12,d} {scenario.total_interest:>14,d} "
            f"{scenario.total_paid:>14,d} {diff:>+10,d}"
        )
    print("=" * 96)
