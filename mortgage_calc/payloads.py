"""JSON payloads for mortgage results.

The HTTP API and the CLI JSON export share these converters so both emit the
same field names: ``emi``, ``totalAmount``, ``amortizationSchedule`` ...
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from .data_models import AmortizationResult, LoanRequest, PeriodicPayment, ScenarioComparison
from .utils import json_number


def _ratio(value: Optional[Decimal]) -> Optional[float]:
    return float(value) if value is not None else None


def schedule_payload(schedule: Iterable[PeriodicPayment]) -> List[Dict[str, int]]:
    """Convert schedule entries into JSON-serialisable dictionaries for charts."""
    return [
        {
            "month": entry.period,
            "emi": entry.payment,
            "principal": entry.principal_component,
            "interest": entry.interest_component,
            "balance": entry.remaining_balance,
        }
        for entry in schedule
    ]


def amortization_payload(result: AmortizationResult) -> Dict[str, Any]:
    principal = json_number(result.principal)
    return {
        "emi": result.periodic_payment,
        "totalAmount": result.total_paid,
        "totalInterest": result.total_interest,
        "principalAmount": principal,
        "loanToValue": _ratio(result.loan_to_value_percent),
        "downPaymentPercentage": _ratio(result.down_payment_percent),
        "amortizationSchedule": schedule_payload(result.schedule),
        "summary": {
            "monthlyPayment": result.periodic_payment,
            "totalPayments": result.total_payments,
            "totalCost": result.total_paid,
            "interestPaid": result.total_interest,
            "principalPaid": principal,
        },
    }


def comparison_payload(comparison: ScenarioComparison) -> List[Dict[str, Any]]:
    return [
        {
            "scenarioId": scenario.scenario_id,
            "name": scenario.name,
            "emi": scenario.payment,
            "totalInterest": scenario.total_interest,
            "totalAmount": scenario.total_paid,
            "interestRate": json_number(scenario.annual_rate_percent),
            "tenure": json_number(scenario.tenure_years),
        }
        for scenario in comparison
    ]


def request_payload(request: LoanRequest) -> Dict[str, Any]:
    """Wire representation of a request, used when a scenario is saved."""
    payload: Dict[str, Any] = {
        "loanAmount": json_number(request.principal),
        "interestRate": json_number(request.annual_rate_percent),
        "loanTenure": json_number(request.tenure_years),
        "propertyPrice": None,
        "downPayment": None,
    }
    if request.property_price is not None:
        payload["propertyPrice"] = json_number(request.property_price)
    if request.down_payment is not None:
        payload["downPayment"] = json_number(request.down_payment)
    return payload


__all__ = [
    "amortization_payload",
    "comparison_payload",
    "request_payload",
    "schedule_payload",
]
