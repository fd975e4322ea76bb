"""Data models for the mortgage calculator.

This module defines dataclasses representing the values the calculator works
with: the loan request, individual schedule rows, the full amortization
result and the outcome of comparing several loan scenarios. The dataclasses
are frozen because every value is built once per calculation and then only
read or serialized.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Tuple


@dataclass(frozen=True)
class FieldViolation:
    """A single rejected input field.

    ``field`` uses the wire name of the field (``loanAmount``,
    ``interestRate`` ...), optionally prefixed with its position inside a
    batch (``scenarios[1].loanAmount``).
    """

    field: str
    message: str


@dataclass(frozen=True)
class LoanRequest:
    """Parameters of a fixed-rate amortizing loan.

    Attributes
    ----------
    principal: Decimal
        The financed amount. It is never derived from ``property_price`` and
        ``down_payment``; those two only feed the ratio metrics.
    annual_rate_percent: Decimal
        Nominal annual interest rate in percent (``8.5`` means 8.5 %).
    tenure_years: Decimal
        Loan duration in years. Must correspond to a whole number of months.
    property_price: Optional[Decimal]
        Price of the underlying property, used for loan-to-value.
    down_payment: Optional[Decimal]
        Cash paid up front, used for the down-payment percentage.
    name: Optional[str]
        Label used when the request is part of a scenario comparison.
    """

    principal: Decimal
    annual_rate_percent: Decimal
    tenure_years: Decimal
    property_price: Optional[Decimal] = None
    down_payment: Optional[Decimal] = None
    name: Optional[str] = None


@dataclass(frozen=True)
class PeriodicPayment:
    """One month of the amortization schedule, in whole currency units."""

    period: int
    payment: int
    principal_component: int
    interest_component: int
    remaining_balance: int


@dataclass(frozen=True)
class AmortizationResult:
    """Summary and schedule preview of a loan.

    Monetary totals are rounded to whole currency units. ``principal`` is the
    amount exactly as requested. The two percentages keep two decimal places
    and are ``None`` when the property price (and, for the down payment
    percentage, the down payment) was not supplied.
    """

    periodic_payment: int
    total_payments: int
    total_paid: int
    total_interest: int
    principal: Decimal
    loan_to_value_percent: Optional[Decimal]
    down_payment_percent: Optional[Decimal]
    schedule: Tuple[PeriodicPayment, ...]


@dataclass(frozen=True)
class ScenarioResult:
    """Headline numbers of one scenario in a comparison."""

    scenario_id: int
    name: str
    payment: int
    total_interest: int
    total_paid: int
    annual_rate_percent: Decimal
    tenure_years: Decimal


@dataclass(frozen=True)
class ScenarioComparison:
    """Scenario results in the order the scenarios were supplied."""

    scenarios: Tuple[ScenarioResult, ...]

    def __len__(self) -> int:
        return len(self.scenarios)

    def __iter__(self):
        return iter(self.scenarios)
