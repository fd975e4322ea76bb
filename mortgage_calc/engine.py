"""Core calculation engine for the mortgage calculator.

This module implements the fixed-rate amortizing loan mathematics: the equated
monthly installment (EMI), a preview of the amortization schedule, the loan
totals and the loan-to-value / down-payment ratios. It also compares several
loan scenarios side by side. Every function is pure; results are returned as
frozen dataclasses from ``data_models``.
"""

from __future__ import annotations

import logging
from decimal import Decimal, localcontext
from typing import List, Optional, Sequence, Tuple

from .data_models import AmortizationResult, LoanRequest, PeriodicPayment, ScenarioComparison, ScenarioResult
from .errors import ComputationError, InvalidInputError
from .utils import round_currency, round_ratio
from .validation import MONTHS_PER_YEAR, coerce_loan_request, validate_loan_request

logger = logging.getLogger(__name__)

PRECISION = 28  # significant digits for intermediate financial values
DEFAULT_PREVIEW_PERIODS = 12


def _calculate_annuity_payment(principal: Decimal, rate_per_month: Decimal, term: int) -> Decimal:
    """Return the annuity (equal installment) monthly payment for a loan.

    The formula is:

        payment = P * (i * (1 + i)^n) / ((1 + i)^n - 1)

    where ``P`` is the principal, ``i`` is the monthly interest rate and
    ``n`` is the number of payments. When the interest rate is zero, the
    payment simplifies to ``P / n``. A rate too small to move ``(1 + i)^n``
    away from 1 at the working precision is treated the same way.
    """
    if term <= 0:
        raise ValueError("Term must be positive")
    if rate_per_month == 0:
        return principal / Decimal(term)
    factor = (1 + rate_per_month) ** term
    if factor == 1:
        return principal / Decimal(term)
    return principal * (rate_per_month * factor) / (factor - 1)


def _build_schedule(
    principal: Decimal, rate_per_month: Decimal, payment: Decimal, periods: int
) -> Tuple[PeriodicPayment, ...]:
    """Walk the loan forward ``periods`` months.

    The balance is carried unrounded from month to month; only the recorded
    values are rounded.
    """
    balance = principal
    rows: List[PeriodicPayment] = []
    for period in range(1, periods + 1):
        interest_payment = balance * rate_per_month
        principal_payment = payment - interest_payment
        balance -= principal_payment
        rows.append(
            PeriodicPayment(
                period=period,
                payment=round_currency(payment),
                principal_component=round_currency(principal_payment),
                interest_component=round_currency(interest_payment),
                remaining_balance=round_currency(balance),
            )
        )
    return tuple(rows)


def _normalize(request: LoanRequest) -> LoanRequest:
    return coerce_loan_request(
        request.principal,
        request.annual_rate_percent,
        request.tenure_years,
        request.property_price,
        request.down_payment,
        request.name,
    )


def _compute(request: LoanRequest, preview_periods: Optional[int]) -> AmortizationResult:
    """Run the calculation for a request that has already been validated."""
    total_periods = int(request.tenure_years * MONTHS_PER_YEAR)
    if preview_periods is None:
        periods = total_periods
    else:
        periods = min(max(preview_periods, 0), total_periods)

    with localcontext() as ctx:
        ctx.prec = PRECISION
        try:
            # Convert annual rate from percent to monthly decimal
            rate_per_month = request.annual_rate_percent / Decimal(12 * 100)
            payment = _calculate_annuity_payment(request.principal, rate_per_month, total_periods)
            total_paid = payment * total_periods
            total_interest = total_paid - request.principal
            schedule = _build_schedule(request.principal, rate_per_month, payment, periods)

            loan_to_value = None
            down_payment_percent = None
            if request.property_price is not None:
                loan_to_value = round_ratio(request.principal / request.property_price * 100)
                if request.down_payment is not None:
                    down_payment_percent = round_ratio(request.down_payment / request.property_price * 100)
        except (ArithmeticError, ValueError) as exc:
            raise ComputationError(f"Mortgage calculation failed: {exc}") from exc

    logger.debug(
        "Computed EMI %s over %d periods for principal %s at %s%%",
        payment,
        total_periods,
        request.principal,
        request.annual_rate_percent,
    )
    return AmortizationResult(
        periodic_payment=round_currency(payment),
        total_payments=total_periods,
        total_paid=round_currency(total_paid),
        total_interest=round_currency(total_interest),
        principal=request.principal,
        loan_to_value_percent=loan_to_value,
        down_payment_percent=down_payment_percent,
        schedule=schedule,
    )


def amortize(request: LoanRequest, *, preview_periods: Optional[int] = DEFAULT_PREVIEW_PERIODS) -> AmortizationResult:
    """Compute the amortization result for a ``LoanRequest``.

    ``preview_periods`` bounds the schedule (12 months by default). Pass
    ``None`` for the full life of the loan.

    Raises
    ------
    InvalidInputError
        If any field of the request is missing, non-numeric or out of range.
    ComputationError
        If the arithmetic fails on otherwise valid input.
    """
    return _compute(_normalize(request), preview_periods)


def compute_amortization(
    principal,
    annual_rate_percent,
    tenure_years,
    property_price=None,
    down_payment=None,
    *,
    preview_periods: Optional[int] = DEFAULT_PREVIEW_PERIODS,
) -> AmortizationResult:
    """Compute EMI, totals, ratios and the schedule preview of a loan.

    Parameters
    ----------
    principal:
        Financed amount, must be greater than zero.
    annual_rate_percent:
        Nominal annual rate in percent, must not be negative. A zero rate
        spreads the principal evenly over the tenure.
    tenure_years:
        Duration in years, must be positive and land on a whole month.
    property_price, down_payment:
        Optional; only used for the loan-to-value and down payment ratios.

    Numbers may be given as ``int``, ``float``, ``Decimal`` or numeric
    strings.
    """
    request = coerce_loan_request(principal, annual_rate_percent, tenure_years, property_price, down_payment)
    return _compute(request, preview_periods)


def compare_scenarios(scenarios: Sequence[LoanRequest]) -> ScenarioComparison:
    """Compute the headline numbers of several loan scenarios.

    Scenarios keep their input order and are numbered from 1. A scenario
    without a name is called ``"Scenario <n>"``. No ranking is applied.

    Validation covers the whole batch before anything is computed: one
    invalid scenario rejects the request, and the raised ``InvalidInputError``
    lists the violations of every scenario.
    """
    violations = []
    for index, scenario in enumerate(scenarios):
        violations.extend(validate_loan_request(scenario, prefix=f"scenarios[{index}]."))
    if violations:
        raise InvalidInputError(violations)

    results = []
    for index, scenario in enumerate(scenarios):
        request = _normalize(scenario)
        result = _compute(request, preview_periods=0)
        results.append(
            ScenarioResult(
                scenario_id=index + 1,
                name=request.name or f"Scenario {index + 1}",
                payment=result.periodic_payment,
                total_interest=result.total_interest,
                total_paid=result.total_paid,
                annual_rate_percent=request.annual_rate_percent,
                tenure_years=request.tenure_years,
            )
        )
    logger.debug("Compared %d mortgage scenarios", len(results))
    return ScenarioComparison(scenarios=tuple(results))
