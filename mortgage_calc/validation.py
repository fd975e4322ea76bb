"""Input validation for loan requests.

Request bodies arrive as loosely typed mappings (JSON objects, CLI options).
The helpers here turn them into ``LoanRequest`` values before anything reaches
the engine. Every field is checked and every violation is collected, so a
caller sending three bad fields hears about all three.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from .data_models import FieldViolation, LoanRequest
from .errors import InvalidInputError
from .utils import to_decimal

LOAN_AMOUNT = "loanAmount"
INTEREST_RATE = "interestRate"
LOAN_TENURE = "loanTenure"
PROPERTY_PRICE = "propertyPrice"
DOWN_PAYMENT = "downPayment"
NAME = "name"

_LABELS = {
    LOAN_AMOUNT: "Loan amount",
    INTEREST_RATE: "Interest rate",
    LOAN_TENURE: "Loan tenure",
    PROPERTY_PRICE: "Property price",
    DOWN_PAYMENT: "Down payment",
}

MONTHS_PER_YEAR = Decimal(12)
MAX_TENURE_YEARS = Decimal(50)
MAX_INTEREST_RATE = Decimal(100)
MAX_AMOUNT = Decimal(10) ** 15
CENT = Decimal("0.01")


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _read_number(
    value: Any, name: str, prefix: str, violations: List[FieldViolation], *, required: bool
) -> Optional[Decimal]:
    label = _LABELS[name]
    if _is_blank(value):
        if required:
            violations.append(FieldViolation(prefix + name, f"{label} is required"))
        return None
    try:
        return to_decimal(value)
    except ValueError:
        violations.append(FieldViolation(prefix + name, f"{label} must be a number"))
        return None


def _amount_violation(value: Decimal, name: str, prefix: str) -> Optional[FieldViolation]:
    """Upper bound and cent precision shared by every money field."""
    label = _LABELS[name]
    if value > MAX_AMOUNT:
        return FieldViolation(prefix + name, f"{label} must not exceed {MAX_AMOUNT:,}")
    if value.quantize(CENT) != value:
        return FieldViolation(prefix + name, f"{label} must have at most 2 decimal places")
    return None


def _domain_violations(
    principal: Optional[Decimal],
    annual_rate_percent: Optional[Decimal],
    tenure_years: Optional[Decimal],
    property_price: Optional[Decimal],
    down_payment: Optional[Decimal],
    prefix: str,
) -> List[FieldViolation]:
    """Check value ranges; ``None`` means absent or already rejected."""
    violations: List[FieldViolation] = []
    if principal is not None:
        if principal <= 0:
            violations.append(FieldViolation(prefix + LOAN_AMOUNT, "Loan amount must be greater than 0"))
        else:
            violations.append(_amount_violation(principal, LOAN_AMOUNT, prefix))
    if annual_rate_percent is not None:
        if annual_rate_percent < 0:
            violations.append(FieldViolation(prefix + INTEREST_RATE, "Interest rate must not be negative"))
        elif annual_rate_percent > MAX_INTEREST_RATE:
            violations.append(
                FieldViolation(prefix + INTEREST_RATE, f"Interest rate must not exceed {MAX_INTEREST_RATE}%")
            )
    if tenure_years is not None:
        if tenure_years <= 0:
            violations.append(FieldViolation(prefix + LOAN_TENURE, "Loan tenure must be greater than 0"))
        elif tenure_years > MAX_TENURE_YEARS:
            violations.append(
                FieldViolation(prefix + LOAN_TENURE, f"Loan tenure must not exceed {MAX_TENURE_YEARS} years")
            )
        else:
            months = tenure_years * MONTHS_PER_YEAR
            if months != months.to_integral_value():
                violations.append(
                    FieldViolation(prefix + LOAN_TENURE, "Loan tenure must be a whole number of months")
                )
    price_ok = False
    if property_price is not None:
        if property_price <= 0:
            violations.append(FieldViolation(prefix + PROPERTY_PRICE, "Property price must be greater than 0"))
        else:
            price_violation = _amount_violation(property_price, PROPERTY_PRICE, prefix)
            violations.append(price_violation)
            price_ok = price_violation is None
    if down_payment is not None:
        if down_payment < 0:
            violations.append(FieldViolation(prefix + DOWN_PAYMENT, "Down payment must not be negative"))
        elif price_ok and down_payment > property_price:
            violations.append(
                FieldViolation(prefix + DOWN_PAYMENT, "Down payment cannot exceed the property price")
            )
        else:
            violations.append(_amount_violation(down_payment, DOWN_PAYMENT, prefix))
    return [v for v in violations if v is not None]


def _build_request(
    principal: Any,
    annual_rate_percent: Any,
    tenure_years: Any,
    property_price: Any = None,
    down_payment: Any = None,
    name: Optional[str] = None,
    prefix: str = "",
) -> Tuple[Optional[LoanRequest], List[FieldViolation]]:
    violations: List[FieldViolation] = []
    values = (
        _read_number(principal, LOAN_AMOUNT, prefix, violations, required=True),
        _read_number(annual_rate_percent, INTEREST_RATE, prefix, violations, required=True),
        _read_number(tenure_years, LOAN_TENURE, prefix, violations, required=True),
        _read_number(property_price, PROPERTY_PRICE, prefix, violations, required=False),
        _read_number(down_payment, DOWN_PAYMENT, prefix, violations, required=False),
    )
    violations.extend(_domain_violations(*values, prefix))
    # Keep the order of the request fields in the report.
    order = [prefix + f for f in (LOAN_AMOUNT, INTEREST_RATE, LOAN_TENURE, PROPERTY_PRICE, DOWN_PAYMENT)]
    violations.sort(key=lambda v: order.index(v.field) if v.field in order else len(order))
    if violations:
        return None, violations
    return LoanRequest(*values, name=name), violations


def coerce_loan_request(
    principal: Any,
    annual_rate_percent: Any,
    tenure_years: Any,
    property_price: Any = None,
    down_payment: Any = None,
    name: Optional[str] = None,
) -> LoanRequest:
    """Build a validated ``LoanRequest`` from loosely typed numbers.

    Raises
    ------
    InvalidInputError
        Listing every field that is missing, non-numeric or out of range.
    """
    request, violations = _build_request(
        principal, annual_rate_percent, tenure_years, property_price, down_payment, name
    )
    if request is None:
        raise InvalidInputError(violations)
    return request


def _read_loan_payload(payload: Any, prefix: str) -> Tuple[Optional[LoanRequest], List[FieldViolation]]:
    if not isinstance(payload, Mapping):
        field = prefix.rstrip(".") or "body"
        return None, [FieldViolation(field, "Loan details must be an object")]
    name = payload.get(NAME)
    name_violations: List[FieldViolation] = []
    if name is not None and not isinstance(name, str):
        name_violations.append(FieldViolation(prefix + NAME, "Scenario name must be a string"))
        name = None
    request, violations = _build_request(
        payload.get(LOAN_AMOUNT),
        payload.get(INTEREST_RATE),
        payload.get(LOAN_TENURE),
        payload.get(PROPERTY_PRICE),
        payload.get(DOWN_PAYMENT),
        name=(name.strip() or None) if name else None,
        prefix=prefix,
    )
    violations.extend(name_violations)
    if name_violations:
        return None, violations
    return request, violations


def parse_loan_request(payload: Mapping[str, Any]) -> LoanRequest:
    """Parse a request body using the wire field names.

    ``loanAmount``, ``interestRate`` and ``loanTenure`` are required;
    ``propertyPrice`` and ``downPayment`` are optional. ``null`` and empty
    strings count as "not given". Missing values are never replaced with
    defaults.
    """
    request, violations = _read_loan_payload(payload, "")
    if request is None:
        raise InvalidInputError(violations)
    return request


def parse_scenarios(entries: Sequence[Any]) -> List[LoanRequest]:
    """Parse every scenario of a comparison batch.

    The batch is atomic: if any scenario is invalid, ``InvalidInputError`` is
    raised with the violations of all scenarios, each field prefixed with the
    scenario position (``scenarios[0].loanAmount``).
    """
    requests: List[LoanRequest] = []
    violations: List[FieldViolation] = []
    for index, entry in enumerate(entries):
        request, entry_violations = _read_loan_payload(entry, f"scenarios[{index}].")
        violations.extend(entry_violations)
        if request is not None:
            requests.append(request)
    if violations:
        raise InvalidInputError(violations)
    return requests


def validate_loan_request(request: LoanRequest, *, prefix: str = "") -> List[FieldViolation]:
    """Return every violation of a ``LoanRequest`` built outside this module.

    The request fields may hold plain ints or floats; they are checked the
    same way as wire values.
    """
    _, violations = _build_request(
        request.principal,
        request.annual_rate_percent,
        request.tenure_years,
        request.property_price,
        request.down_payment,
        request.name,
        prefix,
    )
    return violations


__all__ = [
    "LOAN_AMOUNT",
    "INTEREST_RATE",
    "LOAN_TENURE",
    "PROPERTY_PRICE",
    "DOWN_PAYMENT",
    "coerce_loan_request",
    "parse_loan_request",
    "parse_scenarios",
    "validate_loan_request",
]
