"""Typed errors raised by the mortgage calculator."""

from __future__ import annotations

from typing import Iterable, List

from .data_models import FieldViolation


class InvalidInputError(ValueError):
    """One or more loan fields failed validation.

    Every violated field is collected before the error is raised, so callers
    can report all of them at once.
    """

    def __init__(self, violations: Iterable[FieldViolation]) -> None:
        self.violations: List[FieldViolation] = list(violations)
        fields = ", ".join(v.field for v in self.violations) or "unknown"
        super().__init__(f"Invalid input: {fields}")

    def as_dicts(self) -> List[dict]:
        return [{"field": v.field, "message": v.message} for v in self.violations]


class ComputationError(ArithmeticError):
    """Arithmetic failed on input that had already passed validation."""


__all__ = ["InvalidInputError", "ComputationError"]
