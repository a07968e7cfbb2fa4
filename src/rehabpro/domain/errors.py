# src/rehabpro/domain/errors.py
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Literal


class InvalidInputError(ValueError):
    """
    Structurally invalid configuration or deal input.

    Subclasses ValueError so the HTTP layer can keep mapping plain
    ValueErrors to 400 responses.
    """


WarningCode = Literal["NEGATIVE_MAO", "ZERO_DENOMINATOR"]


@dataclass(frozen=True)
class DegenerateResultWarning:
    """
    Non-fatal note attached to DealMetrics.

    A "bad deal" is never an exception: the metric resolves to a defined
    number (0 ROI, negative MAO) and the caller gets one of these instead.
    """
    code: WarningCode
    message: str
    context: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "context": dict(self.context)}


# ----------------------------
# Input guards
# ----------------------------

def require_non_negative(value: float, name: str) -> float:
    """Finite and >= 0, or InvalidInputError."""
    v = float(value)
    if not math.isfinite(v):
        raise InvalidInputError(f"{name} must be a finite number, got {v}")
    if v < 0:
        raise InvalidInputError(f"{name} must be non-negative, got {v}")
    return v


def require_hold_months(hold_months: float | None) -> float:
    if hold_months is None:
        raise InvalidInputError("hold_months is required")
    return require_non_negative(hold_months, "hold_months")
