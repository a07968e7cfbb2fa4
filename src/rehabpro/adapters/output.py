# src/rehabpro/adapters/output.py
from typing import Any

import numpy as np

from .config import config


def rounded(value: Any, digits: int | None = None) -> Any:
    """
    Round every float in a JSON-like payload for display.

    numpy scalars are unboxed first; dicts and lists are walked.
    """
    if digits is None:
        digits = config.API_ROUND_DIGITS
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, float):
        return round(value, digits)
    if isinstance(value, dict):
        return {k: rounded(v, digits) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [rounded(v, digits) for v in value]
    return value
