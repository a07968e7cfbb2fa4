# src/rehabpro/services/validation.py

import math
from typing import Any

from rehabpro.domain.deal import DealInputs
from rehabpro.domain.errors import InvalidInputError

# Fields a deal needs before any metric is meaningful
REQUIRED_CORE_FIELDS = [
    "arv",
    "purchase_price",
    "hold_months",
]

_OPTIONAL_NUMERIC_FIELDS = [
    "rehab_budget",
    "closing_costs",
    "sqft",
    "rehab_actual",
    "rehab_forecast",
    "rehab_underwriting",
    "cash_invested",
]

# Upstream property type spellings -> internal literal
_PROPERTY_TYPE_ALIASES = {
    "sfh": "sfh",
    "sfr": "sfh",
    "single_family": "sfh",
    "single family": "sfh",
    "duplex": "duplex",
    "triplex": "triplex",
    "fourplex": "fourplex",
    "4plex": "fourplex",
    "quadplex": "fourplex",
    "townhouse": "townhouse",
    "townhome": "townhouse",
    "condo": "condo",
    "condominium": "condo",
}


def _to_num(val: Any, field_name: str) -> float:
    """
    Coerce values like:
      - 350000
      - "350000"
      - "$350,000"
      - "6"
    into float.
    """
    if val is None:
        raise InvalidInputError(f"Missing required numeric field: {field_name}")
    if isinstance(val, bool):
        raise InvalidInputError(f"Invalid type for {field_name}: bool")
    if isinstance(val, (int, float)):
        f = float(val)
    elif isinstance(val, str):
        s = val.strip().replace("$", "").replace(",", "")
        if s.endswith("%"):
            s = s[:-1]
        try:
            f = float(s)
        except ValueError:
            raise InvalidInputError(f"Invalid number for {field_name}: {val!r}")
    else:
        raise InvalidInputError(f"Invalid type for {field_name}: {type(val)}")
    # "nan" and "inf" parse as floats
    if not math.isfinite(f):
        raise InvalidInputError(f"Invalid number for {field_name}: {val!r}")
    return f


def _to_num_optional(val: Any, field_name: str) -> float | None:
    """Like _to_num, but None / blank stay None."""
    if val is None:
        return None
    if isinstance(val, str) and not val.strip():
        return None
    return _to_num(val, field_name)


def _normalize_property_type(val: Any) -> str:
    t = str(val or "sfh").strip().lower()
    if t in _PROPERTY_TYPE_ALIASES:
        return _PROPERTY_TYPE_ALIASES[t]
    if "multi" in t and "family" in t:
        return "duplex"
    raise InvalidInputError(f"Unsupported property_type: {val!r}")


def prepare_deal_inputs(raw: dict[str, Any]) -> DealInputs:
    """
    Normalize an incoming project payload into DealInputs.

    Responsibilities:
      - Ensure arv / purchase_price / hold_months exist.
      - Coerce currency-like strings.
      - Default optional amounts to 0 (budget, closing costs) or None.
      - Normalize property_type / rehab_scope spellings.

    Range checks (negative amounts) are left to the calculators.
    """
    for field in REQUIRED_CORE_FIELDS:
        if field not in raw:
            raise InvalidInputError(f"Missing required field: {field}")

    cleaned: dict[str, Any] = {
        "arv": _to_num(raw["arv"], "arv"),
        "purchase_price": _to_num(raw["purchase_price"], "purchase_price"),
        "hold_months": _to_num(raw["hold_months"], "hold_months"),
    }

    for field in _OPTIONAL_NUMERIC_FIELDS:
        cleaned[field] = _to_num_optional(raw.get(field), field)
    cleaned["rehab_budget"] = cleaned["rehab_budget"] or 0.0
    cleaned["closing_costs"] = cleaned["closing_costs"] or 0.0

    year = _to_num_optional(raw.get("year_built"), "year_built")
    cleaned["year_built"] = int(year) if year is not None else None

    cleaned["property_type"] = _normalize_property_type(raw.get("property_type"))

    scope = raw.get("rehab_scope")
    if scope is not None and str(scope).strip():
        s = str(scope).strip().lower().replace("-", "_").replace(" ", "_")
        if s not in ("cosmetic", "standard", "full_gut"):
            raise InvalidInputError(f"Unsupported rehab_scope: {scope!r}")
        cleaned["rehab_scope"] = s

    categories = raw.get("category_budgets") or {}
    if not isinstance(categories, dict):
        raise InvalidInputError("category_budgets must be an object of category -> amount")
    cleaned["category_budgets"] = {
        str(k): _to_num(v, f"category_budgets.{k}") for k, v in categories.items()
    }

    return DealInputs(**cleaned)
