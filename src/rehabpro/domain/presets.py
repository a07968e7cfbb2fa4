# src/rehabpro/domain/presets.py
from __future__ import annotations

from typing import Any

# Investment profiles: profit thresholds by strategy
PROFIT_PRESETS: dict[str, dict[str, float]] = {
    # lower margins, higher turnover
    "volume_flipper": {
        "profit_min_acceptable": 15_000.0,
        "profit_target": 25_000.0,
        "profit_excellent": 40_000.0,
        "profit_min_percent": 8.0,
        "profit_target_percent": 12.0,
        "profit_excellent_percent": 18.0,
    },
    "balanced": {
        "profit_min_acceptable": 25_000.0,
        "profit_target": 40_000.0,
        "profit_excellent": 60_000.0,
        "profit_min_percent": 10.0,
        "profit_target_percent": 15.0,
        "profit_excellent_percent": 22.0,
    },
    # only the best deals
    "cherry_picker": {
        "profit_min_acceptable": 40_000.0,
        "profit_target": 60_000.0,
        "profit_excellent": 100_000.0,
        "profit_min_percent": 15.0,
        "profit_target_percent": 20.0,
        "profit_excellent_percent": 30.0,
    },
}

SELLING_PRESETS: dict[str, dict[str, float]] = {
    "conservative": {
        "selling_cost_agent_commission": 6.0,
        "selling_cost_buyer_concessions": 2.0,
        "selling_cost_closing_percent": 1.0,
        "selling_cost_fixed_amount": 2_500.0,
    },
    "standard": {
        "selling_cost_agent_commission": 5.0,
        "selling_cost_buyer_concessions": 2.0,
        "selling_cost_closing_percent": 1.0,
        "selling_cost_fixed_amount": 0.0,
    },
    "aggressive": {
        "selling_cost_agent_commission": 4.0,
        "selling_cost_buyer_concessions": 1.0,
        "selling_cost_closing_percent": 1.0,
        "selling_cost_fixed_amount": 0.0,
    },
    # for sale by owner: no agent, flat marketing spend
    "fsbo": {
        "selling_cost_agent_commission": 0.0,
        "selling_cost_buyer_concessions": 2.0,
        "selling_cost_closing_percent": 1.0,
        "selling_cost_fixed_amount": 5_000.0,
    },
}

PRESET_GROUPS: dict[str, dict[str, dict[str, float]]] = {
    "profit": PROFIT_PRESETS,
    "selling": SELLING_PRESETS,
}


def get_preset(group: str, name: str) -> dict[str, Any]:
    try:
        presets = PRESET_GROUPS[group]
    except KeyError:
        raise KeyError(f"unknown preset group {group!r}") from None
    try:
        return dict(presets[name])
    except KeyError:
        raise KeyError(f"unknown {group} preset {name!r}") from None
