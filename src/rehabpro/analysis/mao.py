# src/rehabpro/analysis/mao.py
from __future__ import annotations

from dataclasses import dataclass

from rehabpro.domain.errors import InvalidInputError, require_non_negative
from rehabpro.domain.settings import CalculationSettings


@dataclass(frozen=True)
class MaoCostBasis:
    rehab_budget: float
    contingency_amount: float
    holding_costs_total: float
    selling_costs: float
    closing_costs: float


def mao_other_costs(costs: MaoCostBasis, settings: CalculationSettings) -> float:
    """
    Costs subtracted from ARV before any profit margin.

    Rehab and contingency always count; holding, selling and closing only
    when the matching mao_include_* flag is set.
    """
    total = costs.rehab_budget + costs.contingency_amount
    if settings.mao_include_holding_costs:
        total += costs.holding_costs_total
    if settings.mao_include_selling_costs:
        total += costs.selling_costs
    if settings.mao_include_closing_costs:
        total += costs.closing_costs
    return total


def calculate_mao(arv: float, costs: MaoCostBasis, settings: CalculationSettings) -> float:
    """
    Maximum allowable offer.

    The result can be negative: that means no purchase price makes the
    deal work, and callers should present it as "no viable offer".
    """
    arv = require_non_negative(arv, "arv")

    other = mao_other_costs(costs, settings)
    method = settings.mao_method

    if method in ("seventy_rule", "custom_percentage"):
        return arv * settings.mao_arv_multiplier - other
    if method in ("arv_minus_all", "net_profit_target"):
        # both work backward from a fixed dollar profit; they only differ in presentation
        return arv - other - settings.mao_target_profit
    if method == "gross_margin":
        return arv * (1.0 - settings.mao_target_profit_percent / 100.0) - other
    raise InvalidInputError(f"unknown mao_method: {method!r}")
