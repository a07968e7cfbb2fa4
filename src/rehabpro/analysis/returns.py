# src/rehabpro/analysis/returns.py
from __future__ import annotations

from dataclasses import dataclass

from rehabpro.domain.deal import DealInputs, ProfitClass, RoiClass
from rehabpro.domain.errors import InvalidInputError, require_non_negative
from rehabpro.domain.settings import CalculationSettings


@dataclass(frozen=True)
class RoiResult:
    roi: float                # percent
    zero_denominator: bool    # True when a 0 divisor forced roi to 0
    opportunity_cost: float   # deducted from profit before the ratio


def rehab_spend(inputs: DealInputs) -> float:
    """Actual rehab spend once there is any, otherwise the working budget."""
    if inputs.rehab_actual is not None:
        actual = require_non_negative(inputs.rehab_actual, "rehab_actual")
        if actual > 0:
            return actual
    return require_non_negative(inputs.rehab_budget, "rehab_budget")


def total_investment(inputs: DealInputs, contingency_amount: float, holding_costs_total: float) -> float:
    return (
        inputs.purchase_price
        + inputs.closing_costs
        + rehab_spend(inputs)
        + contingency_amount
        + holding_costs_total
    )


def gross_profit(arv: float, selling_costs: float, investment: float) -> float:
    return arv - selling_costs - investment


def profit_margin(profit: float, arv: float) -> float:
    """Profit as a percent of ARV (0 without an ARV)."""
    if arv <= 0:
        return 0.0
    return profit / arv * 100.0


def opportunity_cost(investment: float, hold_months: float, settings: CalculationSettings) -> float:
    """Return the same capital would have earned elsewhere over the hold."""
    if not settings.roi_include_opportunity_cost:
        return 0.0
    return investment * (settings.roi_opportunity_rate / 100.0) * (hold_months / 12.0)


def _annualize(roi: float, hold_months: float) -> tuple[float, bool]:
    if hold_months <= 0:
        return 0.0, True
    return roi * (12.0 / hold_months), False


def calculate_roi(
    profit: float,
    investment: float,
    hold_months: float | None,
    settings: CalculationSettings,
    *,
    cash_invested: float | None = None,
) -> RoiResult:
    """
    ROI in percent by the configured method.

    Never raises for a zero divisor: the ROI is 0 and `zero_denominator`
    is set so the caller can surface it.
    """
    months = 0.0 if hold_months is None else require_non_negative(hold_months, "hold_months")
    if cash_invested is not None:
        cash_invested = require_non_negative(cash_invested, "cash_invested")

    if investment <= 0:
        return RoiResult(roi=0.0, zero_denominator=True, opportunity_cost=0.0)

    opp = opportunity_cost(investment, months, settings)
    net = profit - opp
    simple = net / investment * 100.0
    method = settings.roi_method

    if method == "simple":
        if settings.roi_annualize:
            roi, zero = _annualize(simple, months)
            return RoiResult(roi=roi, zero_denominator=zero, opportunity_cost=opp)
        return RoiResult(roi=simple, zero_denominator=False, opportunity_cost=opp)

    if method in ("annualized", "irr_simplified"):
        # irr_simplified is approximated by the annualized return
        roi, zero = _annualize(simple, months)
        return RoiResult(roi=roi, zero_denominator=zero, opportunity_cost=opp)

    if method == "cash_on_cash":
        base = cash_invested if cash_invested is not None and cash_invested > 0 else investment
        coc = net / base * 100.0
        if settings.roi_annualize:
            roi, zero = _annualize(coc, months)
            return RoiResult(roi=roi, zero_denominator=zero, opportunity_cost=opp)
        return RoiResult(roi=coc, zero_denominator=False, opportunity_cost=opp)

    raise InvalidInputError(f"unknown roi_method: {method!r}")


# =====================================================================
# Threshold classification
# =====================================================================


def classify_roi(roi: float, settings: CalculationSettings) -> RoiClass:
    if roi >= settings.roi_threshold_excellent:
        return "excellent"
    if roi >= settings.roi_threshold_good:
        return "good"
    if roi >= settings.roi_threshold_fair:
        return "fair"
    return "poor"


def classify_profit(profit: float, settings: CalculationSettings) -> ProfitClass:
    if profit >= settings.profit_excellent:
        return "excellent"
    if profit >= settings.profit_target:
        return "target"
    if profit >= settings.profit_min_acceptable:
        return "acceptable"
    return "pass"


def classify_margin(margin: float, settings: CalculationSettings) -> ProfitClass:
    if margin >= settings.profit_excellent_percent:
        return "excellent"
    if margin >= settings.profit_target_percent:
        return "target"
    if margin >= settings.profit_min_percent:
        return "acceptable"
    return "pass"
