# src/rehabpro/analysis/formulas.py
"""
Human-readable formula strings for the settings screen.

Display only; nothing here feeds a calculation. The numbers embedded in the
text are the same settings values the calculators use, so a preview never
disagrees with the computed metrics at display precision.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Callable, Literal

from rehabpro.analysis.costs import itemized_monthly
from rehabpro.domain.errors import InvalidInputError
from rehabpro.domain.settings import (
    CONTINGENCY_METHOD_LABELS,
    HOLDING_COST_METHOD_LABELS,
    MAO_METHOD_LABELS,
    ROI_METHOD_LABELS,
    CalculationSettings,
)

FormulaKind = Literal["mao", "roi", "contingency", "holding", "selling", "profit", "alerts"]


@dataclass(frozen=True)
class FormulaPreview:
    name: str
    formula: str
    expanded: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _money(v: float) -> str:
    """30000 -> '30,000', 1500.5 -> '1,500.5'."""
    return f"{v:,.3f}".rstrip("0").rstrip(".")


def _num(v: float) -> str:
    """12.0 -> '12', 12.5 -> '12.5'."""
    f = float(v)
    if f.is_integer():
        return str(int(f))
    return repr(f)


def _mao(s: CalculationSettings) -> FormulaPreview:
    method = s.mao_method
    if method == "seventy_rule":
        gated = "".join(
            part
            for flag, part in (
                (s.mao_include_holding_costs, " + Holding"),
                (s.mao_include_selling_costs, " + Selling"),
                (s.mao_include_closing_costs, " + Closing"),
            )
            if flag
        )
        return FormulaPreview(
            name=MAO_METHOD_LABELS[method],
            formula=f"MAO = ARV × {s.mao_arv_multiplier * 100:.0f}% - Costs",
            expanded=f"MAO = ARV × {s.mao_arv_multiplier:.2f} - (Rehab + Contingency{gated})",
        )
    if method == "custom_percentage":
        return FormulaPreview(
            name=MAO_METHOD_LABELS[method],
            formula=f"MAO = ARV × {s.mao_arv_multiplier * 100:.0f}% - Costs",
            expanded=f"MAO = ARV × {s.mao_arv_multiplier:.2f} - TotalCosts",
        )
    if method == "arv_minus_all":
        return FormulaPreview(
            name=MAO_METHOD_LABELS[method],
            formula=f"MAO = ARV - AllCosts - ${_money(s.mao_target_profit)}",
            expanded="MAO = ARV - TotalCosts - TargetProfit",
        )
    if method == "gross_margin":
        return FormulaPreview(
            name=MAO_METHOD_LABELS[method],
            formula=f"MAO = ARV × {100 - s.mao_target_profit_percent:.0f}% - Costs",
            expanded=f"MAO = ARV × (1 - {_num(s.mao_target_profit_percent)}%) - TotalCosts",
        )
    # net_profit_target
    return FormulaPreview(
        name=MAO_METHOD_LABELS[method],
        formula=f"MAO = ARV - Costs - ${_money(s.mao_target_profit)}",
        expanded="Working backward from desired profit",
    )


def _roi(s: CalculationSettings) -> FormulaPreview:
    method = s.roi_method
    annualized = " × (12 / Months)" if s.roi_annualize else ""
    if method == "simple":
        preview = FormulaPreview(
            name=ROI_METHOD_LABELS[method],
            formula=f"ROI = Profit / Investment{annualized} × 100",
            expanded="ROI = (ARV - Selling - TotalInvestment) / TotalInvestment × 100",
        )
    elif method == "annualized":
        preview = FormulaPreview(
            name=ROI_METHOD_LABELS[method],
            formula="ROI = (Profit / Investment) × (12 / Months) × 100",
            expanded="Projects return to annual rate for comparison",
        )
    elif method == "cash_on_cash":
        preview = FormulaPreview(
            name=ROI_METHOD_LABELS[method],
            formula=f"CoC = Profit / Cash Invested{annualized} × 100",
            expanded="Measures return relative to cash deployed (total investment when cash invested is not tracked)",
        )
    else:
        preview = FormulaPreview(
            name=ROI_METHOD_LABELS[method],
            formula="IRR ≈ Annualized Return",
            expanded="Approximated internal rate of return",
        )

    if s.roi_include_opportunity_cost:
        preview = FormulaPreview(
            name=preview.name,
            formula=preview.formula,
            expanded=f"{preview.expanded}; Profit net of {_num(s.roi_opportunity_rate)}%/yr opportunity cost",
        )
    return preview


def _contingency(s: CalculationSettings) -> FormulaPreview:
    method = s.contingency_method
    if method == "flat_percent":
        return FormulaPreview(
            name=CONTINGENCY_METHOD_LABELS[method],
            formula=f"Contingency = Budget × {_num(s.contingency_default_percent)}%",
            expanded="Single rate applied to entire rehab budget",
        )
    if method == "category_weighted":
        return FormulaPreview(
            name=CONTINGENCY_METHOD_LABELS[method],
            formula="Contingency = Σ(Category × Rate)",
            expanded="Different rates for high/medium/low risk categories",
        )
    if method == "tiered":
        bands = ", ".join(
            f"≤${t.max_budget / 1000:.0f}k: {_num(t.percent)}%" if t.max_budget else f"Above: {_num(t.percent)}%"
            for t in s.contingency_tiers
        )
        return FormulaPreview(
            name=CONTINGENCY_METHOD_LABELS[method],
            formula="Contingency = Budget × TierRate",
            expanded=f"Rate varies: {bands}",
        )
    return FormulaPreview(
        name=CONTINGENCY_METHOD_LABELS[method],
        formula=f"Contingency = Budget × ({_num(s.contingency_default_percent)}% ± Adjustments)",
        expanded="Adjusted for property age, type, and scope",
    )


def _holding(s: CalculationSettings) -> FormulaPreview:
    method = s.holding_cost_method
    if method == "flat_monthly":
        return FormulaPreview(
            name=HOLDING_COST_METHOD_LABELS[method],
            formula=f"Holding = ${_money(s.holding_cost_default_monthly)}/mo × Months",
            expanded="Fixed monthly amount for all carrying costs",
        )
    if method == "itemized":
        return FormulaPreview(
            name=HOLDING_COST_METHOD_LABELS[method],
            formula=f"Holding = ${_money(itemized_monthly(s))}/mo × Months",
            expanded="Sum of: taxes, insurance, utilities, interest, etc.",
        )
    if method == "percentage_of_loan":
        return FormulaPreview(
            name=HOLDING_COST_METHOD_LABELS[method],
            formula=f"Holding = Purchase × {_num(s.holding_cost_loan_rate_annual)}% / 12 × Months",
            expanded="Based on annual interest rate of loan",
        )
    return FormulaPreview(
        name=HOLDING_COST_METHOD_LABELS[method],
        formula=f"Holding = ${_money(itemized_monthly(s))}/mo × Months",
        expanded="Base rate plus variable components",
    )


def _selling(s: CalculationSettings) -> FormulaPreview:
    total = s.selling_cost_total_percent
    fixed = f" + ${_money(s.selling_cost_fixed_amount)}" if s.selling_cost_fixed_amount > 0 else ""
    return FormulaPreview(
        name=f"{total:.1f}% + Fixed",
        formula=f"Selling = ARV × {total:.1f}%{fixed}",
        expanded=(
            f"Agent {_num(s.selling_cost_agent_commission)}%"
            f" + Concessions {_num(s.selling_cost_buyer_concessions)}%"
            f" + Closing {_num(s.selling_cost_closing_percent)}%"
        ),
    )


def _profit(s: CalculationSettings) -> FormulaPreview:
    return FormulaPreview(
        name="Profit Analysis",
        formula="Profit = ARV - Selling - Total Investment",
        expanded=(
            f"Min: ${_money(s.profit_min_acceptable)}"
            f" | Target: ${_money(s.profit_target)}"
            f" | Excellent: ${_money(s.profit_excellent)}"
        ),
    )


def _alerts(s: CalculationSettings) -> FormulaPreview:
    if not s.variance_alert_enabled:
        return FormulaPreview(
            name="Variance Alerts",
            formula="Alerts Disabled",
            expanded="Enable to set thresholds",
        )
    watched = [
        label
        for flag, label in (
            (s.variance_alert_on_forecast, "Forecast vs Underwriting"),
            (s.variance_alert_on_actual, "Actual vs Forecast"),
        )
        if flag
    ]
    return FormulaPreview(
        name="Variance Alerts",
        formula=f"Warning: {_num(s.variance_warning_percent)}% | Critical: {_num(s.variance_critical_percent)}%",
        expanded=f"Monitoring: {', '.join(watched) or 'None'}",
    )


_RENDERERS: dict[str, Callable[[CalculationSettings], FormulaPreview]] = {
    "mao": _mao,
    "roi": _roi,
    "contingency": _contingency,
    "holding": _holding,
    "selling": _selling,
    "profit": _profit,
    "alerts": _alerts,
}


def preview_formula(settings: CalculationSettings, which: str) -> FormulaPreview:
    renderer = _RENDERERS.get(which)
    if renderer is None:
        raise InvalidInputError(
            f"unknown formula {which!r}; expected one of {', '.join(_RENDERERS)}"
        )
    return renderer(settings)


def algorithm_summary(settings: CalculationSettings) -> dict[str, str]:
    """One label per configured method, as shown under the formula card."""
    return {
        "mao": MAO_METHOD_LABELS[settings.mao_method],
        "roi": ROI_METHOD_LABELS[settings.roi_method],
        "contingency": CONTINGENCY_METHOD_LABELS[settings.contingency_method],
        "holding": HOLDING_COST_METHOD_LABELS[settings.holding_cost_method],
        "selling": f"{settings.selling_cost_total_percent:.1f}%",
    }
