# src/rehabpro/services/deal_metrics.py
from __future__ import annotations

from typing import Any

from rehabpro.adapters.logging_utils import get_logger, log_context
from rehabpro.analysis.costs import calculate_contingency, calculate_holding_costs, calculate_selling_costs
from rehabpro.analysis.mao import MaoCostBasis, calculate_mao
from rehabpro.analysis.returns import (
    calculate_roi,
    classify_margin,
    classify_profit,
    classify_roi,
    gross_profit,
    profit_margin,
    total_investment,
)
from rehabpro.domain.deal import DealInputs, DealMetrics
from rehabpro.domain.errors import DegenerateResultWarning, require_hold_months, require_non_negative
from rehabpro.domain.settings import CalculationSettings, load_settings
from rehabpro.services.validation import prepare_deal_inputs

logger = get_logger(__name__)


def compute_deal_metrics(settings: CalculationSettings, inputs: DealInputs) -> DealMetrics:
    """
    Evaluate one deal under one settings profile.

    Pure: the same (settings, inputs) pair always yields an identical
    DealMetrics. Bad-deal outcomes (negative MAO, zero investment) come back
    as numbers plus warnings; only invalid inputs raise InvalidInputError.
    """
    require_non_negative(inputs.arv, "arv")
    require_non_negative(inputs.purchase_price, "purchase_price")
    require_non_negative(inputs.closing_costs, "closing_costs")
    require_non_negative(inputs.rehab_budget, "rehab_budget")
    require_hold_months(inputs.hold_months)

    # --- 1. Cost components -------------------------------------------------
    contingency = calculate_contingency(inputs, settings)
    holding = calculate_holding_costs(inputs, settings)
    selling = calculate_selling_costs(inputs.arv, settings)

    # --- 2. Offer ceiling -----------------------------------------------------
    mao = calculate_mao(
        inputs.arv,
        MaoCostBasis(
            rehab_budget=inputs.rehab_budget,
            contingency_amount=contingency,
            holding_costs_total=holding,
            selling_costs=selling,
            closing_costs=inputs.closing_costs,
        ),
        settings,
    )

    # --- 3. Returns -----------------------------------------------------------
    investment = total_investment(inputs, contingency, holding)
    profit = gross_profit(inputs.arv, selling, investment)
    roi = calculate_roi(
        profit,
        investment,
        inputs.hold_months,
        settings,
        cash_invested=inputs.cash_invested,
    )
    margin = profit_margin(profit, inputs.arv)

    warnings: list[DegenerateResultWarning] = []
    if mao < 0:
        warnings.append(
            DegenerateResultWarning(
                code="NEGATIVE_MAO",
                message="No purchase price makes this deal work under the current settings.",
                context={"mao": mao, "arv": inputs.arv},
            )
        )
    if roi.zero_denominator:
        warnings.append(
            DegenerateResultWarning(
                code="ZERO_DENOMINATOR",
                message="ROI set to 0 because its divisor is zero.",
                context={
                    "roi_method": settings.roi_method,
                    "total_investment": investment,
                    "hold_months": inputs.hold_months,
                },
            )
        )

    metrics = DealMetrics(
        contingency_amount=contingency,
        holding_costs_total=holding,
        selling_costs=selling,
        mao=mao,
        total_investment=investment,
        gross_profit=profit,
        roi=roi.roi,
        profit_classification=classify_profit(profit, settings),
        roi_classification=classify_roi(roi.roi, settings),
        rehab_budget_with_contingency=inputs.rehab_budget + contingency,
        profit_margin=margin,
        margin_classification=classify_margin(margin, settings),
        spread=(mao - inputs.purchase_price) if inputs.purchase_price > 0 else None,
        warnings=tuple(warnings),
    )

    logger.debug(
        "deal metrics computed",
        extra=log_context(
            mao_method=settings.mao_method,
            roi_method=settings.roi_method,
            mao=mao,
            roi=roi.roi,
            gross_profit=profit,
            warnings=[w.code for w in warnings],
        ),
    )
    return metrics


def evaluate_payload(raw_deal: dict[str, Any], raw_settings: dict[str, Any] | None = None) -> DealMetrics:
    """Raw dicts in, metrics out. Used by the HTTP and CLI entrypoints."""
    settings = load_settings(raw_settings)
    inputs = prepare_deal_inputs(raw_deal)
    return compute_deal_metrics(settings, inputs)
