# src/rehabpro/analysis/costs.py
from __future__ import annotations

from collections.abc import Mapping

from rehabpro.adapters.logging_utils import get_logger, log_context
from rehabpro.domain.deal import DealInputs
from rehabpro.domain.errors import InvalidInputError, require_hold_months, require_non_negative
from rehabpro.domain.settings import CalculationSettings, ContingencyTier

logger = get_logger(__name__)

# Scope-based contingency adjustments, in percentage points
PRE_1960_ADJUSTMENT = 5.0
MULTI_FAMILY_ADJUSTMENT = 3.0
FULL_GUT_ADJUSTMENT = 2.0
COSMETIC_ADJUSTMENT = -2.0
OLD_HOUSE_YEAR = 1960


# =====================================================================
# Holding costs
# =====================================================================


def itemized_monthly(settings: CalculationSettings) -> float:
    """
    Monthly carrying cost from the itemized components.

    Loan interest, lawn care and "other" always count; taxes, insurance,
    utilities and HOA only when their include flag is on.
    """
    items = settings.holding_cost_items
    monthly = items.loan_interest + items.lawn_care + items.other
    if settings.holding_cost_include_taxes:
        monthly += items.taxes
    if settings.holding_cost_include_insurance:
        monthly += items.insurance
    if settings.holding_cost_include_utilities:
        monthly += items.utilities
    if settings.holding_cost_include_hoa:
        monthly += items.hoa
    return monthly


def loan_interest_monthly(purchase_price: float, settings: CalculationSettings) -> float:
    return purchase_price * (settings.holding_cost_loan_rate_annual / 100.0) / 12.0


def holding_cost_monthly(inputs: DealInputs, settings: CalculationSettings) -> float:
    method = settings.holding_cost_method
    if method == "flat_monthly":
        return settings.holding_cost_default_monthly
    if method == "percentage_of_loan":
        purchase = require_non_negative(inputs.purchase_price, "purchase_price")
        return loan_interest_monthly(purchase, settings)
    if method in ("itemized", "hybrid"):
        # hybrid has no distinct computation yet; it shares the itemized total
        return itemized_monthly(settings)
    raise InvalidInputError(f"unknown holding_cost_method: {method!r}")


def calculate_holding_costs(inputs: DealInputs, settings: CalculationSettings) -> float:
    """Total carrying cost over the hold period."""
    months = require_hold_months(inputs.hold_months)
    if months == 0:
        return 0.0
    return holding_cost_monthly(inputs, settings) * months


# =====================================================================
# Selling costs
# =====================================================================


def calculate_selling_costs(arv: float, settings: CalculationSettings) -> float:
    """ARV x (commission + concessions + closing)% + fixed amount."""
    arv = require_non_negative(arv, "arv")
    return arv * settings.selling_cost_total_percent / 100.0 + settings.selling_cost_fixed_amount


# =====================================================================
# Contingency
# =====================================================================


def select_tier(rehab_budget: float, tiers: tuple[ContingencyTier, ...] | list[ContingencyTier]) -> ContingencyTier:
    """
    First tier (in ascending ceiling order) whose ceiling covers the budget.
    The open-ended tier sorts last.
    """
    ordered = sorted(
        tiers,
        key=lambda t: float("inf") if t.max_budget is None else float(t.max_budget),
    )
    for tier in ordered:
        if tier.max_budget is None or tier.max_budget >= rehab_budget:
            return tier
    # validated settings always end with an open-ended tier
    raise InvalidInputError("contingency_tiers has no tier covering the budget")


def scope_based_percent(inputs: DealInputs, settings: CalculationSettings) -> float:
    pct = settings.contingency_default_percent
    if inputs.year_built is not None and inputs.year_built < OLD_HOUSE_YEAR:
        pct += PRE_1960_ADJUSTMENT
    if inputs.is_multi_family:
        pct += MULTI_FAMILY_ADJUSTMENT
    if inputs.rehab_scope == "full_gut":
        pct += FULL_GUT_ADJUSTMENT
    elif inputs.rehab_scope == "cosmetic":
        pct += COSMETIC_ADJUSTMENT
    return min(100.0, max(0.0, pct))


def category_weighted_contingency(
    category_budgets: Mapping[str, float],
    rates: Mapping[str, float],
) -> float:
    total = 0.0
    for category, amount in category_budgets.items():
        # categories without a configured rate carry no contingency
        rate = rates.get(category, 0.0)
        total += require_non_negative(amount, f"category_budgets[{category}]") * rate / 100.0
    return total


def calculate_contingency(inputs: DealInputs, settings: CalculationSettings) -> float:
    budget = require_non_negative(inputs.rehab_budget, "rehab_budget")
    method = settings.contingency_method

    if method == "flat_percent":
        amount = budget * settings.contingency_default_percent / 100.0
    elif method == "category_weighted":
        if not inputs.category_budgets and budget > 0:
            logger.debug(
                "category_weighted contingency without category breakdown",
                extra=log_context(rehab_budget=budget),
            )
        amount = category_weighted_contingency(inputs.category_budgets, settings.contingency_category_rates)
    elif method == "tiered":
        tier = select_tier(budget, settings.contingency_tiers)
        amount = budget * tier.percent / 100.0
    elif method == "scope_based":
        amount = budget * scope_based_percent(inputs, settings) / 100.0
    else:
        raise InvalidInputError(f"unknown contingency_method: {method!r}")

    return max(0.0, amount)
