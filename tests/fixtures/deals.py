# tests/fixtures/deals.py

from rehabpro.domain.deal import DealInputs
from rehabpro.domain.settings import CalculationSettings


def reference_settings(**overrides) -> CalculationSettings:
    """
    The worked example from the settings screen:
      10% flat contingency, $1,500/mo holding, 8% selling, 70% rule.
    """
    base = dict(
        mao_method="seventy_rule",
        mao_arv_multiplier=0.70,
        mao_include_holding_costs=True,
        mao_include_selling_costs=True,
        mao_include_closing_costs=True,
        contingency_method="flat_percent",
        contingency_default_percent=10.0,
        holding_cost_method="flat_monthly",
        holding_cost_default_monthly=1_500.0,
        selling_cost_agent_commission=5.0,
        selling_cost_buyer_concessions=2.0,
        selling_cost_closing_percent=1.0,
        selling_cost_fixed_amount=0.0,
    )
    base.update(overrides)
    return CalculationSettings(**base)


def reference_deal(**overrides) -> DealInputs:
    """
    350k ARV / 200k purchase / 50k rehab / 6 month hold, no closing costs.
    Expected under reference_settings():
      contingency 5,000, holding 9,000, selling 28,000, MAO 153,000
    """
    base = dict(
        arv=350_000.0,
        purchase_price=200_000.0,
        rehab_budget=50_000.0,
        closing_costs=0.0,
        hold_months=6,
        sqft=1_600.0,
        year_built=1985,
        property_type="sfh",
    )
    base.update(overrides)
    return DealInputs(**base)


def empty_deal(**overrides) -> DealInputs:
    """Nothing bought, nothing spent: total investment is exactly zero."""
    base = dict(
        arv=0.0,
        purchase_price=0.0,
        rehab_budget=0.0,
        closing_costs=0.0,
        hold_months=0,
    )
    base.update(overrides)
    return DealInputs(**base)


def raw_deal_payload() -> dict:
    """The reference deal as it arrives from a form: strings and currency symbols."""
    return {
        "arv": "$350,000",
        "purchase_price": "200000",
        "rehab_budget": 50000,
        "closing_costs": "",
        "hold_months": "6",
        "property_type": "Single Family",
        "year_built": "1985",
    }
