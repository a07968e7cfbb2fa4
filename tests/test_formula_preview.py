# tests/test_formula_preview.py
import re

import pytest
from hypothesis import given, strategies as st

from rehabpro.analysis.formulas import algorithm_summary, preview_formula
from rehabpro.domain.errors import InvalidInputError
from rehabpro.domain.settings import CalculationSettings


def test_seventy_rule_preview_defaults():
    p = preview_formula(CalculationSettings(), "mao")
    assert p.name == "70% Rule"
    assert p.formula == "MAO = ARV × 70% - Costs"
    assert p.expanded == "MAO = ARV × 0.70 - (Rehab + Contingency + Holding + Selling + Closing)"


def test_seventy_rule_preview_lists_only_included_costs():
    s = CalculationSettings(mao_include_selling_costs=False, mao_include_closing_costs=False)
    assert preview_formula(s, "mao").expanded == "MAO = ARV × 0.70 - (Rehab + Contingency + Holding)"


def test_selling_preview_defaults():
    p = preview_formula(CalculationSettings(), "selling")
    assert p.name == "8.0% + Fixed"
    assert p.formula == "Selling = ARV × 8.0%"
    assert p.expanded == "Agent 5% + Concessions 2% + Closing 1%"


def test_selling_preview_shows_fixed_amount():
    p = preview_formula(CalculationSettings(selling_cost_fixed_amount=2_500.0), "selling")
    assert p.formula == "Selling = ARV × 8.0% + $2,500"


def test_tiered_contingency_preview_lists_bands():
    p = preview_formula(CalculationSettings(contingency_method="tiered"), "contingency")
    assert p.expanded == "Rate varies: ≤$25k: 15%, ≤$50k: 12%, ≤$100k: 10%, Above: 8%"


@pytest.mark.parametrize(
    "method, formula",
    [
        ("flat_monthly", "Holding = $1,500/mo × Months"),
        ("itemized", "Holding = $1,500/mo × Months"),
        ("percentage_of_loan", "Holding = Purchase × 12% / 12 × Months"),
    ],
)
def test_holding_preview(method, formula):
    assert preview_formula(CalculationSettings(holding_cost_method=method), "holding").formula == formula


def test_profit_preview():
    p = preview_formula(CalculationSettings(), "profit")
    assert p.formula == "Profit = ARV - Selling - Total Investment"
    assert p.expanded == "Min: $20,000 | Target: $35,000 | Excellent: $50,000"


def test_alerts_preview_enabled_and_disabled():
    on = preview_formula(CalculationSettings(), "alerts")
    assert on.formula == "Warning: 5% | Critical: 10%"
    assert on.expanded == "Monitoring: Forecast vs Underwriting, Actual vs Forecast"

    off = preview_formula(CalculationSettings(variance_alert_enabled=False), "alerts")
    assert off.formula == "Alerts Disabled"
    assert off.expanded == "Enable to set thresholds"


def test_roi_preview_mentions_annualization():
    p = preview_formula(CalculationSettings(roi_annualize=True), "roi")
    assert "12 / Months" in p.formula


def test_unknown_formula_rejected():
    with pytest.raises(InvalidInputError):
        preview_formula(CalculationSettings(), "taxes")


def test_algorithm_summary_labels_every_method():
    summary = algorithm_summary(CalculationSettings())
    assert set(summary) == {"mao", "roi", "contingency", "holding", "selling"}
    assert summary["selling"] == "8.0%"


# Numbers shown in a preview are the numbers the calculators use.

@given(pct=st.integers(min_value=0, max_value=25))
def test_flat_contingency_preview_carries_the_rate(pct):
    p = preview_formula(CalculationSettings(contingency_default_percent=pct), "contingency")
    m = re.search(r"Budget × ([\d.]+)%", p.formula)
    assert m is not None
    assert float(m.group(1)) == pct


@given(multiplier=st.integers(min_value=50, max_value=90))
def test_mao_preview_carries_the_multiplier(multiplier):
    s = CalculationSettings(mao_method="custom_percentage", mao_arv_multiplier=multiplier / 100)
    p = preview_formula(s, "mao")
    m = re.search(r"ARV × ([\d.]+) -", p.expanded)
    assert m is not None
    assert float(m.group(1)) == pytest.approx(s.mao_arv_multiplier)


@given(target=st.integers(min_value=0, max_value=500).map(lambda k: k * 1_000))
def test_net_profit_target_preview_carries_the_target(target):
    s = CalculationSettings(mao_method="net_profit_target", mao_target_profit=target)
    p = preview_formula(s, "mao")
    m = re.search(r"\$([\d,]+)$", p.formula)
    assert m is not None
    assert float(m.group(1).replace(",", "")) == target
