# tests/test_settings.py
import pytest
from pydantic import ValidationError
from hypothesis import given, strategies as st

from rehabpro.domain.errors import InvalidInputError
from rehabpro.domain.settings import (
    DEFAULT_CATEGORY_RATES,
    CalculationSettings,
    load_settings,
    merge_settings,
)


def test_defaults_match_a_fresh_profile():
    s = load_settings(None)

    assert s.mao_method == "seventy_rule"
    assert s.mao_arv_multiplier == pytest.approx(0.70)
    assert s.contingency_default_percent == 10.0
    assert s.holding_cost_default_monthly == 1_500.0
    assert s.selling_cost_total_percent == pytest.approx(8.0)
    assert s.variance_warning_percent == 5.0
    assert s.variance_critical_percent == 10.0
    assert s.contingency_category_rates == DEFAULT_CATEGORY_RATES
    assert [t.max_budget for t in s.contingency_tiers] == [25_000.0, 50_000.0, 100_000.0, None]
    assert s.holding_cost_include_hoa is False


def test_percent_and_currency_strings_are_normalized():
    s = load_settings(
        {
            "contingency_default_percent": "12%",
            "mao_target_profit": "$40,000",
            "holding_cost_items": {"taxes": "300"},
        }
    )
    assert s.contingency_default_percent == 12.0
    assert s.mao_target_profit == 40_000.0
    assert s.holding_cost_items.taxes == 300.0


def test_settings_are_immutable():
    s = CalculationSettings()
    with pytest.raises(ValidationError):
        s.mao_method = "gross_margin"


@pytest.mark.parametrize(
    "overrides",
    [
        {"roi_threshold_good": 30.0},                       # good above excellent
        {"roi_threshold_fair": 15.0},                       # fair equal to good
        {"roi_threshold_poor": 12.0},                       # poor above fair
        {"profit_target": 60_000.0},                        # target above excellent
        {"profit_min_percent": 16.0},                       # min above target
        {"variance_warning_percent": 10.0},                 # warning not below critical
        {"contingency_default_percent": 30.0},              # above 25
        {"mao_arv_multiplier": 150},                        # 150% of ARV
        {"mao_arv_multiplier": -0.1},
        {"selling_cost_agent_commission": -1.0},
        {"mao_target_profit": -5_000.0},
        {"contingency_category_rates": {"demo": -3}},
        {"holding_cost_items": {"utilities": -10}},
        {"mao_method": "eighty_rule"},
    ],
)
def test_invalid_settings_are_rejected(overrides):
    with pytest.raises(InvalidInputError):
        load_settings(overrides)


@pytest.mark.parametrize(
    "tiers",
    [
        [{"max_budget": None, "percent": 10}],                                        # fewer than 2
        [{"max_budget": 50_000, "percent": 12}, {"max_budget": 100_000, "percent": 10}],  # no open tier
        [{"max_budget": None, "percent": 8}, {"max_budget": 50_000, "percent": 12}],  # open tier not last
        [
            {"max_budget": None, "percent": 8},
            {"max_budget": None, "percent": 8},
        ],                                                                            # two open tiers
        [
            {"max_budget": 50_000, "percent": 12},
            {"max_budget": 25_000, "percent": 15},
            {"max_budget": None, "percent": 8},
        ],                                                                            # decreasing
        [
            {"max_budget": 50_000, "percent": 12},
            {"max_budget": 50_000, "percent": 10},
            {"max_budget": None, "percent": 8},
        ],                                                                            # repeated ceiling
    ],
)
def test_malformed_tiers_are_rejected(tiers):
    with pytest.raises(InvalidInputError):
        load_settings({"contingency_tiers": tiers})


@st.composite
def tier_sequences(draw):
    """Random tier lists plus whether they satisfy the tier rules."""
    n = draw(st.integers(min_value=0, max_value=6))
    ceilings = draw(
        st.lists(
            st.one_of(st.none(), st.floats(min_value=1.0, max_value=1e6, allow_nan=False)),
            min_size=n,
            max_size=n,
        )
    )
    percents = draw(st.lists(st.floats(min_value=0.0, max_value=100.0), min_size=n, max_size=n))
    tiers = [{"max_budget": c, "percent": p} for c, p in zip(ceilings, percents)]

    closed = [c for c in ceilings[:-1]]
    valid = (
        n >= 2
        and ceilings[-1] is None
        and all(c is not None for c in closed)
        and all(b > a for a, b in zip(closed, closed[1:]))
    )
    return tiers, valid


@given(tier_sequences())
def test_tier_rules_hold_for_random_sequences(case):
    tiers, valid = case
    if valid:
        s = load_settings({"contingency_tiers": tiers})
        open_ended = [t for t in s.contingency_tiers if t.max_budget is None]
        assert len(open_ended) == 1
        assert s.contingency_tiers[-1].max_budget is None
    else:
        with pytest.raises(InvalidInputError):
            load_settings({"contingency_tiers": tiers})


@given(
    st.lists(
        st.floats(min_value=0.0, max_value=100.0, allow_nan=False),
        min_size=4,
        max_size=4,
    )
)
def test_roi_threshold_order_is_enforced(values):
    excellent, good, fair, poor = values
    raw = {
        "roi_threshold_excellent": excellent,
        "roi_threshold_good": good,
        "roi_threshold_fair": fair,
        "roi_threshold_poor": poor,
    }
    if excellent > good > fair > poor:
        s = load_settings(raw)
        assert s.roi_threshold_excellent > s.roi_threshold_good > s.roi_threshold_fair > s.roi_threshold_poor
    else:
        with pytest.raises(InvalidInputError):
            load_settings(raw)


def test_merge_keeps_untouched_fields_and_partial_items():
    base = CalculationSettings()
    merged = merge_settings(base, {"mao_method": "gross_margin", "holding_cost_items": {"hoa": 75}})

    assert merged.mao_method == "gross_margin"
    assert merged.holding_cost_items.hoa == 75.0
    assert merged.holding_cost_items.taxes == base.holding_cost_items.taxes
    assert merged.roi_threshold_excellent == base.roi_threshold_excellent
    # original untouched
    assert base.mao_method == "seventy_rule"


def test_merge_rejects_unknown_fields():
    with pytest.raises(InvalidInputError, match="unknown settings field"):
        merge_settings(CalculationSettings(), {"mao_methd": "gross_margin"})


@pytest.mark.parametrize("raw", ["70%", 70, "0.70", 0.7])
def test_arv_multiplier_accepts_percent_or_fraction(raw):
    assert load_settings({"mao_arv_multiplier": raw}).mao_arv_multiplier == pytest.approx(0.70)
