# tests/test_mao.py
import pytest

from rehabpro.analysis.mao import MaoCostBasis, calculate_mao, mao_other_costs
from rehabpro.domain.errors import InvalidInputError

from fixtures.deals import reference_settings

# reference deal cost components under reference_settings()
REFERENCE_COSTS = MaoCostBasis(
    rehab_budget=50_000.0,
    contingency_amount=5_000.0,
    holding_costs_total=9_000.0,
    selling_costs=28_000.0,
    closing_costs=0.0,
)


@pytest.mark.parametrize(
    "overrides, expected",
    [
        ({"mao_method": "seventy_rule"}, 153_000.0),
        ({"mao_method": "custom_percentage", "mao_arv_multiplier": 0.65}, 135_500.0),
        ({"mao_method": "arv_minus_all", "mao_target_profit": 30_000.0}, 228_000.0),
        ({"mao_method": "net_profit_target", "mao_target_profit": 30_000.0}, 228_000.0),
        ({"mao_method": "gross_margin", "mao_target_profit_percent": 15.0}, 205_500.0),
    ],
)
def test_mao_methods(overrides, expected):
    assert calculate_mao(350_000.0, REFERENCE_COSTS, reference_settings(**overrides)) == pytest.approx(expected)


def test_inclusion_flags_gate_holding_selling_closing():
    costs = MaoCostBasis(
        rehab_budget=50_000.0,
        contingency_amount=5_000.0,
        holding_costs_total=9_000.0,
        selling_costs=28_000.0,
        closing_costs=4_000.0,
    )
    s = reference_settings(
        mao_include_holding_costs=False,
        mao_include_selling_costs=False,
        mao_include_closing_costs=False,
    )
    assert mao_other_costs(costs, s) == pytest.approx(55_000.0)
    assert calculate_mao(350_000.0, costs, s) == pytest.approx(245_000.0 - 55_000.0)

    only_closing = reference_settings(
        mao_include_holding_costs=False,
        mao_include_selling_costs=False,
        mao_include_closing_costs=True,
    )
    assert mao_other_costs(costs, only_closing) == pytest.approx(59_000.0)


def test_mao_can_go_negative():
    costs = MaoCostBasis(
        rehab_budget=80_000.0,
        contingency_amount=8_000.0,
        holding_costs_total=9_000.0,
        selling_costs=8_000.0,
        closing_costs=0.0,
    )
    assert calculate_mao(100_000.0, costs, reference_settings()) == pytest.approx(-35_000.0)


def test_zero_arv_gives_minus_costs():
    assert calculate_mao(0.0, REFERENCE_COSTS, reference_settings()) == pytest.approx(-92_000.0)


def test_negative_arv_rejected():
    with pytest.raises(InvalidInputError):
        calculate_mao(-1.0, REFERENCE_COSTS, reference_settings())
