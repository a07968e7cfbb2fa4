# tests/test_settings_service.py
import pytest

from rehabpro.adapters.memory_repo import InMemorySettingsRepository
from rehabpro.domain.errors import InvalidInputError
from rehabpro.domain.presets import PROFIT_PRESETS, SELLING_PRESETS
from rehabpro.domain.settings import DEFAULT_SETTINGS, CalculationSettings
from rehabpro.services.settings_service import apply_preset, get_settings, update_settings


@pytest.fixture
def repo():
    return InMemorySettingsRepository()


def test_first_use_returns_defaults_without_storing(repo):
    assert get_settings(repo, "u1") == DEFAULT_SETTINGS
    assert repo.get_default("u1") is None
    assert repo.list_profiles("u1") == []


def test_update_is_stored_and_merged(repo):
    saved = update_settings(repo, "u1", {"mao_method": "gross_margin", "contingency_default_percent": "12%"})
    assert saved.mao_method == "gross_margin"
    assert saved.contingency_default_percent == 12.0
    # untouched fields keep their defaults
    assert saved.roi_method == DEFAULT_SETTINGS.roi_method

    again = update_settings(repo, "u1", {"roi_method": "annualized"})
    assert again.mao_method == "gross_margin"
    assert get_settings(repo, "u1") == again


def test_partial_holding_items_update(repo):
    saved = update_settings(repo, "u1", {"holding_cost_items": {"hoa": 75}})
    assert saved.holding_cost_items.hoa == 75.0
    assert saved.holding_cost_items.taxes == DEFAULT_SETTINGS.holding_cost_items.taxes


def test_bad_ordering_rejected_and_nothing_stored(repo):
    update_settings(repo, "u1", {"roi_threshold_excellent": 30.0})
    with pytest.raises(InvalidInputError, match="ROI thresholds"):
        update_settings(repo, "u1", {"roi_threshold_good": 40.0})
    assert get_settings(repo, "u1").roi_threshold_good == DEFAULT_SETTINGS.roi_threshold_good
    assert get_settings(repo, "u1").roi_threshold_excellent == 30.0


def test_unknown_field_rejected(repo):
    with pytest.raises(InvalidInputError, match="unknown settings field"):
        update_settings(repo, "u1", {"mao_magic": 1})


def test_users_are_isolated(repo):
    update_settings(repo, "u1", {"mao_method": "arv_minus_all"})
    assert get_settings(repo, "u2") == DEFAULT_SETTINGS


@pytest.mark.parametrize("name", sorted(PROFIT_PRESETS))
def test_profit_presets_are_valid(repo, name):
    s = apply_preset(repo, "u1", "profit", name)
    for key, value in PROFIT_PRESETS[name].items():
        assert getattr(s, key) == value


@pytest.mark.parametrize("name", sorted(SELLING_PRESETS))
def test_selling_presets_are_valid(repo, name):
    s = apply_preset(repo, "u1", "selling", name)
    for key, value in SELLING_PRESETS[name].items():
        assert getattr(s, key) == value


@pytest.mark.parametrize("group, name", [("profit", "yolo"), ("taxes", "standard")])
def test_unknown_preset_rejected(repo, group, name):
    with pytest.raises(InvalidInputError):
        apply_preset(repo, "u1", group, name)


def test_one_default_profile_per_user(repo):
    repo.save_default("u1", CalculationSettings(name="Conservative"))
    repo.save_default("u1", CalculationSettings(name="Aggressive", mao_arv_multiplier=0.75))
    assert repo.get_default("u1").name == "Aggressive"
    assert [p.name for p in repo.list_profiles("u1")] == ["Aggressive", "Conservative"]
