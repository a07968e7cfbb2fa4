# src/rehabpro/services/settings_service.py
from __future__ import annotations

from typing import Any, Mapping

from rehabpro.adapters.logging_utils import get_logger, log_context
from rehabpro.domain.errors import InvalidInputError
from rehabpro.domain.ports import SettingsRepository
from rehabpro.domain.presets import get_preset
from rehabpro.domain.settings import DEFAULT_SETTINGS, CalculationSettings, merge_settings

logger = get_logger(__name__)


def get_settings(repo: SettingsRepository, user_id: str) -> CalculationSettings:
    """
    The user's default profile, or the built-in defaults on first use.

    First use does not write anything; a profile is stored on the first update.
    """
    stored = repo.get_default(user_id)
    if stored is None:
        return DEFAULT_SETTINGS
    return stored


def update_settings(
    repo: SettingsRepository,
    user_id: str,
    updates: Mapping[str, Any],
) -> CalculationSettings:
    """
    Merge a partial update into the user's settings and store the result.

    The whole record is re-validated, so an update that breaks an ordering
    rule (e.g. good ROI threshold above excellent) is rejected with
    InvalidInputError and nothing is stored.
    """
    current = get_settings(repo, user_id)
    try:
        updated = merge_settings(current, updates)
    except InvalidInputError as err:
        logger.info(
            "settings update rejected",
            extra=log_context(user_id=user_id, fields=sorted(updates), error=str(err)),
        )
        raise

    saved = repo.save_default(user_id, updated)
    logger.info(
        "settings updated",
        extra=log_context(user_id=user_id, fields=sorted(updates)),
    )
    return saved


def apply_preset(repo: SettingsRepository, user_id: str, group: str, name: str) -> CalculationSettings:
    try:
        values = get_preset(group, name)
    except KeyError as err:
        raise InvalidInputError(str(err.args[0])) from err
    return update_settings(repo, user_id, values)
