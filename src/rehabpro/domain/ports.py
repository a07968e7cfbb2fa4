# src/rehabpro/domain/ports.py
from __future__ import annotations

from typing import Protocol

from rehabpro.domain.settings import CalculationSettings


# ----------------------------
# Settings storage
# ----------------------------

class SettingsRepository(Protocol):
    def get_default(self, user_id: str) -> CalculationSettings | None:
        ...

    def save_default(self, user_id: str, settings: CalculationSettings) -> CalculationSettings:
        ...

    def list_profiles(self, user_id: str) -> list[CalculationSettings]:
        ...
