# src/rehabpro/adapters/memory_repo.py
from threading import Lock

from rehabpro.domain.ports import SettingsRepository
from rehabpro.domain.settings import CalculationSettings


class InMemorySettingsRepository(SettingsRepository):
    """
    Settings profiles per user, held in process memory.

    A user has at most one default profile; saving a default replaces the
    previous one under the same name or demotes it to a plain profile.
    """

    def __init__(self) -> None:
        self._profiles: dict[str, dict[str, CalculationSettings]] = {}
        self._defaults: dict[str, str] = {}
        self._lock = Lock()

    def get_default(self, user_id: str) -> CalculationSettings | None:
        with self._lock:
            name = self._defaults.get(user_id)
            if name is None:
                return None
            return self._profiles[user_id][name]

    def save_default(self, user_id: str, settings: CalculationSettings) -> CalculationSettings:
        with self._lock:
            self._profiles.setdefault(user_id, {})[settings.name] = settings
            self._defaults[user_id] = settings.name
        return settings

    def list_profiles(self, user_id: str) -> list[CalculationSettings]:
        with self._lock:
            profiles = dict(self._profiles.get(user_id, {}))
            default = self._defaults.get(user_id)
        # default first, then by name
        return sorted(profiles.values(), key=lambda s: (s.name != default, s.name))
