"""Preference storage used by the HTTP layer.

The generation pipeline only reads preferences; durable storage lives in the
CRUD backend. `InMemoryPreferenceRepository` backs the standalone service and
the tests.
"""

from typing import Optional, Protocol

from smart_recipes.models.models import UserPreferenceProfile


class PreferenceRepository(Protocol):
    async def get(self, user_id: int) -> Optional[UserPreferenceProfile]:
        ...

    async def save(self, user_id: int, profile: UserPreferenceProfile) -> None:
        ...


class InMemoryPreferenceRepository:
    """Process-local preference store keyed by user id.

    Stores and returns copies so callers cannot mutate stored profiles.
    """

    def __init__(self) -> None:
        self._profiles: dict[int, UserPreferenceProfile] = {}

    async def get(self, user_id: int) -> Optional[UserPreferenceProfile]:
        profile = self._profiles.get(user_id)
        return profile.model_copy(deep=True) if profile else None

    async def save(self, user_id: int, profile: UserPreferenceProfile) -> None:
        self._profiles[user_id] = profile.model_copy(deep=True)
