"""Store adapter contracts."""

from __future__ import annotations

from abc import ABC, abstractmethod

from placemarker.contracts.country import CountryCode
from placemarker.contracts.selection import Profile, SelectionRecord, SharedProfile
from placemarker.contracts.settings import Preferences


class SelectionStore(ABC):
    """Device-local set of visited countries keyed by alpha-3 code."""

    @abstractmethod
    async def init(self) -> None: ...  # pragma: no cover

    @abstractmethod
    async def add(self, code: CountryCode, name: str) -> None: ...  # pragma: no cover

    @abstractmethod
    async def remove(self, code: CountryCode) -> None: ...  # pragma: no cover

    @abstractmethod
    async def list(self) -> list[SelectionRecord]: ...  # pragma: no cover

    @abstractmethod
    async def has(self, code: CountryCode) -> bool: ...  # pragma: no cover

    @abstractmethod
    async def clear(self) -> None: ...  # pragma: no cover


class SettingsStore(ABC):
    """Device-local single settings record."""

    @abstractmethod
    async def init(self) -> None: ...  # pragma: no cover

    @abstractmethod
    async def get_homeland(self) -> CountryCode | None: ...  # pragma: no cover

    @abstractmethod
    async def set_homeland(self, code: CountryCode, name: str) -> None: ...  # pragma: no cover

    @abstractmethod
    async def clear_homeland(self) -> None: ...  # pragma: no cover

    @abstractmethod
    async def is_homeland(self, code: CountryCode) -> bool: ...  # pragma: no cover

    @abstractmethod
    async def has_seen_welcome(self) -> bool: ...  # pragma: no cover

    @abstractmethod
    async def mark_welcome_seen(self) -> None: ...  # pragma: no cover

    @abstractmethod
    async def get_preferences(self) -> Preferences: ...  # pragma: no cover

    @abstractmethod
    async def set_preferences(self, preferences: Preferences) -> None: ...  # pragma: no cover


class RemoteStore(ABC):
    """Authoritative account-scoped store.

    Every operation except :meth:`get_shared_profile` requires an
    authenticated session and raises ``AuthRequiredError`` otherwise.
    Remote faults surface as ``RemoteError``; nothing is retried here.
    """

    @abstractmethod
    async def ensure_profile(self, user_id: str) -> Profile: ...  # pragma: no cover

    @abstractmethod
    async def save_selection(self, profile: Profile, code: CountryCode, name: str) -> None: ...  # pragma: no cover

    @abstractmethod
    async def remove_selection(self, profile: Profile, code: CountryCode) -> None: ...  # pragma: no cover

    @abstractmethod
    async def list_selections(self, profile: Profile) -> list[SelectionRecord]: ...  # pragma: no cover

    @abstractmethod
    async def clear_all(self, profile: Profile) -> None: ...  # pragma: no cover

    @abstractmethod
    async def set_homeland(self, profile: Profile, code: CountryCode) -> None: ...  # pragma: no cover

    @abstractmethod
    async def clear_homeland(self, profile: Profile) -> None: ...  # pragma: no cover

    @abstractmethod
    async def toggle_sharing(self, profile: Profile) -> bool: ...  # pragma: no cover

    @abstractmethod
    async def get_shared_profile(self, profile_id: str) -> SharedProfile | None: ...  # pragma: no cover
