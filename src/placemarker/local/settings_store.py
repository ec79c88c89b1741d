"""JSON-file backed settings store holding a single record."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from placemarker.contracts.country import CountryCode, normalize_code
from placemarker.contracts.exceptions import StorageError
from placemarker.contracts.selection import utcnow
from placemarker.contracts.settings import SETTINGS_RECORD_ID, Preferences, UserSettings
from placemarker.contracts.stores import SettingsStore
from placemarker.local.document import VersionedDocument

_LOG = logging.getLogger(__name__)


class JsonSettingsStore(SettingsStore):
    """Last write wins; read-modify-write cycles are serialised by the document lock."""

    def __init__(self, *, directory: Path, name: str = "placemarker-user-settings-db", version: int = 1) -> None:
        self._document = VersionedDocument(directory=directory, name=name, version=version)

    @property
    def path(self) -> Path:
        return self._document.path

    async def init(self) -> None:
        await self._document.open()

    async def get_settings(self) -> UserSettings:
        records = await self._document.read()
        return _parse(records, self.path)

    async def get_homeland(self) -> CountryCode | None:
        return (await self.get_settings()).homeland_code

    async def set_homeland(self, code: CountryCode, name: str) -> None:
        try:
            normalized = normalize_code(code)
        except ValueError as exc:
            raise StorageError(str(exc)) from exc

        def apply(settings: UserSettings) -> UserSettings:
            return settings.model_copy(
                update={"homeland_code": normalized, "homeland_name": name, "homeland_set_at": utcnow()}
            )

        await self._update(apply)
        _LOG.debug("Stored local homeland %s", normalized)

    async def clear_homeland(self) -> None:
        await self._update(
            lambda settings: settings.model_copy(
                update={"homeland_code": None, "homeland_name": None, "homeland_set_at": None}
            )
        )

    async def is_homeland(self, code: CountryCode) -> bool:
        homeland = await self.get_homeland()
        return homeland is not None and homeland == (code or "").strip().upper()

    async def has_seen_welcome(self) -> bool:
        return (await self.get_settings()).has_seen_welcome

    async def mark_welcome_seen(self) -> None:
        await self._update(lambda settings: settings.model_copy(update={"has_seen_welcome": True}))

    async def get_preferences(self) -> Preferences:
        return (await self.get_settings()).preferences

    async def set_preferences(self, preferences: Preferences) -> None:
        await self._update(lambda settings: settings.model_copy(update={"preferences": preferences}))

    async def _update(self, apply: Callable[[UserSettings], UserSettings]) -> None:
        async with self._document.lock:
            records = await self._document.read()
            updated = apply(_parse(records, self.path)).model_copy(update={"updated_at": utcnow()})
            records[SETTINGS_RECORD_ID] = updated.model_dump(mode="json")
            await self._document.write(records)


def _parse(records: dict[str, object], path: Path) -> UserSettings:
    raw = records.get(SETTINGS_RECORD_ID)
    if raw is None:
        return UserSettings()
    try:
        return UserSettings.model_validate(raw)
    except PydanticValidationError as exc:
        raise StorageError(f"invalid settings record in local store: {path}") from exc
