"""JSON-file backed selection store."""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from placemarker.contracts.country import CountryCode, normalize_code
from placemarker.contracts.exceptions import StorageError
from placemarker.contracts.selection import SelectionRecord
from placemarker.contracts.stores import SelectionStore
from placemarker.local.document import VersionedDocument

_LOG = logging.getLogger(__name__)


class JsonSelectionStore(SelectionStore):
    def __init__(self, *, directory: Path, name: str = "placemarker-db", version: int = 1) -> None:
        self._document = VersionedDocument(directory=directory, name=name, version=version)

    @property
    def path(self) -> Path:
        return self._document.path

    async def init(self) -> None:
        await self._document.open()

    async def add(self, code: CountryCode, name: str) -> None:
        key = _key(code)
        async with self._document.lock:
            records = await self._document.read()
            existing = records.get(key)
            fields: dict[str, object] = {"code": key, "display_name": name}
            if isinstance(existing, dict):
                if existing.get("display_name") == name:
                    return
                # a rename keeps the original selection time
                if existing.get("selected_at"):
                    fields["selected_at"] = existing["selected_at"]
            try:
                record = SelectionRecord.model_validate(fields)
            except PydanticValidationError as exc:
                raise StorageError(f"invalid selection record in local store: {self.path}") from exc
            records[key] = record.model_dump(mode="json")
            await self._document.write(records)
        _LOG.debug("Stored local selection %s", key)

    async def remove(self, code: CountryCode) -> None:
        key = _key(code)
        async with self._document.lock:
            records = await self._document.read()
            if records.pop(key, None) is None:
                return
            await self._document.write(records)
        _LOG.debug("Removed local selection %s", key)

    async def list(self) -> list[SelectionRecord]:
        records = await self._document.read()
        try:
            return [SelectionRecord.model_validate(raw) for raw in records.values()]
        except PydanticValidationError as exc:
            raise StorageError(f"invalid selection record in local store: {self.path}") from exc

    async def has(self, code: CountryCode) -> bool:
        records = await self._document.read()
        return _key(code) in records

    async def clear(self) -> None:
        async with self._document.lock:
            await self._document.write({})
        _LOG.debug("Cleared local selections")


def _key(code: CountryCode) -> str:
    try:
        return normalize_code(code)
    except ValueError as exc:
        raise StorageError(str(exc)) from exc
