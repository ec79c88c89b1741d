"""Versioned JSON document backing the local stores."""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from placemarker.contracts.exceptions import StorageError

_LOG = logging.getLogger(__name__)


class VersionedDocument:
    """One named, versioned keyed-record store persisted as a JSON file.

    Layout on disk: ``{"name": ..., "version": ..., "records": {key: record}}``.
    Opening a lower version upgrades it in place; a higher version is refused.
    """

    def __init__(self, *, directory: Path, name: str, version: int) -> None:
        self.path = Path(directory) / f"{name}.json"
        self.name = name
        self.version = version
        self.lock = asyncio.Lock()
        self._opened = False

    @property
    def opened(self) -> bool:
        return self._opened

    async def open(self) -> None:
        async with self.lock:
            await asyncio.to_thread(self._open_sync)
            self._opened = True

    def _open_sync(self) -> None:
        if not self.path.exists():
            _LOG.debug("Creating local store %s at %s", self.name, self.path)
            self._write_sync({})
            return

        payload = self._read_payload_sync()
        stored_version = payload.get("version")
        if not isinstance(stored_version, int) or stored_version < 1:
            raise StorageError(f"local store {self.name!r} has no valid version: {self.path}")
        if stored_version > self.version:
            raise StorageError(
                f"local store {self.name!r} is version {stored_version}, newer than supported {self.version}"
            )
        if stored_version < self.version:
            _LOG.info("Upgrading local store %s from v%d to v%d", self.name, stored_version, self.version)
            self._write_sync(payload.get("records") or {})

    async def read(self) -> dict[str, Any]:
        """Return a fresh copy of the records. Callers must hold :attr:`lock` for read-modify-write."""
        self._require_open()
        payload = await asyncio.to_thread(self._read_payload_sync)
        records = payload.get("records")
        if not isinstance(records, dict):
            raise StorageError(f"local store {self.name!r} is corrupt: {self.path}")
        return records

    async def write(self, records: dict[str, Any]) -> None:
        self._require_open()
        await asyncio.to_thread(self._write_sync, records)

    def _require_open(self) -> None:
        if not self._opened:
            raise StorageError(f"local store {self.name!r} is not initialised")

    def _read_payload_sync(self) -> dict[str, Any]:
        try:
            payload: Any = json.loads(self.path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise StorageError(f"failed reading local store: {self.path}") from exc
        except json.JSONDecodeError as exc:
            raise StorageError(f"invalid JSON in local store: {self.path}") from exc
        if not isinstance(payload, dict):
            raise StorageError(f"local store {self.name!r} is corrupt: {self.path}")
        return payload

    def _write_sync(self, records: dict[str, Any]) -> None:
        document = {"name": self.name, "version": self.version, "records": records}
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{self.name}.", suffix=".tmp", dir=self.path.parent)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    json.dump(document, handle, indent=2, sort_keys=True)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StorageError(f"failed to persist local store: {self.path}") from exc
