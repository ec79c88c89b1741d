"""In-memory store fakes with spy tracking and failure injection."""

from __future__ import annotations

from placemarker.contracts.country import CountryCode
from placemarker.contracts.exceptions import RemoteError, StorageError
from placemarker.contracts.selection import Profile, SelectionRecord
from placemarker.contracts.settings import Preferences, UserSettings
from placemarker.contracts.stores import SelectionStore, SettingsStore
from placemarker.remote.memory import MemoryRemoteStore


class FakeSelectionStore(SelectionStore):
    def __init__(self, records: list[SelectionRecord] | None = None) -> None:
        self.records: dict[str, SelectionRecord] = {record.code: record for record in records or []}
        self.initialised = False
        self.fail_writes = False
        self.fail_reads = False

        self.add_calls: list[tuple[str, str]] = []
        self.remove_calls: list[str] = []
        self.clear_calls = 0

    async def init(self) -> None:
        self.initialised = True

    async def add(self, code: CountryCode, name: str) -> None:
        self.add_calls.append((code, name))
        if self.fail_writes:
            raise StorageError("disk full")
        if code not in self.records:
            self.records[code] = SelectionRecord(code=code, display_name=name)

    async def remove(self, code: CountryCode) -> None:
        self.remove_calls.append(code)
        if self.fail_writes:
            raise StorageError("disk full")
        self.records.pop(code, None)

    async def list(self) -> list[SelectionRecord]:
        if self.fail_reads:
            raise StorageError("corrupt")
        return list(self.records.values())

    async def has(self, code: CountryCode) -> bool:
        if self.fail_reads:
            raise StorageError("corrupt")
        return code in self.records

    async def clear(self) -> None:
        self.clear_calls += 1
        if self.fail_writes:
            raise StorageError("disk full")
        self.records.clear()


class FakeSettingsStore(SettingsStore):
    def __init__(self, *, homeland: tuple[str, str] | None = None) -> None:
        self.settings = UserSettings()
        if homeland is not None:
            code, name = homeland
            self.settings = self.settings.model_copy(update={"homeland_code": code, "homeland_name": name})
        self.fail_writes = False
        self.set_homeland_calls: list[tuple[str, str]] = []
        self.clear_homeland_calls = 0

    async def init(self) -> None:
        return None

    async def get_homeland(self) -> CountryCode | None:
        return self.settings.homeland_code

    async def set_homeland(self, code: CountryCode, name: str) -> None:
        self.set_homeland_calls.append((code, name))
        if self.fail_writes:
            raise StorageError("disk full")
        self.settings = self.settings.model_copy(update={"homeland_code": code, "homeland_name": name})

    async def clear_homeland(self) -> None:
        self.clear_homeland_calls += 1
        if self.fail_writes:
            raise StorageError("disk full")
        self.settings = self.settings.model_copy(update={"homeland_code": None, "homeland_name": None})

    async def is_homeland(self, code: CountryCode) -> bool:
        return self.settings.homeland_code == code

    async def has_seen_welcome(self) -> bool:
        return self.settings.has_seen_welcome

    async def mark_welcome_seen(self) -> None:
        self.settings = self.settings.model_copy(update={"has_seen_welcome": True})

    async def get_preferences(self) -> Preferences:
        return self.settings.preferences

    async def set_preferences(self, preferences: Preferences) -> None:
        self.settings = self.settings.model_copy(update={"preferences": preferences})


class FlakyRemoteStore(MemoryRemoteStore):
    """MemoryRemoteStore that fails selected operations on demand."""

    def __init__(self, **kwargs: object) -> None:
        super().__init__(**kwargs)  # type: ignore[arg-type]
        self.fail_save_codes: set[str] = set()
        self.fail_delete_codes: set[str] = set()
        self.fail_list = False
        self.fail_all_writes = False
        self.save_calls: list[str] = []

    async def list_selections(self, profile: Profile) -> list[SelectionRecord]:
        if self.fail_list:
            raise RemoteError("network unreachable")
        return await super().list_selections(profile)

    async def save_selection(self, profile: Profile, code: CountryCode, name: str) -> None:
        self.save_calls.append(code)
        if self.fail_all_writes or code in self.fail_save_codes:
            raise RemoteError(f"cannot save {code}", status=500)
        await super().save_selection(profile, code, name)

    async def set_homeland(self, profile: Profile, code: CountryCode) -> None:
        if self.fail_all_writes:
            raise RemoteError("cannot set homeland", status=500)
        await super().set_homeland(profile, code)

    async def delete_row(self, row_id: str) -> None:
        row = self.rows.get(row_id)
        if self.fail_all_writes or (row is not None and row.code in self.fail_delete_codes):
            raise RemoteError(f"cannot delete {row_id}", status=500)
        await super().delete_row(row_id)
