"""In-process remote store with the same contract as the PocketBase one."""

from __future__ import annotations

import asyncio
import itertools
from dataclasses import dataclass, field
from datetime import datetime

from placemarker.auth.store import AuthStore
from placemarker.catalog.countries import CountryCatalog
from placemarker.contracts.country import CountryCode
from placemarker.contracts.exceptions import (
    AuthRequiredError,
    ClearAllPartialFailureError,
    ProfileConflictError,
    RemoteError,
)
from placemarker.contracts.selection import Profile, SelectionRecord, SharedProfile, utcnow
from placemarker.contracts.stores import RemoteStore


@dataclass(frozen=True)
class RemoteOperation:
    """Deterministic operation log entry."""

    sequence: int
    name: str
    profile_id: str | None
    payload: dict[str, str] = field(default_factory=dict)


@dataclass
class _SelectionRow:
    id: str
    profile_id: str
    code: CountryCode
    created: datetime
    seq: int


class MemoryRemoteStore(RemoteStore):
    """Remote store kept in memory.

    Profiles are unique per ``user_id``: a second insert for the same user
    raises ``ProfileConflictError`` exactly like the server-side constraint,
    and :meth:`ensure_profile` recovers by reading the winner back.
    """

    def __init__(
        self, *, auth_store: AuthStore, catalog: CountryCatalog, display_names: dict[str, str] | None = None
    ) -> None:
        self._auth_store = auth_store
        self._catalog = catalog
        self._display_names = dict(display_names or {})
        self._ids = itertools.count(1)
        self._sequence = itertools.count(1)
        self.profiles: dict[str, Profile] = {}
        self.rows: dict[str, _SelectionRow] = {}
        self._operations: list[RemoteOperation] = []

    @property
    def operations(self) -> tuple[RemoteOperation, ...]:
        return tuple(self._operations)

    def writes(self) -> list[RemoteOperation]:
        return [op for op in self._operations if op.name not in {"list_selections", "get_shared_profile"}]

    def codes_for(self, profile_id: str) -> set[CountryCode]:
        return {row.code for row in self.rows.values() if row.profile_id == profile_id}

    async def ensure_profile(self, user_id: str) -> Profile:
        self._require_auth("ensure a profile")
        existing = self._find_profile(user_id)
        if existing is not None:
            return existing.model_copy()

        # Yield between lookup and insert, as a network round-trip would.
        await asyncio.sleep(0)
        try:
            created = self._insert_profile(user_id)
        except ProfileConflictError:
            winner = self._find_profile(user_id)
            if winner is None:  # pragma: no cover
                raise
            return winner.model_copy()
        return created.model_copy()

    async def save_selection(self, profile: Profile, code: CountryCode, name: str) -> None:
        self._require_auth("save country selections")
        self._require_profile(profile.profile_id)
        if code in self.codes_for(profile.profile_id):
            return
        seq = next(self._ids)
        row = _SelectionRow(id=f"sel-{seq}", profile_id=profile.profile_id, code=code, created=utcnow(), seq=seq)
        self.rows[row.id] = row
        self._record("save_selection", profile.profile_id, {"code": code})

    async def remove_selection(self, profile: Profile, code: CountryCode) -> None:
        self._require_auth("remove country selections")
        for row in self._rows_for(profile.profile_id):
            if row.code == code:
                await self._delete_row(row)

    async def list_selections(self, profile: Profile) -> list[SelectionRecord]:
        self._require_auth("list country selections")
        self._record("list_selections", profile.profile_id)
        return self._selections_for(profile.profile_id)

    async def clear_all(self, profile: Profile) -> None:
        self._require_auth("clear country selections")
        rows = self._rows_for(profile.profile_id)
        deleted: list[str] = []
        failed: list[str] = []
        for row in rows:
            try:
                await self._delete_row(row)
            except RemoteError:
                failed.append(row.code)
                continue
            deleted.append(row.code)
        if failed:
            raise ClearAllPartialFailureError(
                f"cleared {len(deleted)} of {len(rows)} selections",
                deleted_codes=tuple(deleted),
                failed_codes=tuple(failed),
            )

    async def set_homeland(self, profile: Profile, code: CountryCode) -> None:
        self._require_auth("set homeland")
        self._require_profile(profile.profile_id).homeland_code = code
        self._record("set_homeland", profile.profile_id, {"code": code})

    async def clear_homeland(self, profile: Profile) -> None:
        self._require_auth("clear homeland")
        self._require_profile(profile.profile_id).homeland_code = None
        self._record("clear_homeland", profile.profile_id)

    async def toggle_sharing(self, profile: Profile) -> bool:
        self._require_auth("change sharing")
        stored = self._require_profile(profile.profile_id)
        stored.shared = not stored.shared
        self._record("toggle_sharing", profile.profile_id, {"shared": str(stored.shared).lower()})
        return stored.shared

    async def get_shared_profile(self, profile_id: str) -> SharedProfile | None:
        self._record("get_shared_profile", profile_id)
        stored = self.profiles.get(profile_id)
        if stored is None or not stored.shared:
            return None
        profile = stored.model_copy(update={"display_name": self._display_names.get(stored.user_id) or "Traveler"})
        return SharedProfile(profile=profile, selections=self._selections_for(profile_id))

    async def delete_row(self, row_id: str) -> None:
        """Delete one selection row by id."""
        self.rows.pop(row_id, None)

    def _insert_profile(self, user_id: str) -> Profile:
        if self._find_profile(user_id) is not None:
            raise ProfileConflictError(f"profile for user {user_id} already exists", status=400)
        profile = Profile(profile_id=self._next_id("prof"), user_id=user_id, shared=False)
        self.profiles[profile.profile_id] = profile
        self._record("create_profile", profile.profile_id, {"user_id": user_id})
        return profile

    async def _delete_row(self, row: _SelectionRow) -> None:
        await self.delete_row(row.id)
        self._record("delete_selection", row.profile_id, {"code": row.code})

    def _find_profile(self, user_id: str) -> Profile | None:
        return next((profile for profile in self.profiles.values() if profile.user_id == user_id), None)

    def _require_profile(self, profile_id: str) -> Profile:
        stored = self.profiles.get(profile_id)
        if stored is None:
            raise RemoteError(f"profile not found: {profile_id}", status=404)
        return stored

    def _rows_for(self, profile_id: str) -> list[_SelectionRow]:
        return sorted(
            (row for row in self.rows.values() if row.profile_id == profile_id),
            key=lambda row: (row.created, row.seq),
            reverse=True,
        )

    def _selections_for(self, profile_id: str) -> list[SelectionRecord]:
        selections: list[SelectionRecord] = []
        for row in self._rows_for(profile_id):
            name = self._catalog.name_for(row.code)
            if name is not None:
                selections.append(SelectionRecord(code=row.code, display_name=name, selected_at=row.created))
        return selections

    def _next_id(self, prefix: str) -> str:
        return f"{prefix}-{next(self._ids)}"

    def _record(self, name: str, profile_id: str | None, payload: dict[str, str] | None = None) -> None:
        self._operations.append(
            RemoteOperation(sequence=next(self._sequence), name=name, profile_id=profile_id, payload=payload or {})
        )

    def _require_auth(self, action: str) -> None:
        if not self._auth_store.is_valid:
            raise AuthRequiredError(f"user must be authenticated to {action}")
