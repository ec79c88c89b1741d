"""PocketBase-backed remote profile store."""

from __future__ import annotations

import logging
from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

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
from placemarker.remote.pocketbase import filters
from placemarker.remote.pocketbase.client import PocketBaseClient
from placemarker.remote.pocketbase.models import CountrySelectionRecord, ProfileRecord, parse_timestamp

_LOG = logging.getLogger(__name__)

_DEFAULT_DISPLAY_NAME = "Traveler"
_NOT_VISIBLE = frozenset({403, 404})

_M = TypeVar("_M", bound=BaseModel)


class PocketBaseRemoteStore(RemoteStore):
    def __init__(
        self,
        *,
        client: PocketBaseClient,
        catalog: CountryCatalog,
        profiles_collection: str = "user_profiles",
        selections_collection: str = "country_selections",
    ) -> None:
        self._client = client
        self._catalog = catalog
        self._profiles = profiles_collection
        self._selections = selections_collection

    @property
    def auth_store(self) -> AuthStore:
        return self._client.auth_store

    async def ensure_profile(self, user_id: str) -> Profile:
        self._require_auth("ensure a profile")
        existing = await self._find_profile(user_id)
        if existing is not None:
            return existing

        try:
            created = await self._client.create(self._profiles, {"user": user_id, "shared": False})
        except RemoteError as exc:
            if not _is_unique_violation(exc):
                raise
            # Another session created it first; the uniqueness constraint on `user` decides the winner.
            _LOG.info("Profile for user %s already created concurrently", user_id)
            winner = await self._find_profile(user_id)
            if winner is None:
                raise ProfileConflictError(
                    f"profile for user {user_id} conflicted but could not be read back",
                    status=exc.status,
                    details=exc.details,
                ) from exc
            return winner

        _LOG.info("Created new user profile for %s", user_id)
        return _to_profile(_parse(ProfileRecord, created))

    async def save_selection(self, profile: Profile, code: CountryCode, name: str) -> None:
        self._require_auth("save country selections")
        existing = await self._client.get_first(
            self._selections,
            filter=filters.equals(profile=profile.profile_id, country_alpha3=code),
        )
        if existing is not None:
            return
        await self._client.create(self._selections, {"profile": profile.profile_id, "country_alpha3": code})
        _LOG.debug("Country selection saved: %s (%s)", name, code)

    async def remove_selection(self, profile: Profile, code: CountryCode) -> None:
        self._require_auth("remove country selections")
        records = await self._client.get_full_list(
            self._selections,
            filter=filters.equals(profile=profile.profile_id, country_alpha3=code),
        )
        for raw in records:
            await self._delete_selection(_parse(CountrySelectionRecord, raw).id)
        if records:
            _LOG.debug("Country selection removed: %s", code)

    async def list_selections(self, profile: Profile) -> list[SelectionRecord]:
        self._require_auth("list country selections")
        return await self._selections_for(profile.profile_id)

    async def clear_all(self, profile: Profile) -> None:
        self._require_auth("clear country selections")
        records = await self._client.get_full_list(
            self._selections, filter=filters.equals(profile=profile.profile_id)
        )

        deleted: list[str] = []
        failed: list[str] = []
        for raw in records:
            record = _parse(CountrySelectionRecord, raw)
            try:
                await self._delete_selection(record.id)
            except RemoteError as exc:
                _LOG.warning("Failed to delete selection %s: %s", record.country_alpha3, exc)
                failed.append(record.country_alpha3)
                continue
            deleted.append(record.country_alpha3)

        if failed:
            raise ClearAllPartialFailureError(
                f"cleared {len(deleted)} of {len(records)} selections",
                deleted_codes=tuple(deleted),
                failed_codes=tuple(failed),
            )
        _LOG.debug("All country selections cleared (%d)", len(deleted))

    async def set_homeland(self, profile: Profile, code: CountryCode) -> None:
        self._require_auth("set homeland")
        await self._client.update(self._profiles, profile.profile_id, {"homeland_alpha3": code})
        _LOG.debug("Homeland set: %s", code)

    async def clear_homeland(self, profile: Profile) -> None:
        self._require_auth("clear homeland")
        await self._client.update(self._profiles, profile.profile_id, {"homeland_alpha3": None})
        _LOG.debug("Homeland cleared")

    async def toggle_sharing(self, profile: Profile) -> bool:
        self._require_auth("change sharing")
        current = _parse(ProfileRecord, await self._client.get_one(self._profiles, profile.profile_id))
        updated = _parse(
            ProfileRecord,
            await self._client.update(self._profiles, profile.profile_id, {"shared": not current.shared}),
        )
        return updated.shared

    async def get_shared_profile(self, profile_id: str) -> SharedProfile | None:
        try:
            raw = await self._client.get_one(self._profiles, profile_id, expand="user")
            record = _parse(ProfileRecord, raw)
            if not record.shared:
                return None
            selections = await self._selections_for(record.id)
        except RemoteError as exc:
            if exc.status in _NOT_VISIBLE:
                return None
            raise

        profile = _to_profile(record)
        user = record.expanded_user()
        profile.display_name = (user.name if user is not None else None) or _DEFAULT_DISPLAY_NAME
        return SharedProfile(profile=profile, selections=selections)

    async def _find_profile(self, user_id: str) -> Profile | None:
        raw = await self._client.get_first(self._profiles, filter=filters.equals(user=user_id))
        return _to_profile(_parse(ProfileRecord, raw)) if raw is not None else None

    async def _selections_for(self, profile_id: str) -> list[SelectionRecord]:
        records = await self._client.get_full_list(
            self._selections, filter=filters.equals(profile=profile_id), sort="-created"
        )
        selections: list[SelectionRecord] = []
        for raw in records:
            record = _parse(CountrySelectionRecord, raw)
            name = self._catalog.name_for(record.country_alpha3)
            if name is None:
                _LOG.debug("Skipping unknown remote country code %r", record.country_alpha3)
                continue
            created_at = parse_timestamp(record.created) or utcnow()
            selections.append(SelectionRecord(code=record.country_alpha3, display_name=name, selected_at=created_at))
        return selections

    async def _delete_selection(self, record_id: str) -> None:
        try:
            await self._client.delete(self._selections, record_id)
        except RemoteError as exc:
            if exc.status != 404:
                raise

    def _require_auth(self, action: str) -> None:
        if not self.auth_store.is_valid:
            raise AuthRequiredError(f"user must be authenticated to {action}")


def _is_unique_violation(exc: RemoteError) -> bool:
    if exc.status != 400:
        return False
    field = exc.details.get("user")
    return isinstance(field, dict) and field.get("code") == "validation_not_unique"


def _to_profile(record: ProfileRecord) -> Profile:
    return Profile(
        profile_id=record.id,
        user_id=record.user,
        shared=record.shared,
        homeland_code=record.homeland_alpha3,
    )


def _parse(model: type[_M], raw: dict[str, Any]) -> _M:
    try:
        return model.model_validate(raw)
    except PydanticValidationError as exc:
        raise RemoteError(f"malformed {model.__name__} payload") from exc
