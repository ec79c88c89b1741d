"""User-initiated mutations: select, deselect, clear, homeland and sharing."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from placemarker.auth.store import AuthStore
from placemarker.catalog.countries import CountryCatalog
from placemarker.contracts.country import CountryCode, normalize_code
from placemarker.contracts.exceptions import AuthRequiredError, RemoteError, StorageError, ValidationError
from placemarker.contracts.selection import Profile, SelectionRecord
from placemarker.contracts.stores import RemoteStore, SelectionStore, SettingsStore
from placemarker.contracts.sync import MutationAction, MutationOutcome, SyncStatus
from placemarker.state import SelectionState

_LOG = logging.getLogger(__name__)


class MutationHandlers:
    """Two-phase mutation contract.

    Each handler validates first, then updates :class:`SelectionState` and
    the Local Store, then (when signed in) mirrors the change to the Remote
    Store. A failed mirror is logged and reported on the returned
    :class:`MutationOutcome`; the local change is never rolled back.
    """

    def __init__(
        self,
        *,
        selection_store: SelectionStore,
        settings_store: SettingsStore,
        remote_store: RemoteStore,
        auth_store: AuthStore,
        catalog: CountryCatalog,
        state: SelectionState,
    ) -> None:
        self._selection_store = selection_store
        self._settings_store = settings_store
        self._remote_store = remote_store
        self._auth_store = auth_store
        self._catalog = catalog
        self._state = state

    @property
    def signed_in(self) -> bool:
        return self._auth_store.current_user is not None

    async def select(self, code: str) -> MutationOutcome:
        country = self._catalog.require(code)
        if await self._is_homeland(country.alpha3):
            raise ValidationError(f"{country.name} is the homeland and cannot be marked visited")

        outcome = MutationOutcome(action=MutationAction.SELECT, code=country.alpha3)
        self._state.add(SelectionRecord(code=country.alpha3, display_name=country.name))
        await self._local(outcome, self._selection_store.add(country.alpha3, country.name))
        await self._mirror(
            outcome, lambda profile: self._remote_store.save_selection(profile, country.alpha3, country.name)
        )
        return outcome

    async def deselect(self, code: str) -> MutationOutcome:
        try:
            normalized = normalize_code(code)
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc
        outcome = MutationOutcome(action=MutationAction.DESELECT, code=normalized)
        self._state.remove(normalized)
        await self._local(outcome, self._selection_store.remove(normalized))
        await self._mirror(outcome, lambda profile: self._remote_store.remove_selection(profile, normalized))
        return outcome

    async def toggle(self, code: str) -> MutationOutcome:
        country = self._catalog.require(code)
        if self._state.is_selected(country.alpha3):
            return await self.deselect(country.alpha3)
        return await self.select(country.alpha3)

    async def clear_all(self) -> MutationOutcome:
        outcome = MutationOutcome(action=MutationAction.CLEAR_ALL)
        self._state.clear_selections()
        await self._local(outcome, self._selection_store.clear())
        await self._mirror(outcome, self._remote_store.clear_all)
        return outcome

    async def set_homeland(self, code: str) -> MutationOutcome:
        country = self._catalog.require(code)
        outcome = MutationOutcome(action=MutationAction.SET_HOMELAND, code=country.alpha3)

        evict = self._state.is_selected(country.alpha3)
        if not evict:
            try:
                evict = await self._selection_store.has(country.alpha3)
            except StorageError as exc:
                _LOG.warning("Could not check local selection for %s: %s", country.alpha3, exc)
        if evict:
            outcome.evicted_code = country.alpha3
            self._state.remove(country.alpha3)
        self._state.set_homeland(country)

        async def write_local() -> None:
            await self._settings_store.set_homeland(country.alpha3, country.name)
            if evict:
                await self._selection_store.remove(country.alpha3)

        async def write_remote(profile: Profile) -> None:
            await self._remote_store.set_homeland(profile, country.alpha3)
            profile.homeland_code = country.alpha3
            if evict:
                await self._remote_store.remove_selection(profile, country.alpha3)

        await self._local(outcome, write_local())
        await self._mirror(outcome, write_remote)
        return outcome

    async def clear_homeland(self) -> MutationOutcome:
        outcome = MutationOutcome(action=MutationAction.CLEAR_HOMELAND)
        self._state.set_homeland(None)

        async def write_remote(profile: Profile) -> None:
            await self._remote_store.clear_homeland(profile)
            profile.homeland_code = None

        await self._local(outcome, self._settings_store.clear_homeland())
        await self._mirror(outcome, write_remote)
        return outcome

    async def toggle_sharing(self) -> MutationOutcome:
        """Flip the profile's public sharing flag. Remote only; requires a session."""
        if not self.signed_in:
            raise AuthRequiredError("user must be authenticated to change sharing")

        outcome = MutationOutcome(action=MutationAction.TOGGLE_SHARING)

        async def write_remote(profile: Profile) -> None:
            shared = await self._remote_store.toggle_sharing(profile)
            profile.shared = shared
            outcome.shared = shared
            self._state.set_profile(profile)

        await self._mirror(outcome, write_remote)
        return outcome

    async def _is_homeland(self, code: CountryCode) -> bool:
        if self._state.is_homeland(code):
            return True
        try:
            return await self._settings_store.is_homeland(code)
        except StorageError as exc:
            _LOG.warning("Could not read local homeland: %s", exc)
            return False

    async def _local(self, outcome: MutationOutcome, write: Awaitable[None]) -> None:
        try:
            await write
        except StorageError as exc:
            _LOG.warning("Local %s failed: %s", outcome.action, exc)
            outcome.local = SyncStatus.FAILED
            outcome.error = str(exc)
            return
        outcome.local = SyncStatus.APPLIED

    async def _mirror(self, outcome: MutationOutcome, write: Callable[[Profile], Awaitable[None]]) -> None:
        if not self.signed_in:
            return
        try:
            profile = await self._profile()
            await write(profile)
        except (RemoteError, AuthRequiredError) as exc:
            _LOG.warning("Remote %s failed; local change kept: %s", outcome.action, exc)
            outcome.remote = SyncStatus.FAILED
            outcome.error = outcome.error or str(exc)
            return
        outcome.remote = SyncStatus.APPLIED

    async def _profile(self) -> Profile:
        user = self._auth_store.current_user
        if user is None:
            raise AuthRequiredError("no authenticated user")
        profile = self._state.profile
        if profile is not None and profile.user_id == user.id:
            return profile
        profile = await self._remote_store.ensure_profile(user.id)
        self._state.set_profile(profile)
        return profile
