"""Login-triggered reconciliation of local and remote selections."""

from __future__ import annotations

import asyncio
import logging
from enum import StrEnum

from placemarker.auth.store import AuthChange, AuthStore, AuthUser
from placemarker.catalog.countries import CountryCatalog
from placemarker.contracts.country import CountryCode
from placemarker.contracts.exceptions import AuthRequiredError, RemoteError, StorageError
from placemarker.contracts.selection import Profile, SelectionRecord
from placemarker.contracts.stores import RemoteStore, SelectionStore, SettingsStore
from placemarker.contracts.sync import HomelandAction, ReconcileResult
from placemarker.engine.merge import MergedSelection, merge, plan_homeland
from placemarker.engine.progress import NullReconcileProgress, ReconcilePhase, ReconcileProgress
from placemarker.state import RemovalLog, SelectionState

_LOG = logging.getLogger(__name__)


class EngineState(StrEnum):
    IDLE = "idle"
    RECONCILING = "reconciling"


class ReconciliationEngine:
    """Merges the local and remote selection sets on sign-in.

    The engine holds no selection data of its own: it reads both stores,
    computes the merge with :func:`merge`, writes the result back through
    the store interfaces and publishes it to :class:`SelectionState`.
    Only one pass runs at a time; a trigger that arrives mid-pass joins the
    pass already in flight.
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
        progress: ReconcileProgress | None = None,
    ) -> None:
        self._selection_store = selection_store
        self._settings_store = settings_store
        self._remote_store = remote_store
        self._auth_store = auth_store
        self._catalog = catalog
        self._state = state
        self._progress: ReconcileProgress = progress or NullReconcileProgress()
        self._inflight: asyncio.Task[ReconcileResult] | None = None
        self._session_user_id: str | None = None

    @property
    def state(self) -> EngineState:
        if self._inflight is not None and not self._inflight.done():
            return EngineState.RECONCILING
        return EngineState.IDLE

    @property
    def session_user_id(self) -> str | None:
        return self._session_user_id

    async def handle_auth_change(self, change: AuthChange) -> ReconcileResult | None:
        """Feed one auth notification into the state machine.

        Signing in (or switching user) starts a pass. A token refresh for the
        same user does nothing. Signing out drops session-scoped state.
        """
        previous = self._session_user_id
        if change.signed_in and change.user is not None:
            if previous == change.user.id:
                return None
            if previous is not None:
                await self._end_session()
            self._session_user_id = change.user.id
            _LOG.info("Signed in as %s; reconciling", change.user.id)
            return await self.reconcile()

        if previous is not None:
            _LOG.info("Signed out; keeping local selections as offline fallback")
            await self._end_session()
        return None

    async def reconcile(self) -> ReconcileResult:
        """Run one pass, or join the pass already in flight."""
        if self._inflight is not None and not self._inflight.done():
            _LOG.debug("Reconciliation already in flight; joining it")
            return await asyncio.shield(self._inflight)

        user = self._auth_store.current_user
        if user is None:
            raise AuthRequiredError("user must be authenticated to reconcile")

        task = asyncio.create_task(self._run(user))
        self._inflight = task
        task.add_done_callback(self._clear_inflight)
        return await asyncio.shield(task)

    def _clear_inflight(self, task: asyncio.Task[ReconcileResult]) -> None:
        if self._inflight is task:
            self._inflight = None

    async def _run(self, user: AuthUser) -> ReconcileResult:
        with self._state.track_removals() as removals:
            return await self._reconcile(user, removals)

    async def _reconcile(self, user: AuthUser, removals: RemovalLog) -> ReconcileResult:
        result = ReconcileResult()

        fetched = await self._fetch(user, result)
        if fetched is None:
            return result
        profile, local_records, remote_records, local_homeland = fetched

        merged = merge(local_records, remote_records)
        homeland = plan_homeland(local_homeland, profile.homeland_code)
        evicted = homeland.code if homeland.code is not None and homeland.code in merged.records else None
        remote_had_evicted = evicted is not None and any(record.code == evicted for record in remote_records)
        if evicted is not None:
            merged = merged.without(evicted)
            result.evicted_homeland = evicted

        # the local snapshot may be stale by now; codes removed since are left out
        await self._apply_local(merged, removals, result)
        self._state.set_profile(profile)
        self._state.apply_reconciled(
            upserts=[record for code, record in merged.records.items() if code not in removals],
            removals=[evicted] if evicted is not None else [],
        )

        await self._push(profile, merged, removals, result)
        if result.skipped_stale:
            self._state.apply_reconciled(removals=result.skipped_stale)
        result.merged_codes = sorted(
            code for code in merged.codes if code not in removals and code not in result.skipped_stale
        )
        await self._apply_homeland(profile, homeland.action, homeland.code, result)
        if evicted is not None:
            await self._evict(profile, evicted, remote_had_evicted)

        _LOG.info(
            "Reconciled %d selections (%d pulled, %d pushed, %d failed, homeland %s)",
            len(result.merged_codes),
            len(result.local_upserts),
            len(result.pushed),
            len(result.failed_pushes),
            result.homeland_action,
        )
        return result

    async def _fetch(
        self, user: AuthUser, result: ReconcileResult
    ) -> tuple[Profile, list[SelectionRecord], list[SelectionRecord], CountryCode | None] | None:
        self._progress.phase_start(ReconcilePhase.FETCH)
        try:
            profile = await self._remote_store.ensure_profile(user.id)
            remote_records = await self._remote_store.list_selections(profile)
            local_records = await self._selection_store.list()
            local_homeland = await self._settings_store.get_homeland()
        except (RemoteError, AuthRequiredError, StorageError) as exc:
            _LOG.warning("Reconciliation aborted, keeping local state: %s", exc)
            self._progress.phase_error(ReconcilePhase.FETCH, exc)
            result.aborted = True
            result.error = str(exc)
            return None
        self._progress.phase_done(ReconcilePhase.FETCH)
        return profile, local_records, remote_records, local_homeland

    async def _apply_local(self, merged: MergedSelection, removals: RemovalLog, result: ReconcileResult) -> None:
        self._progress.phase_start(ReconcilePhase.LOCAL, total=len(merged.local_missing))
        for code in merged.local_missing:
            if code in removals:
                _LOG.debug("Skipping pull of %s: deselected during reconciliation", code)
                result.skipped_stale.append(code)
                self._progress.item_done(ReconcilePhase.LOCAL)
                continue
            record = merged.records[code]
            try:
                await self._selection_store.add(code, record.display_name)
                if code in removals:
                    # deselected while the write was in flight
                    await self._selection_store.remove(code)
            except StorageError as exc:
                _LOG.warning("Failed to store %s locally: %s", code, exc)
            else:
                if code in removals:
                    result.skipped_stale.append(code)
                else:
                    result.local_upserts.append(code)
            self._progress.item_done(ReconcilePhase.LOCAL)
        self._progress.phase_done(ReconcilePhase.LOCAL)

    async def _push(
        self, profile: Profile, merged: MergedSelection, removals: RemovalLog, result: ReconcileResult
    ) -> None:
        self._progress.phase_start(ReconcilePhase.PUSH, total=len(merged.remote_missing))
        for code in merged.remote_missing:
            try:
                still_selected = code not in removals and await self._selection_store.has(code)
            except StorageError as exc:
                _LOG.warning("Could not confirm %s is still selected; not pushing: %s", code, exc)
                result.failed_pushes.append(code)
                self._progress.item_done(ReconcilePhase.PUSH)
                continue
            if not still_selected:
                _LOG.debug("Skipping push of %s: deselected during reconciliation", code)
                result.skipped_stale.append(code)
                self._progress.item_done(ReconcilePhase.PUSH)
                continue

            try:
                await self._remote_store.save_selection(profile, code, merged.records[code].display_name)
            except (RemoteError, AuthRequiredError) as exc:
                _LOG.warning("Failed to push %s: %s", code, exc)
                result.failed_pushes.append(code)
            else:
                result.pushed.append(code)
            self._progress.item_done(ReconcilePhase.PUSH)
        self._progress.phase_done(ReconcilePhase.PUSH)

    async def _apply_homeland(
        self, profile: Profile, action: HomelandAction, code: CountryCode | None, result: ReconcileResult
    ) -> None:
        self._progress.phase_start(ReconcilePhase.HOMELAND)
        country = self._catalog.lookup(code) if code is not None else None

        if action == HomelandAction.PULLED and code is not None:
            try:
                await self._settings_store.set_homeland(code, country.name if country is not None else code)
            except StorageError as exc:
                _LOG.warning("Failed to store homeland %s locally: %s", code, exc)
            else:
                result.homeland_action = HomelandAction.PULLED
        elif action == HomelandAction.PUSHED and code is not None:
            try:
                await self._remote_store.set_homeland(profile, code)
            except (RemoteError, AuthRequiredError) as exc:
                _LOG.warning("Failed to push homeland %s: %s", code, exc)
            else:
                profile.homeland_code = code
                result.homeland_action = HomelandAction.PUSHED

        self._state.set_homeland(country)
        self._progress.phase_done(ReconcilePhase.HOMELAND)

    async def _evict(self, profile: Profile, code: CountryCode, remote_had_it: bool) -> None:
        try:
            await self._selection_store.remove(code)
        except StorageError as exc:
            _LOG.warning("Failed to evict homeland %s from local selections: %s", code, exc)
        if not remote_had_it:
            return
        try:
            await self._remote_store.remove_selection(profile, code)
        except (RemoteError, AuthRequiredError) as exc:
            _LOG.warning("Failed to evict homeland %s from remote selections: %s", code, exc)

    async def _end_session(self) -> None:
        self._session_user_id = None
        self._state.clear_session()
        try:
            records = await self._selection_store.list()
        except StorageError as exc:
            _LOG.warning("Could not reload local selections after sign-out: %s", exc)
            return
        self._state.replace_selections(records)
