"""SDK composition root for placemarker."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from types import TracebackType

import httpx

from placemarker.auth.service import AuthService
from placemarker.auth.store import AuthChange, AuthStore, AuthSubscription
from placemarker.catalog.countries import CountryCatalog, default_catalog
from placemarker.contracts.config import PlacemarkerConfig
from placemarker.contracts.exceptions import PlacemarkerError
from placemarker.contracts.selection import SharedProfile
from placemarker.contracts.stores import RemoteStore, SelectionStore, SettingsStore
from placemarker.contracts.sync import MutationOutcome, ReconcileResult
from placemarker.engine.progress import LoggingReconcileProgress, ReconcileProgress
from placemarker.engine.reconciler import ReconciliationEngine
from placemarker.handlers import MutationHandlers
from placemarker.local.selection_store import JsonSelectionStore
from placemarker.local.settings_store import JsonSettingsStore
from placemarker.remote.factory import create_pocketbase_client, create_remote_store
from placemarker.remote.pocketbase.client import PocketBaseClient
from placemarker.state import SelectionState

_LOG = logging.getLogger(__name__)


class Placemarker:
    """Placemarker SDK public API.

    Use as an async context manager. Entering opens both local stores,
    loads the offline view, subscribes the reconciliation engine to auth
    changes and, if a session already exists, runs the first pass::

        async with Placemarker.from_config(config) as app:
            await app.on_country_select("FRA")
    """

    def __init__(
        self,
        *,
        selection_store: SelectionStore,
        settings_store: SettingsStore,
        remote_store: RemoteStore,
        auth_store: AuthStore,
        catalog: CountryCatalog | None = None,
        share_base_url: str | None = None,
        client: PocketBaseClient | None = None,
        users_collection: str = "users",
        progress: ReconcileProgress | None = None,
    ) -> None:
        self._selection_store = selection_store
        self._settings_store = settings_store
        self._remote_store = remote_store
        self._auth_store = auth_store
        self._catalog = catalog or default_catalog()
        self._share_base_url = share_base_url.rstrip("/") if share_base_url else None
        self._client = client
        self._users_collection = users_collection

        self._state = SelectionState()
        self._engine = ReconciliationEngine(
            selection_store=selection_store,
            settings_store=settings_store,
            remote_store=remote_store,
            auth_store=auth_store,
            catalog=self._catalog,
            state=self._state,
            progress=progress or LoggingReconcileProgress(),
        )
        self._handlers = MutationHandlers(
            selection_store=selection_store,
            settings_store=settings_store,
            remote_store=remote_store,
            auth_store=auth_store,
            catalog=self._catalog,
            state=self._state,
        )
        self._subscription: AuthSubscription | None = None
        self._consumer: asyncio.Task[None] | None = None

    @classmethod
    def from_config(
        cls,
        config: PlacemarkerConfig,
        *,
        auth_store: AuthStore | None = None,
        catalog: CountryCatalog | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        progress: ReconcileProgress | None = None,
    ) -> Placemarker:
        auth_store = auth_store or AuthStore()
        catalog = catalog or default_catalog()
        client = None
        if config.remote_backend == "pocketbase":
            client = create_pocketbase_client(config, auth_store=auth_store, transport=transport)
        return cls(
            selection_store=JsonSelectionStore(
                directory=config.data_dir, name=config.selections_db, version=config.db_version
            ),
            settings_store=JsonSettingsStore(
                directory=config.data_dir, name=config.settings_db, version=config.db_version
            ),
            remote_store=create_remote_store(
                config.remote_backend, config=config, auth_store=auth_store, catalog=catalog, client=client
            ),
            auth_store=auth_store,
            catalog=catalog,
            share_base_url=config.share_base_url,
            client=client,
            users_collection=config.users_collection,
            progress=progress,
        )

    async def __aenter__(self) -> Placemarker:
        if self._client is not None:
            await self._client.open()
        try:
            await self._selection_store.init()
            await self._settings_store.init()
            await self._load_offline_view()

            self._subscription = self._auth_store.subscribe()
            self._consumer = asyncio.create_task(self._consume(self._subscription))

            user = self._auth_store.current_user
            if user is not None:
                await self._engine.handle_auth_change(AuthChange(token=self._auth_store.token, user=user))
        except BaseException:
            await self._shutdown()
            raise
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self._shutdown()

    async def _shutdown(self) -> None:
        if self._subscription is not None:
            self._subscription.close()
        if self._consumer is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await self._consumer
        self._subscription = None
        self._consumer = None
        if self._client is not None:
            await self._client.aclose()

    # ------------------------------------------------------------------
    # Collaborators
    # ------------------------------------------------------------------

    @property
    def state(self) -> SelectionState:
        return self._state

    @property
    def engine(self) -> ReconciliationEngine:
        return self._engine

    @property
    def handlers(self) -> MutationHandlers:
        return self._handlers

    @property
    def catalog(self) -> CountryCatalog:
        return self._catalog

    @property
    def auth_store(self) -> AuthStore:
        return self._auth_store

    @property
    def auth(self) -> AuthService:
        if self._client is None:
            raise PlacemarkerError("password login requires the pocketbase backend")
        return AuthService(
            client=self._client,
            auth_store=self._auth_store,
            remote_store=self._remote_store,
            users_collection=self._users_collection,
        )

    # ------------------------------------------------------------------
    # UI hooks
    # ------------------------------------------------------------------

    async def on_country_select(self, code: str) -> MutationOutcome:
        return await self._handlers.select(code)

    async def on_country_deselect(self, code: str) -> MutationOutcome:
        return await self._handlers.deselect(code)

    async def on_clear_all(self) -> MutationOutcome:
        return await self._handlers.clear_all()

    async def reconcile(self) -> ReconcileResult:
        return await self._engine.reconcile()

    async def settled(self) -> None:
        """Wait until every auth change delivered so far has been handled."""
        if self._subscription is not None:
            await self._subscription.join()

    # ------------------------------------------------------------------
    # Sharing
    # ------------------------------------------------------------------

    def share_url(self) -> str | None:
        profile = self._state.profile
        if self._share_base_url is None or profile is None or not profile.shared:
            return None
        return f"{self._share_base_url}/shared/{profile.profile_id}"

    async def shared_profile(self, profile_id: str) -> SharedProfile | None:
        return await self._remote_store.get_shared_profile(profile_id)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _load_offline_view(self) -> None:
        self._state.replace_selections(await self._selection_store.list())
        homeland = await self._settings_store.get_homeland()
        self._state.set_homeland(self._catalog.lookup(homeland) if homeland is not None else None)

    async def _consume(self, subscription: AuthSubscription) -> None:
        async for change in subscription:
            try:
                await self._engine.handle_auth_change(change)
            except PlacemarkerError as exc:
                _LOG.warning("Auth change handling failed: %s", exc)
            finally:
                subscription.task_done()
