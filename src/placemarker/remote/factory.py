"""Factory for remote store backends.

Decouples backend selection from the SDK composition root.
"""

from __future__ import annotations

import httpx

from placemarker.auth.store import AuthStore
from placemarker.catalog.countries import CountryCatalog
from placemarker.contracts.config import PlacemarkerConfig
from placemarker.contracts.exceptions import ConfigError
from placemarker.contracts.stores import RemoteStore
from placemarker.remote.memory import MemoryRemoteStore
from placemarker.remote.pocketbase.client import PocketBaseClient
from placemarker.remote.pocketbase.store import PocketBaseRemoteStore

BACKENDS = ("pocketbase", "memory")


def create_pocketbase_client(
    config: PlacemarkerConfig,
    *,
    auth_store: AuthStore,
    transport: httpx.AsyncBaseTransport | None = None,
) -> PocketBaseClient:
    return PocketBaseClient(
        base_url=config.pocketbase_url,
        auth_store=auth_store,
        timeout=config.request_timeout,
        transport=transport,
    )


def create_remote_store(
    backend: str,
    *,
    config: PlacemarkerConfig,
    auth_store: AuthStore,
    catalog: CountryCatalog,
    client: PocketBaseClient | None = None,
) -> RemoteStore:
    """Create a remote store by backend name.

    Raises:
        ConfigError: If the backend name is unknown.
    """
    if backend == "pocketbase":
        return PocketBaseRemoteStore(
            client=client or create_pocketbase_client(config, auth_store=auth_store),
            catalog=catalog,
            profiles_collection=config.profiles_collection,
            selections_collection=config.selections_collection,
        )
    if backend == "memory":
        return MemoryRemoteStore(auth_store=auth_store, catalog=catalog)
    available = ", ".join(BACKENDS)
    raise ConfigError(f"Unknown remote backend: {backend!r}. Available: {available}")
