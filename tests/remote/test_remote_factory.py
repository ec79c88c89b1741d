from __future__ import annotations

import pytest

from placemarker.auth.store import AuthStore
from placemarker.catalog.countries import CountryCatalog
from placemarker.contracts.config import PlacemarkerConfig
from placemarker.contracts.exceptions import ConfigError
from placemarker.remote.factory import create_pocketbase_client, create_remote_store
from placemarker.remote.memory import MemoryRemoteStore
from placemarker.remote.pocketbase.store import PocketBaseRemoteStore


@pytest.fixture
def config() -> PlacemarkerConfig:
    return PlacemarkerConfig(pocketbase_url="https://pb.example.com", request_timeout=3.5)


def test_creates_pocketbase_store(config: PlacemarkerConfig, auth_store: AuthStore, catalog: CountryCatalog) -> None:
    client = create_pocketbase_client(config, auth_store=auth_store)

    store = create_remote_store("pocketbase", config=config, auth_store=auth_store, catalog=catalog, client=client)

    assert isinstance(store, PocketBaseRemoteStore)
    assert store.auth_store is auth_store


def test_creates_memory_store(config: PlacemarkerConfig, auth_store: AuthStore, catalog: CountryCatalog) -> None:
    store = create_remote_store("memory", config=config, auth_store=auth_store, catalog=catalog)

    assert isinstance(store, MemoryRemoteStore)


def test_unknown_backend_raises(config: PlacemarkerConfig, auth_store: AuthStore, catalog: CountryCatalog) -> None:
    with pytest.raises(ConfigError, match="Unknown remote backend"):
        create_remote_store("firebase", config=config, auth_store=auth_store, catalog=catalog)
