"""Shared test fixtures for placemarker tests."""

from __future__ import annotations

import pytest

from placemarker.auth.store import AuthStore, AuthUser
from placemarker.catalog.countries import CountryCatalog
from placemarker.state import SelectionState
from tests.fakes.countries import COUNTRIES
from tests.fakes.stores import FakeSelectionStore, FakeSettingsStore, FlakyRemoteStore


@pytest.fixture
def catalog() -> CountryCatalog:
    """Catalog restricted to a handful of well-known countries."""
    return CountryCatalog(COUNTRIES)


@pytest.fixture
def user() -> AuthUser:
    return AuthUser(id="user-1", email="traveler@example.com", name="Ada")


@pytest.fixture
def auth_store() -> AuthStore:
    return AuthStore()


@pytest.fixture
def signed_in(auth_store: AuthStore, user: AuthUser) -> AuthStore:
    auth_store.save("token-1", user)
    return auth_store


@pytest.fixture
def state() -> SelectionState:
    return SelectionState()


@pytest.fixture
def local() -> FakeSelectionStore:
    return FakeSelectionStore()


@pytest.fixture
def settings() -> FakeSettingsStore:
    return FakeSettingsStore()


@pytest.fixture
def remote(auth_store: AuthStore, catalog: CountryCatalog) -> FlakyRemoteStore:
    return FlakyRemoteStore(auth_store=auth_store, catalog=catalog)
