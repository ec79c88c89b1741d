from __future__ import annotations

import asyncio

import pytest

from placemarker.auth.store import AuthStore
from placemarker.catalog.countries import CountryCatalog
from placemarker.contracts.exceptions import AuthRequiredError, ClearAllPartialFailureError, RemoteError
from placemarker.contracts.selection import Profile
from placemarker.remote.memory import MemoryRemoteStore
from tests.fakes.stores import FlakyRemoteStore


@pytest.mark.asyncio
async def test_requires_authentication(auth_store: AuthStore, catalog: CountryCatalog) -> None:
    store = MemoryRemoteStore(auth_store=auth_store, catalog=catalog)

    with pytest.raises(AuthRequiredError, match="authenticated"):
        await store.ensure_profile("user-1")


@pytest.mark.asyncio
async def test_concurrent_ensure_profile_creates_exactly_one(signed_in: AuthStore, catalog: CountryCatalog) -> None:
    store = MemoryRemoteStore(auth_store=signed_in, catalog=catalog)

    profiles = await asyncio.gather(*(store.ensure_profile("user-1") for _ in range(3)))

    assert len(store.profiles) == 1
    assert {profile.profile_id for profile in profiles} == set(store.profiles)
    assert [op.name for op in store.operations].count("create_profile") == 1


@pytest.mark.asyncio
async def test_selections_are_unique_and_newest_first(signed_in: AuthStore, catalog: CountryCatalog) -> None:
    store = MemoryRemoteStore(auth_store=signed_in, catalog=catalog)
    profile = await store.ensure_profile("user-1")

    await store.save_selection(profile, "FRA", "France")
    await store.save_selection(profile, "ITA", "Italy")
    await store.save_selection(profile, "FRA", "France")

    selections = await store.list_selections(profile)
    assert [selection.code for selection in selections] == ["ITA", "FRA"]
    assert [op.name for op in store.writes()].count("save_selection") == 2


@pytest.mark.asyncio
async def test_unknown_codes_are_dropped_when_listing(signed_in: AuthStore, catalog: CountryCatalog) -> None:
    store = MemoryRemoteStore(auth_store=signed_in, catalog=catalog)
    profile = await store.ensure_profile("user-1")
    await store.save_selection(profile, "ATL", "Atlantis")
    await store.save_selection(profile, "ESP", "Spain")

    selections = await store.list_selections(profile)

    assert [selection.code for selection in selections] == ["ESP"]


@pytest.mark.asyncio
async def test_writes_to_missing_profile_fail(signed_in: AuthStore, catalog: CountryCatalog) -> None:
    store = MemoryRemoteStore(auth_store=signed_in, catalog=catalog)
    ghost = Profile(profile_id="prof-404", user_id="user-1")

    with pytest.raises(RemoteError) as exc_info:
        await store.set_homeland(ghost, "POL")

    assert exc_info.value.status == 404


@pytest.mark.asyncio
async def test_clear_all_reports_partial_failure_and_retry_finishes(
    signed_in: AuthStore, catalog: CountryCatalog
) -> None:
    store = FlakyRemoteStore(auth_store=signed_in, catalog=catalog)
    profile = await store.ensure_profile("user-1")
    for code in ("FRA", "DEU", "ITA"):
        await store.save_selection(profile, code, code)
    store.fail_delete_codes = {"DEU"}

    with pytest.raises(ClearAllPartialFailureError) as exc_info:
        await store.clear_all(profile)

    assert exc_info.value.failed_codes == ("DEU",)
    assert set(exc_info.value.deleted_codes) == {"FRA", "ITA"}
    assert store.codes_for(profile.profile_id) == {"DEU"}

    store.fail_delete_codes = set()
    await store.clear_all(profile)

    assert store.codes_for(profile.profile_id) == set()


@pytest.mark.asyncio
async def test_shared_profile_visibility(signed_in: AuthStore, catalog: CountryCatalog) -> None:
    store = MemoryRemoteStore(auth_store=signed_in, catalog=catalog, display_names={"user-1": "Ada"})
    profile = await store.ensure_profile("user-1")
    await store.save_selection(profile, "JPN", "Japan")

    assert await store.get_shared_profile(profile.profile_id) is None

    assert await store.toggle_sharing(profile) is True
    signed_in.clear()
    shared = await store.get_shared_profile(profile.profile_id)

    assert shared is not None
    assert shared.profile.display_name == "Ada"
    assert [selection.code for selection in shared.selections] == ["JPN"]
    assert await store.get_shared_profile("prof-missing") is None


@pytest.mark.asyncio
async def test_shared_profile_falls_back_to_default_name(signed_in: AuthStore, catalog: CountryCatalog) -> None:
    store = MemoryRemoteStore(auth_store=signed_in, catalog=catalog)
    profile = await store.ensure_profile("user-1")
    await store.toggle_sharing(profile)

    shared = await store.get_shared_profile(profile.profile_id)

    assert shared is not None
    assert shared.profile.display_name == "Traveler"
