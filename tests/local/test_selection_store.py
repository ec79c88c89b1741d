from __future__ import annotations

import json
from pathlib import Path

import pytest
import pytest_asyncio

from placemarker.contracts.exceptions import StorageError
from placemarker.local.selection_store import JsonSelectionStore


@pytest_asyncio.fixture
async def store(tmp_path: Path) -> JsonSelectionStore:
    store = JsonSelectionStore(directory=tmp_path)
    await store.init()
    return store


@pytest.mark.asyncio
async def test_init_creates_versioned_document(tmp_path: Path) -> None:
    store = JsonSelectionStore(directory=tmp_path / "nested", name="visits", version=2)

    await store.init()

    payload = json.loads(store.path.read_text(encoding="utf-8"))
    assert store.path == tmp_path / "nested" / "visits.json"
    assert payload == {"name": "visits", "records": {}, "version": 2}


@pytest.mark.asyncio
async def test_add_list_has_remove(store: JsonSelectionStore) -> None:
    await store.add("fra", "France")
    await store.add("DEU", "Germany")

    records = await store.list()

    assert sorted(record.code for record in records) == ["DEU", "FRA"]
    assert await store.has("FRA")
    assert await store.has("fra")

    await store.remove("FRA")

    assert not await store.has("FRA")
    assert [record.code for record in await store.list()] == ["DEU"]


@pytest.mark.asyncio
async def test_add_is_idempotent_upsert(store: JsonSelectionStore) -> None:
    await store.add("FRA", "France")
    first = (await store.list())[0]

    await store.add("FRA", "France")
    again = (await store.list())[0]
    await store.add("FRA", "République française")
    renamed = await store.list()

    assert again.selected_at == first.selected_at
    assert len(renamed) == 1
    assert renamed[0].display_name == "République française"
    assert renamed[0].selected_at == first.selected_at


@pytest.mark.asyncio
async def test_remove_missing_code_is_a_no_op(store: JsonSelectionStore) -> None:
    await store.remove("JPN")

    assert await store.list() == []


@pytest.mark.asyncio
async def test_clear_removes_everything(store: JsonSelectionStore) -> None:
    await store.add("FRA", "France")
    await store.add("ITA", "Italy")

    await store.clear()

    assert await store.list() == []


@pytest.mark.asyncio
async def test_records_survive_reopen(tmp_path: Path) -> None:
    first = JsonSelectionStore(directory=tmp_path)
    await first.init()
    await first.add("ESP", "Spain")

    second = JsonSelectionStore(directory=tmp_path)
    await second.init()

    assert [record.code for record in await second.list()] == ["ESP"]


@pytest.mark.asyncio
async def test_use_before_init_raises(tmp_path: Path) -> None:
    store = JsonSelectionStore(directory=tmp_path)

    with pytest.raises(StorageError, match="not initialised"):
        await store.list()


@pytest.mark.asyncio
async def test_malformed_code_raises_storage_error(store: JsonSelectionStore) -> None:
    with pytest.raises(StorageError):
        await store.add("FR", "France")


@pytest.mark.asyncio
async def test_lower_version_is_upgraded_in_place(tmp_path: Path) -> None:
    path = tmp_path / "placemarker-db.json"
    legacy = {"FRA": {"code": "FRA", "display_name": "France", "selected_at": "2024-01-01T00:00:00Z"}}
    path.write_text(json.dumps({"name": "placemarker-db", "version": 1, "records": legacy}), encoding="utf-8")
    store = JsonSelectionStore(directory=tmp_path, version=2)

    await store.init()

    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload["version"] == 2
    assert [record.code for record in await store.list()] == ["FRA"]


@pytest.mark.asyncio
async def test_newer_version_is_refused(tmp_path: Path) -> None:
    path = tmp_path / "placemarker-db.json"
    path.write_text(json.dumps({"name": "placemarker-db", "version": 5, "records": {}}), encoding="utf-8")

    with pytest.raises(StorageError, match="newer than supported"):
        await JsonSelectionStore(directory=tmp_path).init()


@pytest.mark.asyncio
async def test_invalid_json_raises_storage_error(tmp_path: Path) -> None:
    (tmp_path / "placemarker-db.json").write_text("{not json", encoding="utf-8")

    with pytest.raises(StorageError, match="invalid JSON in local store"):
        await JsonSelectionStore(directory=tmp_path).init()


@pytest.mark.asyncio
async def test_corrupt_record_raises_storage_error(tmp_path: Path) -> None:
    path = tmp_path / "placemarker-db.json"
    path.write_text(
        json.dumps({"name": "placemarker-db", "version": 1, "records": {"FRA": {"code": "FRA"}}}),
        encoding="utf-8",
    )
    store = JsonSelectionStore(directory=tmp_path)
    await store.init()

    with pytest.raises(StorageError, match="invalid selection record"):
        await store.list()
