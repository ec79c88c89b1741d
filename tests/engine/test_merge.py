from __future__ import annotations

from datetime import UTC, datetime

import pytest

from placemarker.contracts.selection import SelectionRecord
from placemarker.contracts.sync import HomelandAction
from placemarker.engine.merge import merge, plan_homeland
from tests.fakes.countries import record


def test_merge_is_a_union_not_an_intersection() -> None:
    merged = merge([record("FRA"), record("DEU")], [record("ITA")])

    assert merged.codes == {"FRA", "DEU", "ITA"}
    assert merged.local_missing == ("ITA",)
    assert merged.remote_missing == ("DEU", "FRA")


def test_merge_of_identical_sets_needs_no_writes() -> None:
    merged = merge([record("FRA"), record("DEU")], [record("DEU"), record("FRA")])

    assert merged.codes == {"FRA", "DEU"}
    assert merged.local_missing == ()
    assert merged.remote_missing == ()


def test_merge_prefers_remote_metadata_on_collision() -> None:
    remote_time = datetime(2020, 1, 1, tzinfo=UTC)
    local = SelectionRecord(code="FRA", display_name="France (local)")
    remote = SelectionRecord(code="FRA", display_name="France", selected_at=remote_time)

    merged = merge([local], [remote])

    assert merged.records["FRA"].display_name == "France"
    assert merged.records["FRA"].selected_at == remote_time


def test_merge_handles_empty_sides() -> None:
    assert merge([], []).codes == set()

    only_local = merge([record("ESP")], [])
    assert only_local.remote_missing == ("ESP",)
    assert only_local.local_missing == ()

    only_remote = merge([], [record("ESP")])
    assert only_remote.local_missing == ("ESP",)
    assert only_remote.remote_missing == ()


def test_merged_selection_without_drops_code_everywhere() -> None:
    merged = merge([record("FRA"), record("POL")], [record("ITA"), record("POL")]).without("POL")

    assert merged.codes == {"FRA", "ITA"}
    assert "POL" not in merged.local_missing
    assert "POL" not in merged.remote_missing


@pytest.mark.parametrize(
    ("local", "remote", "action", "code"),
    [
        (None, None, HomelandAction.NONE, None),
        ("POL", None, HomelandAction.PUSHED, "POL"),
        (None, "ITA", HomelandAction.PULLED, "ITA"),
        ("POL", "ITA", HomelandAction.PULLED, "ITA"),
        ("ITA", "ITA", HomelandAction.NONE, "ITA"),
    ],
)
def test_plan_homeland(local: str | None, remote: str | None, action: HomelandAction, code: str | None) -> None:
    plan = plan_homeland(local, remote)

    assert plan.action == action
    assert plan.code == code
