"""Pure merge rules for local and remote selections."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from placemarker.contracts.country import CountryCode
from placemarker.contracts.selection import SelectionRecord
from placemarker.contracts.sync import HomelandAction


@dataclass(frozen=True)
class MergedSelection:
    """Union of both sides keyed by code, remote metadata winning on collision."""

    records: dict[CountryCode, SelectionRecord]
    local_missing: tuple[CountryCode, ...]
    remote_missing: tuple[CountryCode, ...]

    @property
    def codes(self) -> set[CountryCode]:
        return set(self.records)

    def without(self, code: CountryCode) -> MergedSelection:
        return MergedSelection(
            records={key: record for key, record in self.records.items() if key != code},
            local_missing=tuple(key for key in self.local_missing if key != code),
            remote_missing=tuple(key for key in self.remote_missing if key != code),
        )


@dataclass(frozen=True)
class HomelandPlan:
    action: HomelandAction
    code: CountryCode | None


def merge(local: Iterable[SelectionRecord], remote: Iterable[SelectionRecord]) -> MergedSelection:
    """Merge two selection sets.

    Existence is a union: a code present on either side survives. When both
    sides hold a code the remote record is kept. ``local_missing`` lists codes
    to upsert locally, ``remote_missing`` codes to push to the remote store;
    both are sorted so the resulting writes are deterministic.
    """
    local_by_code = {record.code: record for record in local}
    remote_by_code = {record.code: record for record in remote}

    records = dict(local_by_code)
    records.update(remote_by_code)

    return MergedSelection(
        records=records,
        local_missing=tuple(sorted(set(remote_by_code) - set(local_by_code))),
        remote_missing=tuple(sorted(set(local_by_code) - set(remote_by_code))),
    )


def plan_homeland(local: CountryCode | None, remote: CountryCode | None) -> HomelandPlan:
    """Remote wins when set; otherwise a local homeland is pushed up."""
    if remote is not None:
        if remote != local:
            return HomelandPlan(action=HomelandAction.PULLED, code=remote)
        return HomelandPlan(action=HomelandAction.NONE, code=remote)
    if local is not None:
        return HomelandPlan(action=HomelandAction.PUSHED, code=local)
    return HomelandPlan(action=HomelandAction.NONE, code=None)
