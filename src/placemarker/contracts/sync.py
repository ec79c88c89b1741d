"""Reconciliation and mutation result contracts."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field

from placemarker.contracts.country import CountryCode


class SyncStatus(StrEnum):
    APPLIED = "applied"
    SKIPPED = "skipped"
    FAILED = "failed"


class MutationAction(StrEnum):
    SELECT = "select"
    DESELECT = "deselect"
    CLEAR_ALL = "clear_all"
    SET_HOMELAND = "set_homeland"
    CLEAR_HOMELAND = "clear_homeland"
    TOGGLE_SHARING = "toggle_sharing"


class HomelandAction(StrEnum):
    NONE = "none"
    PULLED = "pulled"
    PUSHED = "pushed"


class MutationOutcome(BaseModel):
    """Value returned by every mutation handler.

    ``local`` reports the Local Store write, ``remote`` the mirrored write.
    A failed remote mirror never rolls back the local change.
    """

    action: MutationAction
    code: CountryCode | None = None
    local: SyncStatus = SyncStatus.SKIPPED
    remote: SyncStatus = SyncStatus.SKIPPED
    error: str | None = None
    evicted_code: CountryCode | None = None
    shared: bool | None = None

    @property
    def remote_failed(self) -> bool:
        return self.remote == SyncStatus.FAILED


class ReconcileResult(BaseModel):
    """Value returned by :meth:`ReconciliationEngine.reconcile`."""

    merged_codes: list[CountryCode] = Field(default_factory=list)
    local_upserts: list[CountryCode] = Field(default_factory=list)
    pushed: list[CountryCode] = Field(default_factory=list)
    failed_pushes: list[CountryCode] = Field(default_factory=list)
    skipped_stale: list[CountryCode] = Field(default_factory=list)
    homeland_action: HomelandAction = HomelandAction.NONE
    evicted_homeland: CountryCode | None = None
    aborted: bool = False
    error: str | None = None

    @property
    def remote_writes(self) -> int:
        writes = len(self.pushed)
        if self.homeland_action == HomelandAction.PUSHED:
            writes += 1
        return writes
