"""Observers for reconciliation passes.

A pass walks through the phases in :class:`ReconcilePhase` order. The
engine reports each one to a ``ReconcileProgress``; a UI can drive a
"syncing…" indicator from it and tests can record the sequence.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import StrEnum

_LOG = logging.getLogger(__name__)


class ReconcilePhase(StrEnum):
    FETCH = "fetch"
    LOCAL = "local"
    PUSH = "push"
    HOMELAND = "homeland"


class ReconcileProgress(ABC):
    @abstractmethod
    def phase_start(self, phase: ReconcilePhase, total: int | None = None) -> None:
        """*total* is the number of per-code steps, or ``None`` when the phase has none."""
        ...  # pragma: no cover

    @abstractmethod
    def item_done(self, phase: ReconcilePhase) -> None: ...  # pragma: no cover

    @abstractmethod
    def phase_done(self, phase: ReconcilePhase) -> None: ...  # pragma: no cover

    @abstractmethod
    def phase_error(self, phase: ReconcilePhase, error: BaseException) -> None: ...  # pragma: no cover


class NullReconcileProgress(ReconcileProgress):
    def phase_start(self, phase: ReconcilePhase, total: int | None = None) -> None:
        pass

    def item_done(self, phase: ReconcilePhase) -> None:
        pass

    def phase_done(self, phase: ReconcilePhase) -> None:
        pass

    def phase_error(self, phase: ReconcilePhase, error: BaseException) -> None:
        pass


class LoggingReconcileProgress(ReconcileProgress):
    """Writes phase transitions to the ``placemarker.engine.progress`` logger at debug level."""

    def __init__(self) -> None:
        self._done: dict[ReconcilePhase, int] = {}
        self._totals: dict[ReconcilePhase, int | None] = {}

    def phase_start(self, phase: ReconcilePhase, total: int | None = None) -> None:
        self._done[phase] = 0
        self._totals[phase] = total
        _LOG.debug("Reconcile %s: started (%s items)", phase, "?" if total is None else total)

    def item_done(self, phase: ReconcilePhase) -> None:
        self._done[phase] = self._done.get(phase, 0) + 1

    def phase_done(self, phase: ReconcilePhase) -> None:
        total = self._totals.get(phase)
        if total is None:
            _LOG.debug("Reconcile %s: done", phase)
        else:
            _LOG.debug("Reconcile %s: done (%d/%d)", phase, self._done.get(phase, 0), total)

    def phase_error(self, phase: ReconcilePhase, error: BaseException) -> None:
        _LOG.debug("Reconcile %s: failed: %s", phase, error)
