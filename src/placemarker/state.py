"""In-memory selection view consumed by the UI."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager

from placemarker.contracts.country import Country, CountryCode
from placemarker.contracts.selection import Profile, SelectionRecord

_LOG = logging.getLogger(__name__)

StateListener = Callable[["SelectionState"], None]


class RemovalLog:
    """Codes the user removed since the log was opened.

    A later :meth:`SelectionState.add` of the same code cancels its removal;
    a clear counts as removing every code not re-added afterwards.
    """

    def __init__(self) -> None:
        self._removed: set[CountryCode] = set()
        self._added: set[CountryCode] = set()
        self.cleared = False

    def __contains__(self, code: object) -> bool:
        if code in self._added:
            return False
        return self.cleared or code in self._removed

    def note_add(self, code: CountryCode) -> None:
        self._removed.discard(code)
        self._added.add(code)

    def note_remove(self, code: CountryCode) -> None:
        self._added.discard(code)
        self._removed.add(code)

    def note_clear(self) -> None:
        self._added.clear()
        self._removed.clear()
        self.cleared = True


class SelectionState:
    """Current selections, homeland and remote profile for one device session.

    Listeners are called synchronously after every change; a failing
    listener is logged and does not stop the others.
    """

    def __init__(self) -> None:
        self._selections: dict[CountryCode, SelectionRecord] = {}
        self._homeland: Country | None = None
        self._profile: Profile | None = None
        self._listeners: list[StateListener] = []
        self._removal_logs: list[RemovalLog] = []

    @property
    def selections(self) -> list[SelectionRecord]:
        return sorted(self._selections.values(), key=lambda record: record.display_name.casefold())

    @property
    def codes(self) -> set[CountryCode]:
        return set(self._selections)

    @property
    def homeland(self) -> Country | None:
        return self._homeland

    @property
    def profile(self) -> Profile | None:
        return self._profile

    def is_selected(self, code: CountryCode) -> bool:
        return code in self._selections

    def is_homeland(self, code: CountryCode) -> bool:
        return self._homeland is not None and self._homeland.alpha3 == code

    def add(self, record: SelectionRecord) -> None:
        for log in self._removal_logs:
            log.note_add(record.code)
        self._selections[record.code] = record
        self._changed()

    def remove(self, code: CountryCode) -> None:
        for log in self._removal_logs:
            log.note_remove(code)
        if self._selections.pop(code, None) is not None:
            self._changed()

    def clear_selections(self) -> None:
        for log in self._removal_logs:
            log.note_clear()
        self._selections.clear()
        self._changed()

    def replace_selections(self, records: Iterable[SelectionRecord]) -> None:
        self._selections = {record.code: record for record in records}
        self._changed()

    def apply_reconciled(
        self, upserts: Iterable[SelectionRecord] = (), removals: Iterable[CountryCode] = ()
    ) -> None:
        """Publish one batch of reconciliation changes, leaving other codes untouched.

        Unlike :meth:`add` and :meth:`remove` this is not recorded in open
        removal logs.
        """
        for record in upserts:
            self._selections[record.code] = record
        for code in removals:
            self._selections.pop(code, None)
        self._changed()

    @contextmanager
    def track_removals(self) -> Iterator[RemovalLog]:
        """Record user removals made while the block runs."""
        log = RemovalLog()
        self._removal_logs.append(log)
        try:
            yield log
        finally:
            self._removal_logs.remove(log)

    def set_homeland(self, country: Country | None) -> None:
        self._homeland = country
        self._changed()

    def set_profile(self, profile: Profile | None) -> None:
        self._profile = profile
        self._changed()

    def clear_session(self) -> None:
        """Drop session-scoped data (homeland and remote profile)."""
        self._homeland = None
        self._profile = None
        self._changed()

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _changed(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                _LOG.exception("State listener failed")
