"""Session token holder and auth-change channel."""

from __future__ import annotations

import asyncio
import base64
import binascii
import json
import logging
import time
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

_LOG = logging.getLogger(__name__)


class AuthUser(BaseModel):
    id: str
    email: str | None = None
    name: str | None = None
    created: str | None = None
    updated: str | None = None


@dataclass(frozen=True)
class AuthChange:
    """One notification from the auth store: ``(token, current user)``."""

    token: str
    user: AuthUser | None

    @property
    def signed_in(self) -> bool:
        return bool(self.token) and self.user is not None


_CLOSED = object()


class AuthSubscription:
    """Async iterator over :class:`AuthChange` events for a single subscriber.

    Consumers call :meth:`task_done` after handling each event so
    :meth:`join` can wait until every delivered change has been processed.
    """

    def __init__(self, store: AuthStore) -> None:
        self._store = store
        self._queue: asyncio.Queue[Any] = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def __aiter__(self) -> AuthSubscription:
        return self

    async def __anext__(self) -> AuthChange:
        if self._closed and self._queue.empty():
            raise StopAsyncIteration
        item = await self._queue.get()
        if item is _CLOSED:
            self._queue.task_done()
            raise StopAsyncIteration
        return item

    def deliver(self, change: AuthChange) -> None:
        if not self._closed:
            self._queue.put_nowait(change)

    def task_done(self) -> None:
        self._queue.task_done()

    async def join(self) -> None:
        await self._queue.join()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._store._unsubscribe(self)
        self._queue.put_nowait(_CLOSED)


class AuthStore:
    """Holds the current session and notifies subscribers on login, logout and refresh."""

    def __init__(self, *, token: str = "", user: AuthUser | None = None) -> None:
        self._token = token
        self._user = user
        self._subscriptions: list[AuthSubscription] = []

    @property
    def token(self) -> str:
        return self._token

    @property
    def user(self) -> AuthUser | None:
        return self._user

    @property
    def is_valid(self) -> bool:
        """True for a present token that is not an expired JWT."""
        if not self._token:
            return False
        expires_at = _jwt_expiry(self._token)
        return expires_at is None or expires_at > time.time()

    @property
    def current_user(self) -> AuthUser | None:
        if not self.is_valid:
            return None
        return self._user

    def save(self, token: str, user: AuthUser | dict[str, Any] | None) -> None:
        self._token = token or ""
        self._user = AuthUser.model_validate(user) if isinstance(user, dict) else user
        self._notify()

    def clear(self) -> None:
        self._token = ""
        self._user = None
        self._notify()

    def subscribe(self) -> AuthSubscription:
        subscription = AuthSubscription(self)
        self._subscriptions.append(subscription)
        return subscription

    def _unsubscribe(self, subscription: AuthSubscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    def _notify(self) -> None:
        change = AuthChange(token=self._token, user=self._user)
        _LOG.debug("Auth state changed (signed_in=%s)", change.signed_in)
        for subscription in list(self._subscriptions):
            subscription.deliver(change)


def _jwt_expiry(token: str) -> float | None:
    parts = token.split(".")
    if len(parts) != 3:
        return None
    segment = parts[1] + "=" * (-len(parts[1]) % 4)
    try:
        claims: Any = json.loads(base64.urlsafe_b64decode(segment))
    except (binascii.Error, ValueError):
        return 0.0
    if not isinstance(claims, dict):
        return 0.0
    exp = claims.get("exp")
    if isinstance(exp, bool) or not isinstance(exp, int | float):
        return None
    return float(exp)
