"""Password login, logout and session refresh."""

from __future__ import annotations

import logging

from placemarker.auth.store import AuthStore, AuthUser
from placemarker.contracts.exceptions import AuthRequiredError, RemoteError
from placemarker.contracts.stores import RemoteStore
from placemarker.remote.pocketbase.client import PocketBaseClient

_LOG = logging.getLogger(__name__)


class AuthService:
    """Delegates credential checks to the identity provider and keeps :class:`AuthStore` current."""

    def __init__(
        self,
        *,
        client: PocketBaseClient,
        auth_store: AuthStore,
        remote_store: RemoteStore,
        users_collection: str = "users",
    ) -> None:
        self._client = client
        self._auth_store = auth_store
        self._remote_store = remote_store
        self._users = users_collection

    async def login(self, email: str, password: str) -> AuthUser:
        try:
            response = await self._client.auth_with_password(self._users, email, password)
        except RemoteError as exc:
            _LOG.warning("Login failed: %s", exc)
            if exc.status is not None and 400 <= exc.status < 500:
                raise AuthRequiredError("invalid email or password") from exc
            raise

        user = AuthUser.model_validate(response.record)
        self._auth_store.save(response.token, user)
        await self._remote_store.ensure_profile(user.id)
        return user

    async def refresh(self) -> AuthUser:
        if not self._auth_store.is_valid:
            raise AuthRequiredError("no session to refresh")
        try:
            response = await self._client.auth_refresh(self._users)
        except RemoteError as exc:
            if exc.status in {401, 403, 404}:
                self._auth_store.clear()
                raise AuthRequiredError("session expired") from exc
            raise
        user = AuthUser.model_validate(response.record)
        self._auth_store.save(response.token, user)
        return user

    async def logout(self) -> None:
        self._auth_store.clear()
