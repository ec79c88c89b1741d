"""Async PocketBase record API client."""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from placemarker.auth.store import AuthStore
from placemarker.contracts.exceptions import RemoteError
from placemarker.remote.pocketbase.models import AuthResponse, ListResult

_LOG = logging.getLogger(__name__)

_FULL_LIST_BATCH = 200


class PocketBaseClient:
    """Thin collection-scoped CRUD wrapper over the PocketBase HTTP API.

    No retries are performed; every transport or HTTP failure is raised as
    ``RemoteError`` and the caller decides what to do with it.
    """

    def __init__(
        self,
        *,
        base_url: str,
        auth_store: AuthStore,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._auth_store = auth_store
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def auth_store(self) -> AuthStore:
        return self._auth_store

    async def __aenter__(self) -> PocketBaseClient:
        await self.open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def open(self) -> None:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                transport=self._transport,
            )

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    async def get_list(
        self,
        collection: str,
        *,
        page: int = 1,
        per_page: int = 30,
        filter: str | None = None,
        sort: str | None = None,
        expand: str | None = None,
    ) -> ListResult:
        params: dict[str, Any] = {"page": page, "perPage": per_page}
        if filter:
            params["filter"] = filter
        if sort:
            params["sort"] = sort
        if expand:
            params["expand"] = expand
        payload = await self._request("GET", self._records_path(collection), params=params)
        try:
            return ListResult.model_validate(payload)
        except PydanticValidationError as exc:
            raise RemoteError(f"malformed list response from {collection!r}") from exc

    async def get_full_list(
        self,
        collection: str,
        *,
        filter: str | None = None,
        sort: str | None = None,
        expand: str | None = None,
        batch: int = _FULL_LIST_BATCH,
    ) -> list[dict[str, Any]]:
        items: list[dict[str, Any]] = []
        page = 1
        while True:
            result = await self.get_list(
                collection, page=page, per_page=batch, filter=filter, sort=sort, expand=expand
            )
            items.extend(result.items)
            if len(result.items) < batch:
                return items
            page += 1

    async def get_first(self, collection: str, *, filter: str, expand: str | None = None) -> dict[str, Any] | None:
        result = await self.get_list(collection, page=1, per_page=1, filter=filter, expand=expand)
        return result.items[0] if result.items else None

    async def get_one(self, collection: str, record_id: str, *, expand: str | None = None) -> dict[str, Any]:
        params = {"expand": expand} if expand else None
        return await self._request("GET", f"{self._records_path(collection)}/{record_id}", params=params)

    async def create(self, collection: str, body: dict[str, Any]) -> dict[str, Any]:
        return await self._request("POST", self._records_path(collection), json=body)

    async def update(self, collection: str, record_id: str, body: dict[str, Any]) -> dict[str, Any]:
        return await self._request("PATCH", f"{self._records_path(collection)}/{record_id}", json=body)

    async def delete(self, collection: str, record_id: str) -> None:
        await self._request("DELETE", f"{self._records_path(collection)}/{record_id}")

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    async def auth_with_password(self, collection: str, identity: str, password: str) -> AuthResponse:
        payload = await self._request(
            "POST",
            f"/api/collections/{collection}/auth-with-password",
            json={"identity": identity, "password": password},
            authenticated=False,
        )
        return self._auth_response(payload)

    async def auth_refresh(self, collection: str) -> AuthResponse:
        payload = await self._request("POST", f"/api/collections/{collection}/auth-refresh")
        return self._auth_response(payload)

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    @staticmethod
    def _records_path(collection: str) -> str:
        return f"/api/collections/{collection}/records"

    @staticmethod
    def _auth_response(payload: dict[str, Any]) -> AuthResponse:
        try:
            return AuthResponse.model_validate(payload)
        except PydanticValidationError as exc:
            raise RemoteError("malformed auth response") from exc

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
        authenticated: bool = True,
    ) -> dict[str, Any]:
        if self._client is None:
            raise RemoteError("PocketBase client is not open")

        headers: dict[str, str] = {}
        if authenticated and self._auth_store.token:
            headers["Authorization"] = self._auth_store.token

        _LOG.debug("%s %s", method, path)
        try:
            response = await self._client.request(method, path, params=params, json=json, headers=headers)
        except httpx.HTTPError as exc:
            raise RemoteError(f"{method} {path} failed: {exc}") from exc

        if response.status_code == 204:
            return {}

        payload = self._decode(response)
        if response.is_error:
            message = payload.get("message") if isinstance(payload.get("message"), str) else None
            details = payload.get("data") if isinstance(payload.get("data"), dict) else {}
            raise RemoteError(
                f"{method} {path} returned {response.status_code}: {message or response.reason_phrase}",
                status=response.status_code,
                details=details,
            )
        return payload

    @staticmethod
    def _decode(response: httpx.Response) -> dict[str, Any]:
        if not response.content:
            return {}
        try:
            payload = response.json()
        except ValueError:
            if response.is_error:
                return {}
            raise RemoteError(f"non-JSON response from {response.request.url}", status=response.status_code) from None
        return payload if isinstance(payload, dict) else {}
