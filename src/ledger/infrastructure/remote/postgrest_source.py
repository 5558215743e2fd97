"""PostgREST implementation of the RemoteSource port.

Talks to a PostgREST (or Supabase REST) endpoint over httpx. Tables are
exposed as ``/{table}``, remote procedures as ``/rpc/{name}``. Row-level
security on the server scopes rows to the bearer token's user; the
coordinator additionally filters by household id on every call.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

import httpx

from infrastructure.remote.observability import (
    DefaultRemoteSourceProbe,
    RemoteSourceProbe,
)
from shared_kernel.datasource.protocols import RemoteSource
from shared_kernel.datasource.types import Row, WriteOperation
from shared_kernel.exceptions import RemoteUnavailableError
from shared_kernel.identity.protocols import IdentityProvider


def encode_filter(value: Any) -> str:
    """Encode an equality filter value in PostgREST operator syntax."""
    if value is None:
        return "is.null"
    if isinstance(value, bool):
        return f"eq.{str(value).lower()}"
    return f"eq.{value}"


def encode_order(order: Sequence[str]) -> str:
    """Encode ``["sort_order", "-name"]`` as ``sort_order.asc,name.desc``."""
    parts = []
    for column in order:
        if column.startswith("-"):
            parts.append(f"{column[1:]}.desc")
        else:
            parts.append(f"{column}.asc")
    return ",".join(parts)


class PostgrestRemoteSource(RemoteSource):
    """Remote data tier backed by a PostgREST HTTP API."""

    _PREFER_BY_OPERATION = {
        WriteOperation.INSERT: "return=representation",
        WriteOperation.UPSERT: "resolution=merge-duplicates,return=representation",
        WriteOperation.UPDATE: "return=representation",
        WriteOperation.DELETE: "return=representation",
    }

    _METHOD_BY_OPERATION = {
        WriteOperation.INSERT: "POST",
        WriteOperation.UPSERT: "POST",
        WriteOperation.UPDATE: "PATCH",
        WriteOperation.DELETE: "DELETE",
    }

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: str,
        identity: IdentityProvider | None = None,
        *,
        timeout_seconds: float = 10.0,
        rpc_timeout_seconds: float = 5.0,
        probe: RemoteSourceProbe | None = None,
    ):
        """Initialize the adapter.

        Args:
            client: httpx client whose base_url is the REST endpoint root
            api_key: Public API key sent as the ``apikey`` header
            identity: Provider of the bearer token; the API key is used
                as bearer when nobody is signed in
            timeout_seconds: Timeout for table reads and writes
            rpc_timeout_seconds: Timeout for remote procedure calls
            probe: Optional domain probe for observability
        """
        self._client = client
        self._api_key = api_key
        self._identity = identity
        self._timeout = timeout_seconds
        self._rpc_timeout = rpc_timeout_seconds
        self._probe = probe or DefaultRemoteSourceProbe()

    async def _headers(self, prefer: str | None = None) -> dict[str, str]:
        token = self._api_key
        if self._identity is not None:
            identity = await self._identity.current_identity()
            if identity is not None and identity.access_token:
                token = identity.access_token

        headers = {
            "apikey": self._api_key,
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        collection: str,
        *,
        params: Mapping[str, str] | None = None,
        json: Any = None,
        prefer: str | None = None,
        timeout: float,
    ) -> Any:
        headers = await self._headers(prefer)
        try:
            response = await self._client.request(
                method,
                path,
                params=dict(params or {}),
                json=json,
                headers=headers,
                timeout=timeout,
            )
        except httpx.HTTPError as e:
            self._probe.request_failed(method=method, collection=collection, reason=repr(e))
            raise RemoteUnavailableError(
                f"{method} {path} failed: {e}",
                collection=collection,
                operation=method,
            ) from e

        if response.status_code >= 400:
            self._probe.request_failed(
                method=method,
                collection=collection,
                reason=response.text[:200],
                status_code=response.status_code,
            )
            raise RemoteUnavailableError(
                f"HTTP {response.status_code}: {method} {path} rejected",
                collection=collection,
                operation=method,
                status_code=response.status_code,
            )

        try:
            body = response.json() if response.content else None
        except ValueError as e:
            self._probe.request_failed(
                method=method,
                collection=collection,
                reason="invalid JSON body",
                status_code=response.status_code,
            )
            raise RemoteUnavailableError(
                f"{method} {path} returned a malformed body",
                collection=collection,
                operation=method,
                status_code=response.status_code,
            ) from e

        row_count = len(body) if isinstance(body, list) else int(body is not None)
        self._probe.request_completed(
            method=method,
            collection=collection,
            status_code=response.status_code,
            row_count=row_count,
        )
        return body

    async def read(
        self,
        collection: str,
        filters: Mapping[str, Any],
        *,
        columns: str = "*",
        order: Sequence[str] = (),
        limit: int | None = None,
    ) -> list[Row]:
        params = {"select": columns}
        params.update({column: encode_filter(value) for column, value in filters.items()})
        if order:
            params["order"] = encode_order(order)
        if limit is not None:
            params["limit"] = str(limit)

        body = await self._request(
            "GET", f"/{collection}", collection, params=params, timeout=self._timeout
        )
        return list(body or [])

    async def write(
        self,
        collection: str,
        operation: WriteOperation,
        payload: Row | list[Row] | None = None,
        *,
        filters: Mapping[str, Any] | None = None,
        on_conflict: str | None = None,
    ) -> list[Row]:
        params = {column: encode_filter(value) for column, value in (filters or {}).items()}
        if operation is WriteOperation.UPSERT and on_conflict:
            params["on_conflict"] = on_conflict

        body = await self._request(
            self._METHOD_BY_OPERATION[operation],
            f"/{collection}",
            collection,
            params=params,
            json=payload if operation.carries_payload else None,
            prefer=self._PREFER_BY_OPERATION[operation],
            timeout=self._timeout,
        )
        if isinstance(body, dict):
            return [body]
        return list(body or [])

    async def rpc(self, name: str, args: Mapping[str, Any] | None = None) -> Any:
        return await self._request(
            "POST",
            f"/rpc/{name}",
            name,
            json=dict(args or {}),
            timeout=self._rpc_timeout,
        )
