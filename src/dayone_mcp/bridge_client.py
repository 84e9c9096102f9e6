"""Async HTTP client the gateway uses to reach the bridge."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from dayone_mcp.errors import BridgeCallError
from dayone_mcp.models import BridgeRequest

logger = logging.getLogger("dayone_mcp.bridge_client")

DEFAULT_TIMEOUT = 90.0


class BridgeClient:
    """POST ``BridgeRequest`` objects to ``<base_url>/bridge``.

    Usage:
        client = BridgeClient("http://localhost:3000", "secret")
        data = await client.call(BridgeRequest(Action.LIST_JOURNALS, {}))
    """

    def __init__(
        self,
        base_url: str,
        auth_token: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._auth_token = auth_token
        self._timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    async def call(self, request: BridgeRequest) -> Any:
        """Run one bridge action and return its ``data``.

        Raises:
            BridgeCallError: non-2xx status, ``success: false``, or the bridge
                could not be reached.
        """
        url = f"{self.base_url}/bridge"
        headers = {"Authorization": f"Bearer {self._auth_token}"}
        try:
            async with self._client() as client:
                response = await client.post(url, json=request.to_dict(), headers=headers)
        except httpx.TimeoutException:
            raise BridgeCallError("Bridge request timed out") from None
        except httpx.HTTPError as exc:
            logger.error("Bridge unreachable at %s: %s", url, exc)
            raise BridgeCallError(f"Failed to call bridge service: {exc}") from exc

        payload = _json_or_empty(response)
        if not response.is_success:
            message = payload.get("error") or f"Bridge request failed: {response.status_code}"
            raise BridgeCallError(str(message))
        if not payload.get("success"):
            raise BridgeCallError(str(payload.get("error") or "Bridge request failed"))
        return payload.get("data")

    async def health(self) -> dict[str, Any]:
        """Fetch the bridge's ``/health`` payload."""
        headers = {"Authorization": f"Bearer {self._auth_token}"}
        try:
            async with self._client() as client:
                response = await client.get(f"{self.base_url}/health", headers=headers)
                response.raise_for_status()
        except httpx.HTTPError as exc:
            raise BridgeCallError(f"Bridge health check failed: {exc}") from exc
        return _json_or_empty(response)


def _json_or_empty(response: httpx.Response) -> dict[str, Any]:
    try:
        payload = response.json()
    except ValueError:
        return {}
    return payload if isinstance(payload, dict) else {}
