"""Vault HTTP API client implementing KeyValueStore."""

from __future__ import annotations

import httpx
import structlog

from rwmonitor.core.config import VaultConfig
from rwmonitor.core.exceptions import StoreError
from rwmonitor.store.base import KeyValueStore, normalize_path

logger = structlog.stdlib.get_logger()

# Field inside the secret that carries the marker value.
VALUE_FIELD = "value"


class VaultStore(KeyValueStore):
    """Talks to the Vault logical backend over ``/v1/<path>``.

    Usage::

        store = VaultStore(settings.vault)
        async with store:
            await store.write("secret/check", "abc")
            assert await store.read("secret/check") == "abc"
            await store.delete("secret/check")
    """

    def __init__(self, config: VaultConfig) -> None:
        self._config = config
        self._http: httpx.AsyncClient | None = None

    @property
    def address(self) -> str:
        return self._config.address

    @property
    def connected(self) -> bool:
        """Whether the HTTP client is active."""
        return self._http is not None and not self._http.is_closed

    async def connect(self) -> None:
        """Create the httpx async client."""
        self._http = httpx.AsyncClient(
            base_url=self._config.address.rstrip("/"),
            headers={"X-Vault-Token": self._config.token.get_secret_value()},
            timeout=httpx.Timeout(self._config.timeout_secs),
        )

    async def close(self) -> None:
        """Close the httpx async client."""
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    async def write(self, path: str, value: str) -> None:
        await self._request("PUT", path, json={VALUE_FIELD: value})

    async def read(self, path: str) -> str | None:
        response = await self._request("GET", path, allow_missing=True)
        if response.status_code == 404:
            return None

        try:
            body = response.json()
        except ValueError as exc:
            raise StoreError("Vault returned invalid JSON") from exc

        data = body.get("data") if isinstance(body, dict) else None
        if not isinstance(data, dict) or VALUE_FIELD not in data:
            return None
        value = data[VALUE_FIELD]
        return value if isinstance(value, str) else str(value)

    async def delete(self, path: str) -> None:
        await self._request("DELETE", path)

    async def _request(
        self,
        method: str,
        path: str,
        json: dict[str, str] | None = None,
        allow_missing: bool = False,
    ) -> httpx.Response:
        if self._http is None:
            raise StoreError("Vault client not connected")

        url = f"/v1/{normalize_path(path)}"
        try:
            response = await self._http.request(method, url, json=json)
        except httpx.HTTPError as exc:
            raise StoreError(f"Vault {method} {url} failed: {exc}") from exc

        if allow_missing and response.status_code == 404:
            return response

        if response.status_code >= 400:
            logger.debug(
                "vault_error_response",
                method=method,
                path=url,
                status=response.status_code,
                body=response.text[:200],
            )
            raise StoreError(
                f"Vault {method} {url} returned {response.status_code}"
            )
        return response
