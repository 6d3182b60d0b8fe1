"""Incident sinks — delivery of encoded events to the alerting endpoint."""

from __future__ import annotations

import abc
from typing import Any

import httpx
import structlog

from rwmonitor.core.config import PagerDutyConfig
from rwmonitor.core.exceptions import DeliveryError

logger = structlog.get_logger(__name__)


class IncidentSink(abc.ABC):
    """Base class for incident event delivery."""

    @abc.abstractmethod
    async def send(self, payload: dict[str, Any]) -> None:
        """Deliver one event. Raises DeliveryError unless confirmed."""

    @abc.abstractmethod
    async def close(self) -> None:
        """Release resources (HTTP clients, etc.)."""


class PagerDutySink(IncidentSink):
    """Posts events to the PagerDuty Generic Events API.

    Any transport error or response status >= 400 is a delivery failure.
    """

    def __init__(self, config: PagerDutyConfig) -> None:
        self._url = config.event_url
        self._timeout = config.timeout_secs
        self._http: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._http is None or self._http.is_closed:
            self._http = httpx.AsyncClient(timeout=httpx.Timeout(self._timeout))
        return self._http

    async def send(self, payload: dict[str, Any]) -> None:
        try:
            response = await self._get_client().post(self._url, json=payload)
        except httpx.HTTPError as exc:
            raise DeliveryError(f"PagerDuty request failed: {exc}") from exc

        if response.status_code >= 400:
            logger.warning(
                "pagerduty_send_failed",
                status=response.status_code,
                body=response.text[:200],
            )
            raise DeliveryError(
                f"Experienced unexpected status code: {response.status_code}"
            )

    async def close(self) -> None:
        if self._http is not None and not self._http.is_closed:
            await self._http.aclose()
        self._http = None
