"""IncidentNotifier — builds trigger/resolve events and hands them to a sink."""

from __future__ import annotations

import hashlib
from typing import Any

import structlog

from rwmonitor import CLIENT_NAME, __version__
from rwmonitor.alerting.sink import IncidentSink
from rwmonitor.core.types import EventKind, IncidentEvent

logger = structlog.get_logger(__name__)


def incident_key(address: str) -> str:
    """Deterministic incident key for a monitored store address.

    Stable across restarts so triggers and resolves for the same target
    correlate to one external incident.
    """
    seed = f"{CLIENT_NAME} of {address}"
    return hashlib.sha256(seed.encode()).hexdigest()


def describe_failure(address: str, threshold: int) -> str:
    return (
        f"Vault instance at {address} failed {threshold} consecutive tests "
        f"of the {CLIENT_NAME}"
    )


def client_identity() -> str:
    return f"{CLIENT_NAME} {__version__}"


class IncidentNotifier:
    """Encodes incident events and delivers them synchronously.

    ``notify`` raises ``DeliveryError`` when the sink cannot confirm
    delivery; it never touches alert state itself.
    """

    def __init__(
        self,
        sink: IncidentSink,
        service_key: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self._sink = sink
        self._service_key = service_key
        self._details = details or {}

    def build_event(
        self,
        kind: EventKind,
        key: str,
        description: str,
    ) -> IncidentEvent:
        return IncidentEvent(
            service_key=self._service_key,
            event_type=kind,
            incident_key=key,
            description=description,
            client=client_identity(),
            details=dict(self._details),
        )

    async def notify(self, kind: EventKind, key: str, description: str) -> None:
        event = self.build_event(kind, key, description)
        await self._sink.send(event.to_payload())
        logger.info("incident_event_delivered", event_type=kind.value, incident_key=key)

    async def close(self) -> None:
        await self._sink.close()
