"""Domain types for checks, alert state, and incident events."""

from __future__ import annotations

import time
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field


class AlertState(StrEnum):
    """Current alert status as last confirmed by the incident endpoint."""

    UNKNOWN = "unknown"
    OK = "ok"
    FAILED = "failed"


class EventKind(StrEnum):
    """Incident event type accepted by the Generic Events API."""

    TRIGGER = "trigger"
    RESOLVE = "resolve"


class FailureReason(StrEnum):
    """Step of the check cycle that failed."""

    WRITE = "write"
    READ = "read"
    MISMATCH = "mismatch"
    DELETE = "delete"


class CheckResult(BaseModel):
    """Outcome of one probe cycle."""

    success: bool
    reason: FailureReason | None = None
    detail: str = ""
    duration_ms: float = 0.0
    checked_at: float = Field(default_factory=time.time)

    @classmethod
    def ok(cls, duration_ms: float = 0.0) -> CheckResult:
        return cls(success=True, duration_ms=duration_ms)

    @classmethod
    def failed(
        cls,
        reason: FailureReason,
        detail: str = "",
        duration_ms: float = 0.0,
    ) -> CheckResult:
        return cls(
            success=False,
            reason=reason,
            detail=detail,
            duration_ms=duration_ms,
        )


class IncidentEvent(BaseModel):
    """Request body for the PagerDuty Generic Events API (v1)."""

    service_key: str
    event_type: EventKind
    incident_key: str = ""
    description: str
    client: str = ""
    client_url: str = ""
    details: dict[str, Any] = Field(default_factory=dict)

    def to_payload(self) -> dict[str, Any]:
        """Serialise for the wire, omitting empty optional fields."""
        payload = self.model_dump(mode="json")
        for key in ("incident_key", "client", "client_url", "details"):
            if not payload[key]:
                del payload[key]
        return payload


class TickReport(BaseModel):
    """What happened during one scheduler tick."""

    result: CheckResult
    failure_count: int = 0
    state: AlertState = AlertState.UNKNOWN
    notification: EventKind | None = None
    delivered: bool | None = None
