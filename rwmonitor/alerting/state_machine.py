"""AlertStateMachine — decides trigger/resolve notifications per tick.

States: ``unknown`` (start) → ``ok`` | ``failed``; ``ok`` ⇄ ``failed``.

A trigger is only sent while the state is not ``failed`` and a resolve
only while it is not ``ok``, so repeated identical outcomes never reach the
network.  State and failure counter change only after the notifier
confirms delivery; a failed delivery leaves both untouched and the next
tick retries.
"""

from __future__ import annotations

import structlog

from rwmonitor.alerting.notifier import IncidentNotifier
from rwmonitor.check.counter import FailureCounter
from rwmonitor.core.exceptions import DeliveryError
from rwmonitor.core.types import AlertState, CheckResult, EventKind, TickReport

logger = structlog.stdlib.get_logger()


class AlertStateMachine:
    """Holds the current alert state for one monitored target."""

    def __init__(
        self,
        notifier: IncidentNotifier,
        incident_key: str,
        description: str,
        threshold: int,
    ) -> None:
        if threshold < 1:
            raise ValueError("threshold must be >= 1")
        self._notifier = notifier
        self._incident_key = incident_key
        self._description = description
        self._threshold = threshold
        self._state = AlertState.UNKNOWN

    @property
    def state(self) -> AlertState:
        return self._state

    @property
    def threshold(self) -> int:
        return self._threshold

    @property
    def incident_key(self) -> str:
        return self._incident_key

    async def evaluate(self, result: CheckResult, counter: FailureCounter) -> TickReport:
        """Apply one tick's outcome. *counter* must already reflect *result*."""
        if result.success:
            if self._state == AlertState.OK:
                counter.on_success()
                return self._report(result, counter)
            return await self._attempt(EventKind.RESOLVE, result, counter)

        if counter.reached(self._threshold) and self._state != AlertState.FAILED:
            return await self._attempt(EventKind.TRIGGER, result, counter)

        return self._report(result, counter)

    async def _attempt(
        self,
        kind: EventKind,
        result: CheckResult,
        counter: FailureCounter,
    ) -> TickReport:
        try:
            await self._notifier.notify(kind, self._incident_key, self._description)
        except DeliveryError as exc:
            logger.warning(
                "incident_delivery_failed",
                event_type=kind.value,
                state=self._state.value,
                failure_count=counter.current(),
                error=str(exc),
            )
            return self._report(result, counter, kind, delivered=False)

        previous = self._state
        self._state = AlertState.FAILED if kind == EventKind.TRIGGER else AlertState.OK
        counter.on_resolved()
        logger.info(
            "incident_triggered" if kind == EventKind.TRIGGER else "incident_resolved",
            previous_state=previous.value,
            state=self._state.value,
            incident_key=self._incident_key,
        )
        return self._report(result, counter, kind, delivered=True)

    def _report(
        self,
        result: CheckResult,
        counter: FailureCounter,
        kind: EventKind | None = None,
        delivered: bool | None = None,
    ) -> TickReport:
        return TickReport(
            result=result,
            failure_count=counter.current(),
            state=self._state,
            notification=kind,
            delivered=delivered,
        )
