"""CheckLoop — fixed-rate driver for probe, counter, and alert state."""

from __future__ import annotations

import asyncio

import structlog

from rwmonitor.alerting.state_machine import AlertStateMachine
from rwmonitor.check.counter import FailureCounter
from rwmonitor.check.probe import Probe
from rwmonitor.core.types import AlertState, TickReport

logger = structlog.stdlib.get_logger()


class CheckLoop:
    """Runs one check per interval for the lifetime of the process.

    Ticks are scheduled at a fixed rate (``start + n * interval``) on the
    event loop's monotonic clock, independent of how long each tick takes.
    A tick that overruns its slot drops the missed deadlines instead of
    firing them back to back.  Ticks never overlap, and an error inside a
    tick is logged without stopping the loop.

    Usage::

        loop = CheckLoop(probe, machine, interval=30.0)
        await loop.start()
        # ...
        await loop.stop()
    """

    def __init__(
        self,
        probe: Probe,
        machine: AlertStateMachine,
        interval: float,
        counter: FailureCounter | None = None,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._probe = probe
        self._machine = machine
        self._interval = interval
        self._counter = counter or FailureCounter()
        self._task: asyncio.Task[None] | None = None
        self._running = False
        self._tick_count = 0
        self._error_count = 0
        self._last_report: TickReport | None = None

    # ── Properties ───────────────────────────────────────────────

    @property
    def running(self) -> bool:
        return self._running

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def counter(self) -> FailureCounter:
        return self._counter

    @property
    def state(self) -> AlertState:
        return self._machine.state

    @property
    def tick_count(self) -> int:
        return self._tick_count

    @property
    def error_count(self) -> int:
        """Ticks that raised an unexpected error."""
        return self._error_count

    @property
    def last_report(self) -> TickReport | None:
        return self._last_report

    @property
    def task(self) -> asyncio.Task[None] | None:
        return self._task

    # ── Lifecycle ────────────────────────────────────────────────

    async def start(self) -> None:
        """Start the background tick loop."""
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._loop(), name="check-loop")
        logger.info(
            "check_loop_started",
            interval=self._interval,
            threshold=self._machine.threshold,
        )

    async def stop(self) -> None:
        """Stop the tick loop, waiting for an in-flight tick to be cancelled."""
        self._running = False
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            except Exception:
                logger.exception("check_loop_crashed")
            self._task = None
        logger.info("check_loop_stopped", ticks=self._tick_count)

    async def run_forever(self) -> None:
        """Start if needed and block until the loop task ends."""
        await self.start()
        if self._task is not None:
            await self._task

    # ── Ticking ──────────────────────────────────────────────────

    async def tick(self) -> TickReport | None:
        """Run one probe → counter → alert evaluation step.

        Returns the tick report, or None if the tick raised.
        """
        self._tick_count += 1
        try:
            result = await self._probe.check()
            if result.success:
                logger.debug("check_succeeded", duration_ms=round(result.duration_ms, 1))
            else:
                count = self._counter.on_failure()
                logger.warning(
                    "check_failed",
                    failure_count=count,
                    threshold=self._machine.threshold,
                    reason=result.reason,
                    error=result.detail,
                )
            report = await self._machine.evaluate(result, self._counter)
        except Exception:
            self._error_count += 1
            logger.exception("tick_error", tick=self._tick_count)
            return None

        self._last_report = report
        return report

    async def _loop(self) -> None:
        clock = asyncio.get_running_loop()
        next_at = clock.time() + self._interval
        while self._running:
            delay = next_at - clock.time()
            if delay > 0:
                await asyncio.sleep(delay)

            await self.tick()

            next_at += self._interval
            now = clock.time()
            if next_at <= now:
                skipped = int((now - next_at) // self._interval) + 1
                next_at += skipped * self._interval
                logger.warning("tick_overrun", skipped=skipped, interval=self._interval)
