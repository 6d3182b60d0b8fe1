"""Scheduler — the periodic check loop."""

from rwmonitor.scheduler.loop import CheckLoop

__all__ = ["CheckLoop"]
