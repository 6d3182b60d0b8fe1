"""Exception hierarchy for the monitor."""

from __future__ import annotations

from rwmonitor.core.types import FailureReason


class MonitorError(Exception):
    """Base exception for all monitor errors."""


class ConfigurationError(MonitorError):
    """Invalid or incomplete configuration (fatal at startup)."""


class StoreError(MonitorError):
    """A key-value store call failed (transport or non-2xx status)."""


class ProbeError(MonitorError):
    """One write/read/delete check cycle failed.

    Subclasses pin ``reason`` to the step that failed.
    """

    reason: FailureReason


class WriteError(ProbeError):
    reason = FailureReason.WRITE


class ReadError(ProbeError):
    reason = FailureReason.READ


class MismatchError(ProbeError):
    """Key absent after write, or read value differs from the marker."""

    reason = FailureReason.MISMATCH


class DeleteError(ProbeError):
    reason = FailureReason.DELETE


class DeliveryError(MonitorError):
    """The incident endpoint did not confirm delivery of an event."""
