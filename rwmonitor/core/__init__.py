"""Core module — config, types, errors, logging."""

from rwmonitor.core.config import (
    Settings,
    get_settings,
    load_settings,
    parse_duration,
    reset_settings,
)
from rwmonitor.core.exceptions import (
    ConfigurationError,
    DeleteError,
    DeliveryError,
    MismatchError,
    MonitorError,
    ProbeError,
    ReadError,
    StoreError,
    WriteError,
)
from rwmonitor.core.logging import setup_logging
from rwmonitor.core.types import (
    AlertState,
    CheckResult,
    EventKind,
    FailureReason,
    IncidentEvent,
    TickReport,
)

__all__ = [
    "AlertState",
    "CheckResult",
    "ConfigurationError",
    "DeleteError",
    "DeliveryError",
    "EventKind",
    "FailureReason",
    "IncidentEvent",
    "MismatchError",
    "MonitorError",
    "ProbeError",
    "ReadError",
    "Settings",
    "StoreError",
    "TickReport",
    "WriteError",
    "get_settings",
    "load_settings",
    "parse_duration",
    "reset_settings",
    "setup_logging",
]
