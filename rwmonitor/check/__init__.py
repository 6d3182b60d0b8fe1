"""Store check — probe cycle and failure counting."""

from rwmonitor.check.counter import FailureCounter
from rwmonitor.check.probe import Probe, new_marker

__all__ = [
    "FailureCounter",
    "Probe",
    "new_marker",
]
