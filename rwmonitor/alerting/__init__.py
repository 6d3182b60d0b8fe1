"""Incident alerting — sinks, notifier, and alert state machine."""

from rwmonitor.alerting.notifier import (
    IncidentNotifier,
    client_identity,
    describe_failure,
    incident_key,
)
from rwmonitor.alerting.sink import IncidentSink, PagerDutySink
from rwmonitor.alerting.state_machine import AlertStateMachine

__all__ = [
    "AlertStateMachine",
    "IncidentNotifier",
    "IncidentSink",
    "PagerDutySink",
    "client_identity",
    "describe_failure",
    "incident_key",
]
