"""Convenience factory for wiring the check stack from settings."""

from __future__ import annotations

from rwmonitor.alerting.notifier import IncidentNotifier, describe_failure, incident_key
from rwmonitor.alerting.sink import IncidentSink, PagerDutySink
from rwmonitor.alerting.state_machine import AlertStateMachine
from rwmonitor.check.probe import Probe
from rwmonitor.core.config import Settings
from rwmonitor.scheduler.loop import CheckLoop
from rwmonitor.store.base import KeyValueStore
from rwmonitor.store.vault import VaultStore


def create_check_stack(
    settings: Settings,
    store: KeyValueStore | None = None,
    sink: IncidentSink | None = None,
) -> tuple[CheckLoop, KeyValueStore, IncidentNotifier]:
    """Build the loop plus the resources the caller must open and close.

    *store* and *sink* default to the Vault and PagerDuty clients.

    Returns:
        (loop, store, notifier)
    """
    address = settings.vault.address
    threshold = settings.check.threshold

    if store is None:
        store = VaultStore(settings.vault)
    if sink is None:
        sink = PagerDutySink(settings.pagerduty)

    notifier = IncidentNotifier(
        sink=sink,
        service_key=settings.pagerduty.integration_key.get_secret_value(),
        details={
            "vault_address": address,
            "vault_key": settings.vault.key,
            "threshold": threshold,
        },
    )
    machine = AlertStateMachine(
        notifier=notifier,
        incident_key=incident_key(address),
        description=describe_failure(address, threshold),
        threshold=threshold,
    )
    loop = CheckLoop(
        probe=Probe(store, settings.vault.key),
        machine=machine,
        interval=settings.check.interval,
    )
    return loop, store, notifier
