"""Synthetic read/write health check for Vault with PagerDuty escalation."""

__version__ = "0.1.0"

CLIENT_NAME = "vault-rw-monitoring"
