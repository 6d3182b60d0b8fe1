"""Pydantic settings loaded from YAML, environment, and command-line overrides."""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, SecretStr, field_validator

from rwmonitor.core.exceptions import ConfigurationError

_settings: Settings | None = None

_DEFAULT_CONFIG_PATH = Path("config/settings.yaml")

PAGERDUTY_EVENT_URL = "https://events.pagerduty.com/generic/2010-04-15/create_event.json"

# Environment variable -> (section, field)
_ENV_MAP: dict[str, tuple[str, str]] = {
    "VAULT_ADDR": ("vault", "address"),
    "VAULT_KEY": ("vault", "key"),
    "VAULT_TOKEN": ("vault", "token"),
    "PAGERDUTY_KEY": ("pagerduty", "integration_key"),
    "INTERVAL": ("check", "interval"),
    "THRESHOLD": ("check", "threshold"),
}

_DURATION_RE = re.compile(r"(\d+(?:\.\d+)?)(ns|us|µs|ms|s|m|h)")
_DURATION_UNITS: dict[str, float] = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


def parse_duration(value: str | float | int) -> float:
    """Parse a duration into seconds.

    Accepts plain numbers (seconds) or Go-style strings such as ``30s``,
    ``1m30s`` or ``500ms``.
    """
    if isinstance(value, bool):
        raise ValueError(f"invalid duration: {value!r}")
    if isinstance(value, int | float):
        return float(value)
    if not isinstance(value, str):
        raise ValueError(f"invalid duration: {value!r}")

    text = value.strip()
    try:
        return float(text)
    except ValueError:
        pass

    pos = 0
    total = 0.0
    for match in _DURATION_RE.finditer(text):
        if match.start() != pos:
            break
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()

    if pos == 0 or pos != len(text):
        raise ValueError(f"invalid duration: {value!r}")
    return total


class VaultConfig(BaseModel):
    """Vault instance under test."""

    address: str = "http://localhost:8200"
    key: str = "/secret/vault-rw-monitoring"
    token: SecretStr = SecretStr("")
    timeout_secs: float = Field(default=10.0, gt=0)


class PagerDutyConfig(BaseModel):
    """PagerDuty Generic Events API integration."""

    integration_key: SecretStr = SecretStr("")
    event_url: str = PAGERDUTY_EVENT_URL
    timeout_secs: float = Field(default=10.0, gt=0)


class CheckConfig(BaseModel):
    """Check cadence and escalation threshold."""

    interval: float = 30.0
    threshold: int = Field(default=4, ge=1)

    @field_validator("interval", mode="before")
    @classmethod
    def _parse_interval(cls, value: Any) -> float:
        secs = parse_duration(value)
        if secs <= 0:
            raise ValueError("interval must be positive")
        return secs


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "json"
    verbose: bool = False


class Settings(BaseModel):
    """Root settings container."""

    vault: VaultConfig = VaultConfig()
    pagerduty: PagerDutyConfig = PagerDutyConfig()
    check: CheckConfig = CheckConfig()
    logging: LoggingConfig = LoggingConfig()

    def require_credentials(self) -> None:
        """Raise ConfigurationError if a required credential is missing."""
        if not self.vault.token.get_secret_value():
            raise ConfigurationError("You need to provide a vault-token")
        if not self.pagerduty.integration_key.get_secret_value():
            raise ConfigurationError("You need to provide a PagerDuty service key")


def _deep_merge(base: dict[str, Any], extra: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in extra.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    data: dict[str, Any] = {}
    for var, (section, field) in _ENV_MAP.items():
        value = environ.get(var)
        if value:
            data.setdefault(section, {})[field] = value
    return data


def load_settings(
    path: str | Path | None = None,
    overrides: Mapping[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Load settings and cache globally.

    Sources are layered: defaults < YAML < environment < *overrides*.

    Args:
        path: Path to YAML config. Defaults to config/settings.yaml.
        overrides: Nested mapping (e.g. from command-line flags) applied last.
        environ: Environment mapping. Defaults to ``os.environ``.

    Returns:
        Parsed Settings instance.

    Raises:
        ConfigurationError: If the merged configuration fails validation.
    """
    global _settings  # noqa: PLW0603

    config_path = Path(path) if path else _DEFAULT_CONFIG_PATH

    data: dict[str, Any] = {}
    if config_path.exists():
        with open(config_path) as f:
            raw = yaml.safe_load(f)
            if isinstance(raw, dict):
                data = raw

    data = _deep_merge(data, _env_overrides(os.environ if environ is None else environ))
    if overrides:
        data = _deep_merge(data, overrides)

    try:
        _settings = Settings(**data)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid configuration: {exc}") from exc
    return _settings


def get_settings() -> Settings:
    """Return the cached settings, loading defaults if not yet loaded."""
    global _settings  # noqa: PLW0603
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Reset the cached settings (useful for testing)."""
    global _settings  # noqa: PLW0603
    _settings = None
