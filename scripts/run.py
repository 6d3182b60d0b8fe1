#!/usr/bin/env python3
"""Monitor entrypoint — wires the Vault check and runs it until interrupted.

Usage::

    # Token and integration key from the environment
    VAULT_TOKEN=... PAGERDUTY_KEY=... python scripts/run.py

    # Flags override environment and YAML
    python scripts/run.py --vault-address https://vault:8200 --interval 1m -v

    # Print version and exit
    python scripts/run.py --version
"""

from __future__ import annotations

import argparse
import asyncio
import signal
import sys
from typing import Any

import structlog

from rwmonitor import CLIENT_NAME, __version__
from rwmonitor.core.config import Settings, load_settings
from rwmonitor.core.exceptions import ConfigurationError
from rwmonitor.core.logging import setup_logging
from rwmonitor.factory import create_check_stack

logger = structlog.get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=CLIENT_NAME,
        description="Write/read/delete health check for Vault with PagerDuty alerting.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to settings YAML (default: config/settings.yaml)",
    )
    parser.add_argument("--vault-address", help="Address of the Vault instance")
    parser.add_argument("--vault-key", help="Key to use for read/write test")
    parser.add_argument(
        "--vault-token",
        help="Token to access the key specified in vault-key",
    )
    parser.add_argument(
        "--pagerduty-key",
        help="Integration key for the Generic API service in PagerDuty",
    )
    parser.add_argument("--interval", help="Interval to execute the test (e.g. 30s)")
    parser.add_argument(
        "--threshold",
        type=int,
        help="How often to fail before sending PagerDuty alerts",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level override: DEBUG, INFO, WARNING, ERROR",
    )
    parser.add_argument(
        "--log-format",
        choices=["json", "console"],
        default=None,
        help="Log renderer override",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=None,
        help="Enable verbose output",
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Prints current version and exits",
    )
    return parser


def overrides_from_args(args: argparse.Namespace) -> dict[str, Any]:
    """Translate explicitly given flags into a nested settings mapping."""
    flag_map: dict[str, tuple[str, str]] = {
        "vault_address": ("vault", "address"),
        "vault_key": ("vault", "key"),
        "vault_token": ("vault", "token"),
        "pagerduty_key": ("pagerduty", "integration_key"),
        "interval": ("check", "interval"),
        "threshold": ("check", "threshold"),
        "verbose": ("logging", "verbose"),
    }
    overrides: dict[str, Any] = {}
    for attr, (section, field) in flag_map.items():
        value = getattr(args, attr, None)
        if value is not None:
            overrides.setdefault(section, {})[field] = value
    return overrides


async def run(settings: Settings) -> int:
    """Run the check loop until a shutdown signal or unexpected exit."""
    check_loop, store, notifier = create_check_stack(settings)

    logger.info(
        "monitor_starting",
        version=__version__,
        vault_address=settings.vault.address,
        interval=settings.check.interval,
        threshold=settings.check.threshold,
    )

    await store.connect()
    await check_loop.start()

    stop_event = asyncio.Event()

    def _signal_handler() -> None:
        logger.info("shutdown_signal_received")
        stop_event.set()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _signal_handler)
        except NotImplementedError:
            # Windows: signal handlers not supported on ProactorEventLoop
            pass

    stop_waiter = asyncio.create_task(stop_event.wait())
    waiters: set[asyncio.Future[Any]] = {stop_waiter}
    if check_loop.task is not None:
        waiters.add(check_loop.task)

    exit_code = 0
    try:
        done, _ = await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)
        if stop_waiter not in done:
            logger.critical("monitor_exited_unexpectedly")
            exit_code = 1
    except KeyboardInterrupt:
        logger.info("keyboard_interrupt")
    finally:
        stop_waiter.cancel()
        await check_loop.stop()
        await notifier.close()
        await store.close()

    logger.info("monitor_stopped", ticks=check_loop.tick_count, state=check_loop.state.value)
    return exit_code


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    if args.version:
        print(f"{CLIENT_NAME} {__version__}")
        return 0

    try:
        settings = load_settings(args.config, overrides=overrides_from_args(args))
    except ConfigurationError as exc:
        print(f"Unable to parse commandline options: {exc}", file=sys.stderr)
        return 1

    setup_logging(level=args.log_level, fmt=args.log_format)

    try:
        settings.require_credentials()
    except ConfigurationError as exc:
        logger.error("configuration_error", error=str(exc))
        return 1

    return asyncio.run(run(settings))


if __name__ == "__main__":
    sys.exit(main())
