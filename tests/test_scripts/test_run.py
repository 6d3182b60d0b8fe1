"""Tests for scripts/run.py — flag handling, startup failures, shutdown paths."""

from __future__ import annotations

import asyncio
import logging
import signal
from collections.abc import Iterator
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, patch

import pytest

from rwmonitor import __version__
from rwmonitor.core.config import Settings, reset_settings
from rwmonitor.core.types import AlertState
from scripts.run import build_parser, main, overrides_from_args, run


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for var in ("VAULT_ADDR", "VAULT_KEY", "VAULT_TOKEN", "PAGERDUTY_KEY", "INTERVAL", "THRESHOLD"):
        monkeypatch.delenv(var, raising=False)
    reset_settings()
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    reset_settings()


class StubLoop:
    """Stands in for CheckLoop; ``forever`` controls whether its task ends."""

    def __init__(self, forever: bool = True) -> None:
        self._forever = forever
        self.task: asyncio.Task[None] | None = None
        self.tick_count = 0
        self.state = AlertState.UNKNOWN
        self.stopped = False

    async def _run(self) -> None:
        if self._forever:
            await asyncio.Event().wait()

    async def start(self) -> None:
        self.task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        self.stopped = True
        if self.task is not None:
            self.task.cancel()
            try:
                await self.task
            except asyncio.CancelledError:
                pass


def _stack(loop: StubLoop) -> tuple[StubLoop, AsyncMock, AsyncMock]:
    return loop, AsyncMock(), AsyncMock()


def _settings() -> Settings:
    return Settings(
        vault={"token": "t"},  # type: ignore[arg-type]
        pagerduty={"integration_key": "pd"},  # type: ignore[arg-type]
    )


class TestParser:
    def test_overrides_only_include_given_flags(self) -> None:
        args = build_parser().parse_args(["--vault-address", "http://v:8200", "--threshold", "2"])
        assert overrides_from_args(args) == {
            "vault": {"address": "http://v:8200"},
            "check": {"threshold": 2},
        }

    def test_all_flags(self) -> None:
        args = build_parser().parse_args([
            "--vault-key", "/secret/k",
            "--vault-token", "tok",
            "--pagerduty-key", "pd",
            "--interval", "1m",
            "-v",
        ])
        assert overrides_from_args(args) == {
            "vault": {"key": "/secret/k", "token": "tok"},
            "pagerduty": {"integration_key": "pd"},
            "check": {"interval": "1m"},
            "logging": {"verbose": True},
        }

    def test_no_flags_no_overrides(self) -> None:
        assert overrides_from_args(build_parser().parse_args([])) == {}


class TestMain:
    def test_version_exits_zero(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["--version"]) == 0
        assert capsys.readouterr().out.strip() == f"vault-rw-monitoring {__version__}"

    def test_missing_token_is_fatal(self, tmp_path: Path) -> None:
        with patch("scripts.run.asyncio.run") as mock_run:
            code = main(["--config", str(tmp_path / "none.yaml"), "--pagerduty-key", "pd"])
        assert code == 1
        mock_run.assert_not_called()

    def test_missing_pagerduty_key_is_fatal(self, tmp_path: Path) -> None:
        with patch("scripts.run.asyncio.run") as mock_run:
            code = main(["--config", str(tmp_path / "none.yaml"), "--vault-token", "t"])
        assert code == 1
        mock_run.assert_not_called()

    def test_invalid_interval_is_fatal(
        self,
        tmp_path: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        code = main(["--config", str(tmp_path / "none.yaml"), "--interval", "soon"])
        assert code == 1
        assert "Unable to parse" in capsys.readouterr().err

    def test_valid_config_runs(self, tmp_path: Path) -> None:
        with patch("scripts.run.asyncio.run", return_value=0) as mock_run:
            code = main([
                "--config", str(tmp_path / "none.yaml"),
                "--vault-token", "t",
                "--pagerduty-key", "pd",
            ])
        assert code == 0
        mock_run.assert_called_once()
        mock_run.call_args[0][0].close()


class TestRun:
    async def test_unexpected_loop_exit_is_fatal(self) -> None:
        loop, store, notifier = _stack(StubLoop(forever=False))
        with patch("scripts.run.create_check_stack", return_value=(loop, store, notifier)):
            code = await run(_settings())
        assert code == 1
        assert loop.stopped
        store.connect.assert_awaited_once()
        store.close.assert_awaited_once()
        notifier.close.assert_awaited_once()

    async def test_signal_stops_cleanly(self) -> None:
        loop, store, notifier = _stack(StubLoop(forever=True))
        handlers: dict[int, Any] = {}
        event_loop = asyncio.get_running_loop()

        def _capture(sig: int, callback: Any) -> None:
            handlers[sig] = callback

        with (
            patch("scripts.run.create_check_stack", return_value=(loop, store, notifier)),
            patch.object(event_loop, "add_signal_handler", side_effect=_capture),
        ):
            event_loop.call_later(0.05, lambda: handlers[signal.SIGTERM]())
            code = await run(_settings())

        assert code == 0
        assert set(handlers) == {signal.SIGINT, signal.SIGTERM}
        assert loop.stopped
        store.close.assert_awaited_once()
        notifier.close.assert_awaited_once()
