"""Probe — one write→read→verify→delete cycle against the store."""

from __future__ import annotations

import secrets
import time

from rwmonitor.core.exceptions import (
    DeleteError,
    MismatchError,
    ProbeError,
    ReadError,
    WriteError,
)
from rwmonitor.core.types import CheckResult
from rwmonitor.store.base import KeyValueStore, normalize_path


def new_marker() -> str:
    """Return a fresh 128-bit random token."""
    return secrets.token_hex(16)


class Probe:
    """Verifies the store's mutation and read paths with a single attempt.

    No retries happen here; the scheduler's interval owns retry timing.
    Any error raised by a store step is classified by that step, so it is
    counted like a transport failure.  A failed cleanup counts as a failed
    check even when the value read back was correct.
    """

    def __init__(self, store: KeyValueStore, key: str) -> None:
        self._store = store
        self._path = normalize_path(key)

    @property
    def path(self) -> str:
        return self._path

    async def run(self) -> None:
        """Run one cycle.

        Raises:
            WriteError: Writing the marker failed.
            ReadError: Reading the key back failed.
            MismatchError: The key was absent or held a different value.
            DeleteError: Removing the key failed.
        """
        marker = new_marker()

        try:
            await self._store.write(self._path, marker)
        except Exception as exc:
            raise WriteError(f"Could not write key: {exc}") from exc

        try:
            value = await self._store.read(self._path)
        except Exception as exc:
            raise ReadError(f"Could not read key: {exc}") from exc

        if value is None or value != marker:
            raise MismatchError("Did not find expected value in key.")

        try:
            await self._store.delete(self._path)
        except Exception as exc:
            raise DeleteError(f"Could not delete key: {exc}") from exc

    async def check(self) -> CheckResult:
        """Run one cycle and wrap the outcome in a CheckResult."""
        started = time.monotonic()
        try:
            await self.run()
        except ProbeError as exc:
            duration_ms = (time.monotonic() - started) * 1000.0
            return CheckResult.failed(exc.reason, str(exc), duration_ms)
        return CheckResult.ok((time.monotonic() - started) * 1000.0)
