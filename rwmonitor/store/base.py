"""Abstract key-value store used by the probe."""

from __future__ import annotations

import abc
from types import TracebackType


def normalize_path(path: str) -> str:
    """Strip leading separators so the path is store-relative."""
    return path.lstrip("/")


class KeyValueStore(abc.ABC):
    """Read/write/delete capability the probe needs from a store.

    Implementations raise ``StoreError`` for transport failures and
    unexpected responses.  ``read`` returns ``None`` when the key is absent.

    Usage::

        async with VaultStore(config) as store:
            await store.write("secret/x", "marker")
    """

    @abc.abstractmethod
    async def connect(self) -> None:
        """Open the underlying connection."""

    @abc.abstractmethod
    async def close(self) -> None:
        """Release the underlying connection."""

    @abc.abstractmethod
    async def write(self, path: str, value: str) -> None:
        """Store *value* at *path*."""

    @abc.abstractmethod
    async def read(self, path: str) -> str | None:
        """Return the value at *path*, or None if the key does not exist."""

    @abc.abstractmethod
    async def delete(self, path: str) -> None:
        """Remove *path*."""

    async def __aenter__(self) -> KeyValueStore:
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()
