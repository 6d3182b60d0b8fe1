"""Key-value store clients."""

from rwmonitor.store.base import KeyValueStore, normalize_path
from rwmonitor.store.vault import VaultStore

__all__ = [
    "KeyValueStore",
    "VaultStore",
    "normalize_path",
]
