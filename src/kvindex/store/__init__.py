"""Key-value storage adapters."""

from kvindex.store.adapter import HASH_KEY, RANGE_KEY, KeyValueAdapter
from kvindex.store.factory import build_adapter
from kvindex.store.memory import MemoryAdapter
from kvindex.store.sqlite import SqliteAdapter

__all__ = [
    "HASH_KEY",
    "RANGE_KEY",
    "KeyValueAdapter",
    "MemoryAdapter",
    "SqliteAdapter",
    "build_adapter",
]
