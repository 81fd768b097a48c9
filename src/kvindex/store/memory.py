"""In-process key-value adapter.

Backed by a dict and a single lock. Good enough for tests and single-process
use; rows are deep-copied in and out so callers never share mutable state
with the store.
"""

from __future__ import annotations

import copy
import threading
from collections.abc import Mapping
from typing import Any

import structlog

from kvindex.core.errors import ConditionalCheckFailedError
from kvindex.store.adapter import HASH_KEY, RANGE_KEY, matches

logger = structlog.get_logger()

_RowKey = tuple[str, float | None]


class MemoryAdapter:
    """Thread-safe dict-backed adapter."""

    def __init__(self) -> None:
        self._tables: dict[str, dict[_RowKey, dict[str, Any]]] = {}
        self._lock = threading.Lock()

    def read(self, table: str, hash_key: str, range_key: float | None = None) -> dict[str, Any] | None:
        with self._lock:
            row = self._tables.get(table, {}).get((hash_key, range_key))
            return copy.deepcopy(row) if row is not None else None

    def write(
        self,
        table: str,
        item: Mapping[str, Any],
        *,
        expected: Mapping[str, Any] | None = None,
        unless_exists: bool = False,
    ) -> None:
        hash_key = item[HASH_KEY]
        range_key = item.get(RANGE_KEY)
        with self._lock:
            rows = self._tables.setdefault(table, {})
            current = rows.get((hash_key, range_key))
            if unless_exists and current is not None:
                raise ConditionalCheckFailedError.for_key(table, hash_key, range_key)
            if expected is not None and not matches(current, expected):
                raise ConditionalCheckFailedError.for_key(table, hash_key, range_key)
            rows[(hash_key, range_key)] = copy.deepcopy(dict(item))

    def delete(
        self,
        table: str,
        hash_key: str,
        range_key: float | None = None,
        *,
        expected: Mapping[str, Any] | None = None,
    ) -> None:
        with self._lock:
            rows = self._tables.get(table, {})
            current = rows.get((hash_key, range_key))
            if expected is not None and not matches(current, expected):
                raise ConditionalCheckFailedError.for_key(table, hash_key, range_key)
            rows.pop((hash_key, range_key), None)

    def scan(self, table: str) -> list[dict[str, Any]]:
        """Snapshot of every row in a table."""
        with self._lock:
            return [copy.deepcopy(row) for row in self._tables.get(table, {}).values()]

    def tables(self) -> list[str]:
        with self._lock:
            return sorted(name for name, rows in self._tables.items() if rows)

    def clear(self) -> None:
        with self._lock:
            self._tables.clear()
        logger.debug("memory_adapter_cleared")
