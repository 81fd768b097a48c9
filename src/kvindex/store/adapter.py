"""Key-value adapter protocol.

Rows are plain dicts. The partition key lives under ``"id"`` and the optional
numeric sort key under ``"range"``. Every operation is atomic with respect to
concurrent callers on the same (table, hash key, range key).
"""

from collections.abc import Mapping
from typing import Any, Protocol

HASH_KEY = "id"
RANGE_KEY = "range"


class KeyValueAdapter(Protocol):
    """Protocol for storage backends the index engine can maintain rows in."""

    def read(self, table: str, hash_key: str, range_key: float | None = None) -> dict[str, Any] | None:
        """Return the row at (hash_key, range_key), or None if absent."""
        ...

    def write(
        self,
        table: str,
        item: Mapping[str, Any],
        *,
        expected: Mapping[str, Any] | None = None,
        unless_exists: bool = False,
    ) -> None:
        """Replace the row keyed by item["id"] / item.get("range").

        Args:
            table: Table name.
            item: Full row contents, including key attributes.
            expected: Attribute values the stored row must currently hold.
            unless_exists: Only write if no row exists at the key.

        Raises:
            ConditionalCheckFailedError: If a condition does not hold.
        """
        ...

    def delete(
        self,
        table: str,
        hash_key: str,
        range_key: float | None = None,
        *,
        expected: Mapping[str, Any] | None = None,
    ) -> None:
        """Remove the row at (hash_key, range_key).

        Deleting an absent row without conditions is a no-op.

        Raises:
            ConditionalCheckFailedError: If ``expected`` is given and does not hold.
        """
        ...


def matches(row: Mapping[str, Any] | None, expected: Mapping[str, Any]) -> bool:
    """Check a stored row against expected attribute values."""
    if row is None:
        return False
    return all(row.get(key) == value for key, value in expected.items())
