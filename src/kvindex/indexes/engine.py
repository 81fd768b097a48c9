"""Index maintenance with optimistic concurrency.

Each index row holds the set of record ids sharing one derived key. Rows are
updated with a read / compute / conditional-write loop: the write only lands
if the id set is still exactly what was read, otherwise the loop re-reads and
tries again. There is no client-side locking; the adapter's conditional write
is the only serialization point.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import structlog

from kvindex.core.errors import ConditionalCheckFailedError, RetryExhaustedError, UniqueIndexError
from kvindex.indexes.retry import RetryPolicy
from kvindex.store.adapter import HASH_KEY, RANGE_KEY

if TYPE_CHECKING:
    from kvindex.indexes.definition import IndexDefinition, IndexKey
    from kvindex.model.record import Indexable
    from kvindex.store.adapter import KeyValueAdapter

logger = structlog.get_logger()

IDS = "ids"


class IndexEngine:
    """Keeps one index table in step with the records it covers."""

    def __init__(
        self,
        definition: IndexDefinition,
        adapter: KeyValueAdapter,
        retry: RetryPolicy | None = None,
    ) -> None:
        self.definition = definition
        self.adapter = adapter
        self.retry = retry or RetryPolicy()
        self._log = logger.bind(index=definition.table_name)

    @property
    def table_name(self) -> str:
        return self.definition.table_name

    def save(self, record: Indexable) -> None:
        """Add the record's id under its current key.

        The id is first removed from the row it was indexed under before its
        unsaved changes, so a record never lingers under a stale key.

        Raises:
            UniqueIndexError: If the index is unique and another id holds the key.
            RetryExhaustedError: If a bounded retry policy runs out of attempts.
        """
        self.delete(record, use_changes=True)

        key = self.definition.values(record)
        if key.blank:
            return

        for attempt in self.retry.attempts():
            existing = self._read(key)
            ids: set[Any] = set(existing.get(IDS) or ()) if existing else set()
            new_ids = ids | {record.id}

            if self.definition.unique and len(new_ids) > 1:
                self._log.warning(
                    "index_unique_violation",
                    hash_value=key.hash_value,
                    range_value=key.range_value,
                    record_id=record.id,
                )
                raise UniqueIndexError.violation(
                    self.table_name, key.hash_value, key.range_value, sorted(map(str, new_ids))
                )
            if existing is not None and new_ids == ids:
                return

            try:
                if existing is not None:
                    self.adapter.write(
                        self.table_name, self._item(key, new_ids), expected={IDS: existing.get(IDS)}
                    )
                else:
                    self.adapter.write(self.table_name, self._item(key, new_ids), unless_exists=True)
            except ConditionalCheckFailedError:
                self._log.debug("index_cas_conflict", op="save", hash_value=key.hash_value, attempt=attempt)
                continue

            self._log.debug("index_entry_written", hash_value=key.hash_value, record_id=record.id, size=len(new_ids))
            return

        self._exhausted(key)

    def delete(self, record: Indexable, use_changes: bool = False) -> None:
        """Remove the record's id from the row at its key, dropping the row when it empties.

        With ``use_changes`` the key is the one the record held before its
        unsaved changes. Removing an id that is not there is a no-op.

        Raises:
            RetryExhaustedError: If a bounded retry policy runs out of attempts.
        """
        if use_changes and record.new_record:
            return

        key = self.definition.values(record, use_changes)
        if key.blank:
            return

        for attempt in self.retry.attempts():
            existing = self._read(key)
            if not existing or record.id not in (existing.get(IDS) or ()):
                return

            ids = existing[IDS]
            new_ids = set(ids) - {record.id}
            try:
                if new_ids:
                    self.adapter.write(self.table_name, self._item(key, new_ids), expected={IDS: ids})
                else:
                    self.adapter.delete(self.table_name, key.hash_value, key.range_value, expected={IDS: ids})
            except ConditionalCheckFailedError:
                self._log.debug("index_cas_conflict", op="delete", hash_value=key.hash_value, attempt=attempt)
                continue

            self._log.debug("index_entry_removed", hash_value=key.hash_value, record_id=record.id, size=len(new_ids))
            return

        self._exhausted(key)

    def lookup(self, attributes: Mapping[str, Any]) -> frozenset[Any]:
        """Ids currently stored under the key derived from ``attributes``."""
        key = self.definition.values(attributes)
        if key.blank:
            return frozenset()
        existing = self._read(key)
        return frozenset(existing.get(IDS) or ()) if existing else frozenset()

    def _read(self, key: IndexKey) -> dict[str, Any] | None:
        return self.adapter.read(self.table_name, key.hash_value, key.range_value)

    @staticmethod
    def _item(key: IndexKey, ids: set[Any]) -> dict[str, Any]:
        item: dict[str, Any] = {HASH_KEY: key.hash_value, IDS: ids}
        if key.range_value is not None:
            item[RANGE_KEY] = key.range_value
        return item

    def _exhausted(self, key: IndexKey) -> None:
        attempts = self.retry.max_attempts or 0
        self._log.error("index_retry_exhausted", hash_value=key.hash_value, attempts=attempts)
        raise RetryExhaustedError.exhausted(self.table_name, key.hash_value, attempts)
