"""SQLite key-value adapter.

Every logical table shares one physical ``kv_rows`` table keyed by
(table_name, hash_key, range_key). Conditional writes and deletes run inside
``BEGIN IMMEDIATE`` so the read-compare-write is serialized across threads and
processes sharing the database file.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any, TypeVar

import structlog
from sqlalchemy import event, text
from sqlalchemy.exc import OperationalError
from sqlmodel import Field, Session, SQLModel, create_engine, select

from kvindex.core.errors import ConditionalCheckFailedError
from kvindex.store import codec
from kvindex.store.adapter import HASH_KEY, RANGE_KEY, matches

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = structlog.get_logger()

T = TypeVar("T")

# Retry configuration for SQLite busy handling
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_BASE_DELAY = 0.1  # 100ms base
DEFAULT_RETRY_MAX_DELAY = 2.0  # 2s max


class KvRow(SQLModel, table=True):
    """One row of one logical table."""

    __tablename__ = "kv_rows"

    table_name: str = Field(primary_key=True)
    hash_key: str = Field(primary_key=True)
    range_key: str = Field(default="", primary_key=True)  # "" when the table has no sort key
    payload: str


def _range_token(range_key: float | None) -> str:
    return "" if range_key is None else repr(float(range_key))


def _is_database_locked_error(error: Exception) -> bool:
    """Check if error is a SQLite database locked error."""
    error_str = str(error).lower()
    return "database is locked" in error_str or "database is busy" in error_str


class SqliteAdapter:
    """SQLite-backed adapter safe for concurrent writers.

    Includes retry logic with exponential backoff for handling
    SQLite busy timeouts during concurrent writes.
    """

    def __init__(
        self,
        db_path: Path,
        busy_timeout_ms: int = 30000,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_base_delay: float = DEFAULT_RETRY_BASE_DELAY,
        retry_max_delay: float = DEFAULT_RETRY_MAX_DELAY,
    ) -> None:
        self.db_path = db_path
        self._busy_timeout_ms = busy_timeout_ms
        self._max_retries = max_retries
        self._retry_base_delay = retry_base_delay
        self._retry_max_delay = retry_max_delay
        self.engine = self._create_engine()
        SQLModel.metadata.create_all(self.engine, tables=[KvRow.__table__])  # type: ignore[attr-defined]

    def _create_engine(self) -> Engine:
        engine = create_engine(
            f"sqlite:///{self.db_path}",
            connect_args={"check_same_thread": False},
            pool_pre_ping=True,
        )
        busy_timeout_ms = self._busy_timeout_ms

        def _configure_pragmas(dbapi_conn: Any, _connection_record: Any) -> None:
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute(f"PRAGMA busy_timeout={int(busy_timeout_ms)}")
            cursor.execute("PRAGMA synchronous=NORMAL")  # Safe with WAL
            cursor.close()

        event.listen(engine, "connect", _configure_pragmas)
        return engine

    def _immediate(self, work: Callable[[Session], T]) -> T:
        """Run work inside BEGIN IMMEDIATE, committing on success.

        A RESERVED lock is taken before the first read, so no other writer can
        change the row between the condition check and the write.
        """
        last_error: Exception | None = None
        for attempt in range(self._max_retries + 1):  # +1 for initial attempt
            try:
                with Session(self.engine) as session:
                    session.execute(text("BEGIN IMMEDIATE"))
                    try:
                        result = work(session)
                        session.commit()
                        return result
                    except Exception:
                        session.rollback()
                        raise
            except OperationalError as e:
                if _is_database_locked_error(e) and attempt < self._max_retries:
                    delay = min(
                        self._retry_base_delay * (2**attempt),
                        self._retry_max_delay,
                    )
                    logger.warning(
                        "sqlite_busy_retry",
                        attempt=attempt + 1,
                        max_retries=self._max_retries,
                        delay_sec=delay,
                    )
                    time.sleep(delay)
                    last_error = e
                    continue
                raise

        # Unreachable unless max_retries is negative
        assert last_error is not None
        raise last_error

    def read(self, table: str, hash_key: str, range_key: float | None = None) -> dict[str, Any] | None:
        with Session(self.engine) as session:
            row = session.get(KvRow, (table, hash_key, _range_token(range_key)))
            return codec.decode(row.payload) if row is not None else None

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
        payload = codec.encode(dict(item))

        def work(session: Session) -> None:
            row = session.get(KvRow, (table, hash_key, _range_token(range_key)))
            if unless_exists and row is not None:
                raise ConditionalCheckFailedError.for_key(table, hash_key, range_key)
            if expected is not None:
                current = codec.decode(row.payload) if row is not None else None
                if not matches(current, expected):
                    raise ConditionalCheckFailedError.for_key(table, hash_key, range_key)
            if row is None:
                session.add(
                    KvRow(
                        table_name=table,
                        hash_key=hash_key,
                        range_key=_range_token(range_key),
                        payload=payload,
                    )
                )
            else:
                row.payload = payload
                session.add(row)

        self._immediate(work)

    def delete(
        self,
        table: str,
        hash_key: str,
        range_key: float | None = None,
        *,
        expected: Mapping[str, Any] | None = None,
    ) -> None:
        def work(session: Session) -> None:
            row = session.get(KvRow, (table, hash_key, _range_token(range_key)))
            if expected is not None:
                current = codec.decode(row.payload) if row is not None else None
                if not matches(current, expected):
                    raise ConditionalCheckFailedError.for_key(table, hash_key, range_key)
            if row is not None:
                session.delete(row)

        self._immediate(work)

    def scan(self, table: str) -> list[dict[str, Any]]:
        """Every row in a logical table."""
        with Session(self.engine) as session:
            rows = session.exec(select(KvRow).where(KvRow.table_name == table)).all()
            return [codec.decode(row.payload) for row in rows]

    def close(self) -> None:
        self.engine.dispose()
