"""kvindex error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Index
- 4xxx: Store
- 5xxx: Association
- 6xxx: Record
- 9xxx: Internal
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002

    # Index (3xxx)
    INDEX_INVALID_FIELD = 3001
    INDEX_UNIQUE_VIOLATION = 3002
    INDEX_RETRY_EXHAUSTED = 3003
    INDEX_NOT_FOUND = 3004

    # Store (4xxx)
    STORE_CONDITION_FAILED = 4001

    # Association (5xxx)
    ASSOCIATION_TARGET_WITHOUT_ID = 5001
    ASSOCIATION_SOURCE_WITHOUT_ID = 5002
    ASSOCIATION_UNKNOWN = 5003

    # Record (6xxx)
    RECORD_NOT_FOUND = 6001
    RECORD_UNBOUND = 6002
    RECORD_UNKNOWN_TYPE = 6003

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


@dataclass(frozen=True, slots=True)
class KvIndexError(Exception):
    """Base error with structured context."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'INDEX_UNIQUE_VIOLATION')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for structured logs and API responses."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(KvIndexError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )


class InvalidFieldError(KvIndexError):
    """An index names a field the source record type does not have."""

    @classmethod
    def not_a_field(cls, source: str, fields: list[str]) -> "InvalidFieldError":
        return cls(
            code=ErrorCode.INDEX_INVALID_FIELD,
            message=f"A key specified for an index is not a field of {source}: {', '.join(fields)}",
            details={"source": source, "fields": fields},
        )

    @classmethod
    def no_fields(cls, source: str) -> "InvalidFieldError":
        return cls(
            code=ErrorCode.INDEX_INVALID_FIELD,
            message=f"An index on {source} must name at least one field",
            details={"source": source, "fields": []},
        )

    @classmethod
    def no_index(cls, source: str, fields: list[str]) -> "InvalidFieldError":
        return cls(
            code=ErrorCode.INDEX_NOT_FOUND,
            message=f"{source} has no index on exactly: {', '.join(fields)}",
            details={"source": source, "fields": fields},
        )


class UniqueIndexError(KvIndexError):
    """Two distinct records derived the same key on a unique index."""

    @classmethod
    def violation(
        cls, table: str, hash_value: str, range_value: float | None, ids: list[str]
    ) -> "UniqueIndexError":
        return cls(
            code=ErrorCode.INDEX_UNIQUE_VIOLATION,
            message=f"Uniqueness failure on index {table}.",
            details={
                "table": table,
                "hash_value": hash_value,
                "range_value": range_value,
                "ids": ids,
            },
        )


class RetryExhaustedError(KvIndexError):
    """A bounded retry policy ran out of attempts under contention."""

    @classmethod
    def exhausted(cls, table: str, hash_value: str, attempts: int) -> "RetryExhaustedError":
        return cls(
            code=ErrorCode.INDEX_RETRY_EXHAUSTED,
            message=f"Gave up on index {table} key {hash_value!r} after {attempts} attempts",
            retryable=True,
            details={"table": table, "hash_value": hash_value, "attempts": attempts},
        )


class ConditionalCheckFailedError(KvIndexError):
    """A conditional write or delete found the row in a different state.

    Raised by adapters; the index engine treats it as a signal to re-read and retry.
    """

    @classmethod
    def for_key(cls, table: str, hash_key: str, range_key: float | None) -> "ConditionalCheckFailedError":
        return cls(
            code=ErrorCode.STORE_CONDITION_FAILED,
            message=f"Conditional check failed on {table} key {hash_key!r}",
            retryable=True,
            details={"table": table, "hash_key": hash_key, "range_key": range_key},
        )


class AssociationError(KvIndexError):
    """Association wiring errors."""

    @classmethod
    def target_without_id(cls, target: Any) -> "AssociationError":
        return cls(
            code=ErrorCode.ASSOCIATION_TARGET_WITHOUT_ID,
            message=f"Cannot reference object {target!r} without ID.",
        )

    @classmethod
    def source_without_id(cls, association: str) -> "AssociationError":
        return cls(
            code=ErrorCode.ASSOCIATION_SOURCE_WITHOUT_ID,
            message=f"Cannot create inverse association {association} on object without ID.",
            details={"association": association},
        )

    @classmethod
    def unknown(cls, owner: str, name: str) -> "AssociationError":
        return cls(
            code=ErrorCode.ASSOCIATION_UNKNOWN,
            message=f"{owner} has no association named {name!r}",
            details={"owner": owner, "name": name},
        )


class RecordError(KvIndexError):
    """Record lookup and binding errors."""

    @classmethod
    def not_found(cls, type_name: str, record_id: str) -> "RecordError":
        return cls(
            code=ErrorCode.RECORD_NOT_FOUND,
            message=f"Couldn't find {type_name} with id={record_id}",
            details={"type": type_name, "id": record_id},
        )

    @classmethod
    def unbound(cls, type_name: str) -> "RecordError":
        return cls(
            code=ErrorCode.RECORD_UNBOUND,
            message=f"{type_name} instance is not attached to a store",
            details={"type": type_name},
        )

    @classmethod
    def unknown_type(cls, type_name: str) -> "RecordError":
        return cls(
            code=ErrorCode.RECORD_UNKNOWN_TYPE,
            message=f"No document type registered as {type_name!r}",
            details={"type": type_name},
        )


class InternalError(KvIndexError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )
