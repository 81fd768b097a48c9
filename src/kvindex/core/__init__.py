"""Core module exports."""

from kvindex.core.errors import (
    AssociationError,
    ConditionalCheckFailedError,
    ConfigError,
    ErrorCode,
    InternalError,
    InvalidFieldError,
    KvIndexError,
    RecordError,
    RetryExhaustedError,
    UniqueIndexError,
)
from kvindex.core.logging import (
    clear_correlation_id,
    configure_logging,
    get_correlation_id,
    get_logger,
    set_correlation_id,
)

__all__ = [
    # Errors
    "AssociationError",
    "ConditionalCheckFailedError",
    "ConfigError",
    "ErrorCode",
    "InternalError",
    "InvalidFieldError",
    "KvIndexError",
    "RecordError",
    "RetryExhaustedError",
    "UniqueIndexError",
    # Logging
    "clear_correlation_id",
    "configure_logging",
    "get_correlation_id",
    "get_logger",
    "set_correlation_id",
]
