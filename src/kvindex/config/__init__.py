"""Config module exports."""

from kvindex.config.loader import load_config
from kvindex.config.models import (
    IndexConfig,
    KeyEncoding,
    KvIndexConfig,
    LoggingConfig,
    LogOutputConfig,
    RetryConfig,
    StoreConfig,
)

__all__ = [
    "load_config",
    "IndexConfig",
    "KeyEncoding",
    "KvIndexConfig",
    "LoggingConfig",
    "LogOutputConfig",
    "RetryConfig",
    "StoreConfig",
]
