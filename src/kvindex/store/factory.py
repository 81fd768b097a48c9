"""Adapter construction from configuration."""

from pathlib import Path

from kvindex.config.models import StoreConfig
from kvindex.core.errors import ConfigError
from kvindex.store.adapter import KeyValueAdapter
from kvindex.store.memory import MemoryAdapter
from kvindex.store.sqlite import SqliteAdapter


def build_adapter(config: StoreConfig) -> KeyValueAdapter:
    """Create the adapter selected by ``config.backend``."""
    if config.backend == "memory":
        return MemoryAdapter()
    if not config.sqlite_path:
        raise ConfigError.invalid_value("store.sqlite_path", None, "required for the sqlite backend")
    return SqliteAdapter(
        Path(config.sqlite_path).expanduser(),
        busy_timeout_ms=config.busy_timeout_ms,
        max_retries=config.max_lock_retries,
    )
