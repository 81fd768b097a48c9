"""Tests for adapter construction from config."""

from pathlib import Path

import pytest

from kvindex.config.models import StoreConfig
from kvindex.core.errors import ConfigError
from kvindex.store.factory import build_adapter
from kvindex.store.memory import MemoryAdapter
from kvindex.store.sqlite import SqliteAdapter


class TestBuildAdapter:
    def test_memory_backend(self) -> None:
        assert isinstance(build_adapter(StoreConfig()), MemoryAdapter)

    def test_sqlite_backend(self, tmp_path: Path) -> None:
        adapter = build_adapter(StoreConfig(backend="sqlite", sqlite_path=str(tmp_path / "kv.db")))

        try:
            assert isinstance(adapter, SqliteAdapter)
            assert adapter.db_path == tmp_path / "kv.db"
        finally:
            adapter.close()

    def test_sqlite_backend_requires_path(self) -> None:
        with pytest.raises(ConfigError):
            build_adapter(StoreConfig(backend="sqlite"))
