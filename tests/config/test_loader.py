"""Tests for config/loader.py module.

Covers:
- _load_yaml() function
- _deep_merge() function
- load_config() precedence
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest

from kvindex.config.loader import (
    GLOBAL_CONFIG_PATH,
    _deep_merge,
    _load_yaml,
    load_config,
)
from kvindex.config.models import KeyEncoding, KvIndexConfig, LoggingConfig
from kvindex.core.errors import ConfigError


class TestLoadYaml:
    """Tests for _load_yaml function."""

    def test_returns_empty_dict_for_missing_file(self, tmp_path: Path) -> None:
        assert _load_yaml(tmp_path / "nonexistent.yaml") == {}

    def test_loads_valid_yaml(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "config.yaml"
        yaml_file.write_text("store:\n  namespace: prod\n")

        assert _load_yaml(yaml_file) == {"store": {"namespace": "prod"}}

    def test_returns_empty_for_empty_file(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "empty.yaml"
        yaml_file.write_text("")

        assert _load_yaml(yaml_file) == {}

    def test_raises_config_error_for_invalid_yaml(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "invalid.yaml"
        yaml_file.write_text("store:\n  namespace:\n    - invalid: [unclosed")

        with pytest.raises(ConfigError):
            _load_yaml(yaml_file)


class TestDeepMerge:
    """Tests for _deep_merge function."""

    def test_override_wins(self) -> None:
        assert _deep_merge({"a": 1, "b": 2}, {"b": 3}) == {"a": 1, "b": 3}

    def test_nested_merge(self) -> None:
        base = {"retry": {"max_attempts": 5, "base_delay_sec": 0.1}}
        override = {"retry": {"max_attempts": 9}}

        assert _deep_merge(base, override) == {"retry": {"max_attempts": 9, "base_delay_sec": 0.1}}

    def test_override_replaces_non_dict(self) -> None:
        base: dict[str, Any] = {"a": {"nested": 1}}
        override: dict[str, Any] = {"a": "simple"}

        assert _deep_merge(base, override) == {"a": "simple"}

    def test_does_not_mutate_base(self) -> None:
        base = {"a": 1}
        _deep_merge(base, {"b": 2})

        assert base == {"a": 1}


class TestLoadConfig:
    """Tests for load_config function."""

    def test_returns_default_config_when_no_files(self, tmp_path: Path) -> None:
        with patch("kvindex.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "none.yaml"):
            config = load_config(tmp_path)

        assert isinstance(config, KvIndexConfig)
        assert config.logging.level == "INFO"
        assert config.store.namespace == "kvindex"
        assert config.store.backend == "memory"
        assert config.retry.max_attempts is None
        assert config.index.key_encoding is KeyEncoding.DOTTED

    def test_loads_project_config(self, tmp_path: Path) -> None:
        (tmp_path / "kvindex.yaml").write_text(
            "store:\n  namespace: prod\nindex:\n  key_encoding: length_prefixed\n"
        )

        with patch("kvindex.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "none.yaml"):
            config = load_config(tmp_path)

        assert config.store.namespace == "prod"
        assert config.index.key_encoding is KeyEncoding.LENGTH_PREFIXED

    def test_project_config_overrides_global(self, tmp_path: Path) -> None:
        global_file = tmp_path / "global.yaml"
        global_file.write_text("store:\n  namespace: shared\n  backend: sqlite\n")
        (tmp_path / "kvindex.yaml").write_text("store:\n  namespace: mine\n")

        with patch("kvindex.config.loader.GLOBAL_CONFIG_PATH", global_file):
            config = load_config(tmp_path)

        assert config.store.namespace == "mine"
        assert config.store.backend == "sqlite"

    def test_env_vars_override_yaml(self, tmp_path: Path) -> None:
        (tmp_path / "kvindex.yaml").write_text("retry:\n  max_attempts: 5\n")

        with (
            patch("kvindex.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "none.yaml"),
            patch.dict(os.environ, {"KVINDEX__RETRY__MAX_ATTEMPTS": "50"}),
        ):
            config = load_config(tmp_path)

        assert config.retry.max_attempts == 50

    def test_kwargs_override_all(self, tmp_path: Path) -> None:
        with patch("kvindex.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "none.yaml"):
            config = load_config(tmp_path, logging=LoggingConfig(level="ERROR"))

        assert config.logging.level == "ERROR"

    @pytest.mark.parametrize(
        "content",
        [
            "retry:\n  max_attempts: 0\n",
            "store:\n  namespace: 'bad name!'\n",
            "store:\n  backend: dynamo\n",
        ],
    )
    def test_raises_config_error_for_invalid_value(self, tmp_path: Path, content: str) -> None:
        (tmp_path / "kvindex.yaml").write_text(content)

        with (
            patch("kvindex.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "none.yaml"),
            pytest.raises(ConfigError),
        ):
            load_config(tmp_path)


class TestGlobalConfigPath:
    def test_is_in_user_config(self) -> None:
        assert isinstance(GLOBAL_CONFIG_PATH, Path)
        assert "kvindex" in str(GLOBAL_CONFIG_PATH)
