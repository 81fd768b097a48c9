"""Tests for config models."""

import pytest
from pydantic import ValidationError

from kvindex.config.models import (
    KeyEncoding,
    KvIndexConfig,
    LogOutputConfig,
    RetryConfig,
    StoreConfig,
)


class TestLogOutputConfig:
    def test_console_destinations_pass_through(self) -> None:
        assert LogOutputConfig(destination="stdout").destination == "stdout"

    def test_relative_file_destination_rejected(self) -> None:
        with pytest.raises(ValidationError):
            LogOutputConfig(destination="logs/kvindex.log")


class TestStoreConfig:
    @pytest.mark.parametrize("namespace", ["kvindex", "prod_eu", "t1"])
    def test_valid_namespaces(self, namespace: str) -> None:
        assert StoreConfig(namespace=namespace).namespace == namespace

    @pytest.mark.parametrize("namespace", ["", "has space", "dash-ed"])
    def test_invalid_namespaces(self, namespace: str) -> None:
        with pytest.raises(ValidationError):
            StoreConfig(namespace=namespace)


class TestRetryConfig:
    def test_unbounded_by_default(self) -> None:
        assert RetryConfig().max_attempts is None

    def test_rejects_non_positive_attempts(self) -> None:
        with pytest.raises(ValidationError):
            RetryConfig(max_attempts=0)


class TestKvIndexConfig:
    def test_sections_default(self) -> None:
        config = KvIndexConfig()

        assert config.index.key_encoding is KeyEncoding.DOTTED
        assert len(config.logging.outputs) == 1

    def test_key_encoding_from_string(self) -> None:
        config = KvIndexConfig.model_validate({"index": {"key_encoding": "length_prefixed"}})

        assert config.index.key_encoding is KeyEncoding.LENGTH_PREFIXED
