"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (KVINDEX__SECTION__KEY)
3. Project YAML (kvindex.yaml)
4. Global YAML (~/.config/kvindex/config.yaml)
5. Built-in defaults (this file)

Examples:
    KVINDEX__LOGGING__LEVEL=DEBUG
    KVINDEX__STORE__NAMESPACE=prod
    KVINDEX__RETRY__MAX_ATTEMPTS=50
"""

from enum import Enum
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class KeyEncoding(str, Enum):
    """How partition-field values are combined into an index row key.

    DOTTED joins values with "." and cannot tell ("x.y", "z") from ("x", "y.z").
    LENGTH_PREFIXED writes each value as "<len>:<value>" and never collides.
    """

    DOTTED = "dotted"
    LENGTH_PREFIXED = "length_prefixed"


class LogOutputConfig(BaseModel):
    """Single logging output configuration."""

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        KVINDEX__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG logs every CAS conflict.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class StoreConfig(BaseModel):
    """Backing key-value store configuration.

    Env vars:
        KVINDEX__STORE__NAMESPACE: Prefix for every table name
        KVINDEX__STORE__BACKEND: memory or sqlite
        KVINDEX__STORE__SQLITE_PATH: Database file for the sqlite backend
    """

    namespace: str = Field(
        default="kvindex",
        description="Prefix for record and index table names.",
    )
    backend: Literal["memory", "sqlite"] = Field(
        default="memory",
        description="Key-value adapter. memory is process-local; sqlite is shared across processes.",
    )
    sqlite_path: str | None = Field(
        default=None,
        description="Database file for the sqlite backend.",
    )
    busy_timeout_ms: int = Field(
        default=30000,
        description="SQLite busy timeout before a locked error surfaces.",
    )
    max_lock_retries: int = Field(
        default=3,
        description="Retries for 'database is locked' errors on the sqlite backend.",
    )

    @field_validator("namespace")
    @classmethod
    def validate_namespace(cls, v: str) -> str:
        if not v or not v.replace("_", "").isalnum():
            raise ValueError(f"Namespace must be alphanumeric/underscore, got {v!r}")
        return v


class RetryConfig(BaseModel):
    """Optimistic concurrency retry policy for index maintenance.

    Env vars:
        KVINDEX__RETRY__MAX_ATTEMPTS: Attempts per save/delete (unset = unbounded)
        KVINDEX__RETRY__BASE_DELAY_SEC: First backoff delay
        KVINDEX__RETRY__MAX_DELAY_SEC: Backoff ceiling
    """

    max_attempts: int | None = Field(
        default=None,
        description="Attempts before giving up. None retries until the write lands. "
        "RISK: unbounded retries can livelock under sustained contention on one key.",
    )
    base_delay_sec: float = Field(
        default=0.0,
        description="Backoff after the first conflict; doubles per conflict.",
    )
    max_delay_sec: float = Field(
        default=0.1,
        description="Backoff ceiling.",
    )

    @field_validator("max_attempts")
    @classmethod
    def validate_max_attempts(cls, v: int | None) -> int | None:
        if v is not None and v < 1:
            raise ValueError(f"max_attempts must be >= 1, got {v}")
        return v


class IndexConfig(BaseModel):
    """Index key derivation configuration.

    Env vars:
        KVINDEX__INDEX__KEY_ENCODING: dotted or length_prefixed
    """

    key_encoding: KeyEncoding = Field(
        default=KeyEncoding.DOTTED,
        description="Partition key encoding. Changing it orphans existing index rows.",
    )


class KvIndexConfig(BaseModel):
    """Root configuration model."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    index: IndexConfig = Field(default_factory=IndexConfig)
