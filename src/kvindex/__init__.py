"""kvindex: application-maintained secondary indexes over a key-value store."""

from kvindex.associations import AssociationKind, AssociationSpec, ManyAssociation, SingleAssociation
from kvindex.config import KeyEncoding, KvIndexConfig, load_config
from kvindex.core.errors import (
    AssociationError,
    ConditionalCheckFailedError,
    InvalidFieldError,
    KvIndexError,
    RecordError,
    RetryExhaustedError,
    UniqueIndexError,
)
from kvindex.indexes import IndexDefinition, IndexEngine, IndexKey, IndexSpec, RetryPolicy
from kvindex.model import Document, DocumentStore
from kvindex.store import MemoryAdapter, SqliteAdapter

__version__ = "0.1.0"

__all__ = [
    "AssociationError",
    "AssociationKind",
    "AssociationSpec",
    "ConditionalCheckFailedError",
    "Document",
    "DocumentStore",
    "IndexDefinition",
    "IndexEngine",
    "IndexKey",
    "IndexSpec",
    "InvalidFieldError",
    "KeyEncoding",
    "KvIndexConfig",
    "KvIndexError",
    "ManyAssociation",
    "MemoryAdapter",
    "RecordError",
    "RetryExhaustedError",
    "RetryPolicy",
    "SingleAssociation",
    "SqliteAdapter",
    "UniqueIndexError",
    "load_config",
]
