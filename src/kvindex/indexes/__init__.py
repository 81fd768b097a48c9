"""Secondary index definitions and maintenance."""

from kvindex.indexes.definition import IndexDefinition, IndexKey, IndexSpec, normalize, to_float
from kvindex.indexes.engine import IndexEngine
from kvindex.indexes.retry import RetryPolicy

__all__ = [
    "IndexDefinition",
    "IndexEngine",
    "IndexKey",
    "IndexSpec",
    "RetryPolicy",
    "normalize",
    "to_float",
]
