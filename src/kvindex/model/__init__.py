"""Document model and persistence."""

from kvindex.model.document import Document
from kvindex.model.record import Indexable, IndexSource
from kvindex.model.store import DocumentStore

__all__ = ["Document", "DocumentStore", "Indexable", "IndexSource"]
