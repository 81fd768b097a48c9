"""Document persistence with index maintenance on save and delete.

The store writes the record row first, then walks every index declared on
the document type. Index rows are never written in the same transaction as
the record; each index converges on its own through the engine's CAS loop.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any, TypeVar
from uuid import uuid4

import structlog

from kvindex.config.loader import load_config
from kvindex.config.models import KvIndexConfig
from kvindex.core.errors import InvalidFieldError, RecordError
from kvindex.core.logging import (
    clear_correlation_id,
    configure_logging,
    get_correlation_id,
    set_correlation_id,
)
from kvindex.indexes.engine import IndexEngine
from kvindex.indexes.retry import RetryPolicy
from kvindex.model.document import Document
from kvindex.store.adapter import KeyValueAdapter
from kvindex.store.factory import build_adapter

logger = structlog.get_logger()

D = TypeVar("D", bound=Document)


class DocumentStore:
    """Registry of document types bound to one key-value adapter."""

    def __init__(
        self,
        adapter: KeyValueAdapter | None = None,
        config: KvIndexConfig | None = None,
    ) -> None:
        self.config = config or KvIndexConfig()
        self.adapter = adapter if adapter is not None else build_adapter(self.config.store)
        self.retry = RetryPolicy.from_config(self.config.retry)
        self._types: dict[str, type[Document]] = {}
        self._engines: dict[type[Document], tuple[IndexEngine, ...]] = {}

    @classmethod
    def from_config(cls, project_root: Path | None = None, **kwargs: Any) -> DocumentStore:
        """Load configuration, set up logging from it and open the configured adapter.

        Raises:
            ConfigError: On invalid YAML or values.
        """
        config = load_config(project_root, **kwargs)
        configure_logging(config=config.logging)
        return cls(config=config)

    @property
    def namespace(self) -> str:
        return self.config.store.namespace

    def register(self, *doc_types: type[Document]) -> None:
        """Make document types known to the store and build their indexes.

        Raises:
            InvalidFieldError: If an index names a field the type does not have.
        """
        for doc_type in doc_types:
            engines = tuple(
                IndexEngine(
                    spec.build(
                        doc_type,
                        namespace=self.namespace,
                        key_encoding=self.config.index.key_encoding,
                    ),
                    self.adapter,
                    self.retry,
                )
                for spec in doc_type.indexes
            )
            self._types[doc_type.__name__] = doc_type
            self._engines[doc_type] = engines
            logger.debug(
                "document_type_registered",
                document=doc_type.__name__,
                table=self.table_name(doc_type),
                indexes=[engine.table_name for engine in engines],
            )

    def document_type(self, name: str) -> type[Document]:
        try:
            return self._types[name]
        except KeyError:
            raise RecordError.unknown_type(name) from None

    def table_name(self, doc_type: type[Document]) -> str:
        return doc_type.table_name(self.namespace)

    def indexes_for(self, doc_type: type[Document]) -> tuple[IndexEngine, ...]:
        if doc_type not in self._engines:
            self.register(doc_type)
        return self._engines[doc_type]

    def save(self, doc: D) -> D:
        """Persist a document and bring every index on its type up to date.

        Raises:
            UniqueIndexError: If a unique index already maps the key to another record.
        """
        doc_type = type(doc)
        engines = self.indexes_for(doc_type)
        doc.attach(self)
        if doc.id is None:
            doc.id = uuid4().hex

        with self._operation(doc):
            self.adapter.write(self.table_name(doc_type), doc.attributes)
            for engine in engines:
                engine.save(doc)
            logger.debug("document_saved", changed=sorted(doc.changes))

        doc.mark_persisted(self)
        return doc

    def delete(self, doc: Document) -> None:
        """Remove a document and its memberships in every index on its type."""
        doc_type = type(doc)
        engines = self.indexes_for(doc_type)
        if doc.id is None:
            return

        with self._operation(doc):
            self.adapter.delete(self.table_name(doc_type), doc.id)
            for engine in engines:
                # Unsaved changes mean the stored key differs from the current one
                engine.delete(doc, use_changes=True)
                engine.delete(doc)
            logger.debug("document_deleted")

        doc.mark_deleted()

    def create(self, doc_type: type[D], **attributes: Any) -> D:
        return self.save(doc_type(**attributes))

    def get(self, doc_type: type[D], record_id: str) -> D | None:
        row = self.adapter.read(self.table_name(doc_type), record_id)
        if row is None:
            return None
        doc = doc_type.model_validate(row)
        doc.mark_persisted(self)
        return doc

    def find(self, doc_type: type[D], record_id: str) -> D:
        """Load a document by id.

        Raises:
            RecordError: If no such document exists.
        """
        doc = self.get(doc_type, record_id)
        if doc is None:
            raise RecordError.not_found(doc_type.__name__, record_id)
        return doc

    def find_all(self, doc_type: type[D], record_ids: Iterable[str]) -> list[D]:
        """Load documents by id, skipping ids with no stored row."""
        return [doc for record_id in record_ids if (doc := self.get(doc_type, record_id)) is not None]

    def find_by(self, doc_type: type[D], **fields: Any) -> list[D]:
        """Point lookup through the index whose key fields are exactly ``fields``.

        Raises:
            InvalidFieldError: If no index on the type covers exactly these fields.
        """
        wanted = set(fields)
        for engine in self.indexes_for(doc_type):
            if set(engine.definition.keys()) == wanted:
                ids = engine.lookup(fields)
                return self.find_all(doc_type, sorted(ids, key=str))
        raise InvalidFieldError.no_index(doc_type.__name__, sorted(wanted))

    @contextmanager
    def _operation(self, doc: Document) -> Iterator[None]:
        """Tag every log event of one save or delete with the document and a correlation id.

        A correlation id set by the caller is kept, so several operations can share one.
        """
        owned = get_correlation_id() is None
        if owned:
            set_correlation_id()
        try:
            with structlog.contextvars.bound_contextvars(document=type(doc).__name__, record_id=doc.id):
                yield
        finally:
            if owned:
                clear_correlation_id()
