"""Pydantic documents with change tracking.

Assigning a field records ``(old, new)`` in ``changes`` until the next save,
which is what lets index maintenance find the row a record was previously
indexed under. Mutating a container field in place is not tracked; assign a
new value instead.
"""

from __future__ import annotations

import re
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import BaseModel, ConfigDict, PrivateAttr

from kvindex.associations import Association, AssociationSpec, build_association
from kvindex.core.errors import AssociationError, RecordError
from kvindex.indexes.definition import IndexSpec
from kvindex.indexes.inflection import pluralize

if TYPE_CHECKING:
    from collections.abc import Mapping

    from kvindex.model.store import DocumentStore

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


class Document(BaseModel):
    """Base class for records kept in a DocumentStore.

    Subclasses declare fields as usual, plus optional class-level ``table``,
    ``indexes`` and ``associations``.

    Example:
        class User(Document):
            indexes = (IndexSpec("email", unique=True),)
            associations = (AssociationSpec.one("team", "Team", inverse_of="members"),)

            email: str | None = None
            team_id: str | None = None
    """

    model_config = ConfigDict(validate_assignment=True)

    table: ClassVar[str | None] = None
    indexes: ClassVar[tuple[IndexSpec, ...]] = ()
    associations: ClassVar[tuple[AssociationSpec, ...]] = ()

    id: str | None = None

    _changes: dict[str, tuple[Any, Any]] = PrivateAttr(default_factory=dict)
    _persisted: bool = PrivateAttr(default=False)
    _store: DocumentStore | None = PrivateAttr(default=None)
    _resolvers: dict[str, Association] = PrivateAttr(default_factory=dict)

    @classmethod
    def table_name(cls, namespace: str) -> str:
        base = cls.table or pluralize(_CAMEL_BOUNDARY.sub("_", cls.__name__).lower())
        return f"{namespace}_{base}"

    @classmethod
    def field_names(cls) -> frozenset[str]:
        return frozenset(cls.model_fields)

    @classmethod
    def association_spec(cls, name: str) -> AssociationSpec:
        for spec in cls.associations:
            if spec.name == name:
                return spec
        raise AssociationError.unknown(cls.__name__, name)

    def __setattr__(self, name: str, value: Any) -> None:
        if name not in type(self).model_fields:
            super().__setattr__(name, value)
            return
        old = getattr(self, name)
        super().__setattr__(name, value)
        new = getattr(self, name)
        if name in self._changes:
            original = self._changes[name][0]
            if new == original:
                del self._changes[name]
            else:
                self._changes[name] = (original, new)
        elif new != old:
            self._changes[name] = (old, new)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Document):
            return NotImplemented
        if self.id is None or other.id is None:
            return self is other
        return type(self) is type(other) and self.id == other.id

    @property
    def attributes(self) -> dict[str, Any]:
        return self.model_dump()

    @property
    def changes(self) -> Mapping[str, tuple[Any, Any]]:
        return MappingProxyType(self._changes)

    @property
    def changed(self) -> bool:
        return bool(self._changes)

    @property
    def new_record(self) -> bool:
        return not self._persisted

    @property
    def store(self) -> DocumentStore:
        if self._store is None:
            raise RecordError.unbound(type(self).__name__)
        return self._store

    def attach(self, store: DocumentStore) -> None:
        self._store = store

    def clear_changes(self) -> None:
        self._changes.clear()

    def mark_persisted(self, store: DocumentStore) -> None:
        """Called by the store once the record matches what is stored."""
        self._store = store
        self._persisted = True
        self._changes.clear()

    def mark_deleted(self) -> None:
        self._persisted = False
        self._changes.clear()
        for resolver in self._resolvers.values():
            resolver.reset()

    def update_attribute(self, field: str, value: Any) -> None:
        """Assign one field and save."""
        setattr(self, field, value)
        self.store.save(self)

    def save(self) -> None:
        self.store.save(self)

    def delete(self) -> None:
        self.store.delete(self)

    def association(self, name: str) -> Association:
        """The resolver for ``name``, created on first use and owned by this instance."""
        resolver = self._resolvers.get(name)
        if resolver is None:
            resolver = build_association(self, type(self).association_spec(name))
            self._resolvers[name] = resolver
        return resolver
