"""Shared association behaviour.

Every association has a source and a target. The source is the record the
association hangs off; it always keeps the target id(s) in one of its own
attributes (``<name>_id`` or ``<singular name>_ids``). When an inverse is
declared, the target keeps the source id(s) the same way and both sides are
updated together.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from kvindex.core.errors import AssociationError
from kvindex.indexes.inflection import singularize

if TYPE_CHECKING:
    from kvindex.model.document import Document
    from kvindex.model.store import DocumentStore


class AssociationKind(str, Enum):
    """Whether the owning record points at one target or a set of them."""

    SINGULAR = "singular"
    PLURAL = "plural"


@dataclass(frozen=True, slots=True)
class AssociationSpec:
    """Declaration of an association on a document type.

    ``target`` is the registered name of the target document type and
    ``inverse_of`` the name of the reciprocal association declared there.
    """

    name: str
    kind: AssociationKind
    target: str
    inverse_of: str | None = None

    @classmethod
    def one(cls, name: str, target: str, inverse_of: str | None = None) -> AssociationSpec:
        return cls(name, AssociationKind.SINGULAR, target, inverse_of)

    @classmethod
    def many(cls, name: str, target: str, inverse_of: str | None = None) -> AssociationSpec:
        return cls(name, AssociationKind.PLURAL, target, inverse_of)

    @property
    def attribute(self) -> str:
        """Attribute on the owning record holding the target id(s)."""
        if self.kind is AssociationKind.SINGULAR:
            return f"{self.name}_id"
        return f"{singularize(self.name)}_ids"


class Association:
    """Lazily resolved, cached view of an association for one source record.

    Unloaded until the first ``resolve()``; ``reset()`` and every mutation
    drop the cache again.
    """

    def __init__(self, source: Document, spec: AssociationSpec) -> None:
        self.source = source
        self.spec = spec
        self.loaded = False
        self._target: Any = None

    @property
    def name(self) -> str:
        return self.spec.name

    def resolve(self) -> Any:
        if not self.loaded:
            self._target = self._find_target()
            self.loaded = True
        return self._target

    def reset(self) -> None:
        self._target = None
        self.loaded = False

    def _find_target(self) -> Any:
        raise NotImplementedError

    def _set_cached(self, target: Any) -> None:
        self._target = target
        self.loaded = True

    @property
    def store(self) -> DocumentStore:
        return self.source.store

    @property
    def source_attribute(self) -> str:
        return self.spec.attribute

    @property
    def target_class(self) -> type[Document]:
        return self.store.document_type(self.spec.target)

    @property
    def inverse(self) -> AssociationSpec | None:
        """The reciprocal association on the target type, if one is declared."""
        if self.spec.inverse_of is None:
            return None
        return self.target_class.association_spec(self.spec.inverse_of)

    def _require_ids(self, target: Document) -> None:
        if target.id is None:
            raise AssociationError.target_without_id(target)
        if self.spec.inverse_of is not None and self.source.id is None:
            raise AssociationError.source_without_id(f"{type(self.source).__name__}.{self.name}")

    def _associate_target(self, target: Document) -> None:
        """Point the target's inverse attribute back at the source."""
        inverse = self.inverse
        if inverse is None:
            return
        if inverse.kind is AssociationKind.SINGULAR:
            target.update_attribute(inverse.attribute, self.source.id)
        else:
            ids = set(target.attributes.get(inverse.attribute) or ())
            target.update_attribute(inverse.attribute, ids | {self.source.id})

    def _disassociate_target(self, target: Document) -> None:
        """Remove the source from the target's inverse attribute."""
        inverse = self.inverse
        if inverse is None:
            return
        if inverse.kind is AssociationKind.SINGULAR:
            target.update_attribute(inverse.attribute, None)
        else:
            ids = set(target.attributes.get(inverse.attribute) or ())
            target.update_attribute(inverse.attribute, ids - {self.source.id})

    def __repr__(self) -> str:
        state = "loaded" if self.loaded else "unloaded"
        return f"<{type(self).__name__} {type(self.source).__name__}.{self.name} {state}>"
