"""Associations pointing at a set of target records."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING, Any

from kvindex.associations.base import Association

if TYPE_CHECKING:
    from kvindex.model.document import Document


class ManyAssociation(Association):
    """Targets referenced by the source's ``<singular name>_ids`` set."""

    @property
    def ids(self) -> frozenset[Any]:
        return frozenset(self.source.attributes.get(self.source_attribute) or ())

    def resolve(self) -> list[Document]:
        return super().resolve()  # type: ignore[no-any-return]

    def add(self, target: Document) -> Document:
        """Add ``target`` to the set, updating the inverse side when declared."""
        self._require_ids(target)
        self.source.update_attribute(self.source_attribute, set(self.ids) | {target.id})
        self._associate_target(target)
        self.reset()
        return target

    def remove(self, target: Document) -> Document:
        """Remove ``target`` from the set; removing a non-member only touches the inverse."""
        if target.id in self.ids:
            self.source.update_attribute(self.source_attribute, set(self.ids) - {target.id})
        self._disassociate_target(target)
        self.reset()
        return target

    def set(self, targets: Iterable[Document]) -> list[Document]:
        """Replace the whole set."""
        targets = list(targets)
        keep = {t.id for t in targets}
        for current in self.resolve():
            if current.id not in keep:
                self.remove(current)
        for target in targets:
            if target.id not in self.ids:
                self.add(target)
        return targets

    def create(self, **attributes: Any) -> Document:
        return self.add(self.store.create(self.target_class, **attributes))

    def _find_target(self) -> list[Document]:
        return self.store.find_all(self.target_class, sorted(self.ids, key=str))

    def __iter__(self) -> Iterator[Document]:
        return iter(self.resolve())

    def __len__(self) -> int:
        return len(self.resolve())

    def __contains__(self, target: object) -> bool:
        return getattr(target, "id", None) in self.ids
