"""Associations pointing at a single target record."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from kvindex.associations.base import Association

if TYPE_CHECKING:
    from kvindex.model.document import Document


class SingleAssociation(Association):
    """One target, referenced by the source's ``<name>_id`` attribute."""

    def resolve(self) -> Document | None:
        return super().resolve()  # type: ignore[no-any-return]

    def is_none(self) -> bool:
        return self.resolve() is None

    def __eq__(self, other: object) -> bool:
        """Compares as the resolved target, so ``user.association("team") == team`` holds."""
        if isinstance(other, SingleAssociation):
            other = other.resolve()
        return self.resolve() == other

    __hash__ = None  # type: ignore[assignment]

    def set(self, target: Document | None) -> Document | None:
        """Point the association at ``target``, or clear it with None.

        The current target (if any) is detached from the inverse side first.

        Raises:
            AssociationError: If ``target`` has no id, or an inverse is declared
                and the source has no id.
        """
        if self.source.attributes.get(self.source_attribute) is not None:
            self.delete()
        if target is not None:
            self._require_ids(target)
            self._set_cached(target)
            self.source.update_attribute(self.source_attribute, target.id)
            self._associate_target(target)
        return target

    def delete(self) -> Document | None:
        """Detach the current target and clear the source's foreign key.

        Returns the target that was associated.
        """
        target = self.resolve()
        if target is not None:
            self._disassociate_target(target)
        self.reset()
        self.source.update_attribute(self.source_attribute, None)
        return target

    def create(self, **attributes: Any) -> Document | None:
        """Create a target record and associate it."""
        return self.set(self.store.create(self.target_class, **attributes))

    def _find_target(self) -> Document | None:
        target_id = self.source.attributes.get(self.source_attribute)
        if target_id is None:
            return None
        return self.store.get(self.target_class, target_id)
