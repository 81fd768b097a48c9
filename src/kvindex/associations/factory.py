"""Resolver construction per association kind."""

from __future__ import annotations

from typing import TYPE_CHECKING

from kvindex.associations.base import Association, AssociationKind, AssociationSpec
from kvindex.associations.many import ManyAssociation
from kvindex.associations.single import SingleAssociation

if TYPE_CHECKING:
    from kvindex.model.document import Document


def build_association(source: Document, spec: AssociationSpec) -> Association:
    if spec.kind is AssociationKind.SINGULAR:
        return SingleAssociation(source, spec)
    return ManyAssociation(source, spec)
