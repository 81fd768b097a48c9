"""Lazy, cached associations between documents."""

from kvindex.associations.base import Association, AssociationKind, AssociationSpec
from kvindex.associations.factory import build_association
from kvindex.associations.many import ManyAssociation
from kvindex.associations.single import SingleAssociation

__all__ = [
    "Association",
    "AssociationKind",
    "AssociationSpec",
    "ManyAssociation",
    "SingleAssociation",
    "build_association",
]
