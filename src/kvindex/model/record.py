"""Record contracts the index engine and associations rely on."""

from collections.abc import Mapping
from typing import Any, Protocol


class Indexable(Protocol):
    """A persisted record with change tracking."""

    @property
    def id(self) -> str | None: ...

    @property
    def attributes(self) -> Mapping[str, Any]:
        """Current field values, keyed by field name."""
        ...

    @property
    def changes(self) -> Mapping[str, tuple[Any, Any]]:
        """Dirty fields mapped to (old value, new value) since the last save."""
        ...

    @property
    def new_record(self) -> bool:
        """True until the record has been persisted once."""
        ...

    def update_attribute(self, field: str, value: Any) -> None:
        """Assign a single field and persist the record."""
        ...


class IndexSource(Protocol):
    """A record type an index can be declared on."""

    @classmethod
    def table_name(cls, namespace: str) -> str: ...

    @classmethod
    def field_names(cls) -> frozenset[str]: ...
