"""Secondary index definitions and key derivation.

An index is identified by the alphabetically sorted set of its fields, so the
same fields given in any order produce the same index name and backing table.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from kvindex.config.models import KeyEncoding
from kvindex.core.errors import InvalidFieldError
from kvindex.indexes.inflection import pluralize, singularize

if TYPE_CHECKING:
    from kvindex.model.record import Indexable, IndexSource

DEFAULT_NAMESPACE = "kvindex"

_NUMERIC_PREFIX = re.compile(r"\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def normalize(fields: str | Iterable[str] | None) -> tuple[str, ...]:
    """Flatten, de-duplicate and sort field names alphabetically."""
    if fields is None:
        return ()
    if isinstance(fields, str):
        fields = [fields]
    return tuple(sorted({f for f in fields if f}))


def to_float(value: Any) -> float:
    """Numeric reading of a sort field; absent or non-numeric values are 0.0.

    Strings contribute their leading numeric prefix ("12abc" -> 12.0).
    """
    if isinstance(value, int | float | Decimal):
        return float(value)
    if isinstance(value, str):
        match = _NUMERIC_PREFIX.match(value)
        return float(match.group()) if match else 0.0
    return 0.0


def _to_str(value: Any) -> str:
    return "" if value is None else str(value)


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


@dataclass(frozen=True, slots=True)
class IndexKey:
    """Derived location of an index row."""

    hash_value: str
    range_value: float | None = None
    ranged: bool = False

    @property
    def blank(self) -> bool:
        """A blank key means the record is not indexed. Sort values are never blank."""
        return self.hash_value == ""


@dataclass(frozen=True, slots=True)
class IndexSpec:
    """Declaration of an index on a document type, built into a definition per store."""

    fields: str | tuple[str, ...]
    range_key: str | tuple[str, ...] | None = None
    ranged: bool = False
    unique: bool = False

    def build(
        self,
        source: type[IndexSource],
        *,
        namespace: str = DEFAULT_NAMESPACE,
        key_encoding: KeyEncoding = KeyEncoding.DOTTED,
    ) -> IndexDefinition:
        return IndexDefinition(
            source,
            self.fields,
            ranged=self.ranged,
            range_key=self.range_key,
            unique=self.unique,
            namespace=namespace,
            key_encoding=key_encoding,
        )


class IndexDefinition:
    """Everything an index needs to know: its keys, uniqueness and table.

    Pass ``ranged=True`` to use the named fields as the sort key as well, or
    ``range_key=`` to sort on other fields.

    Raises:
        InvalidFieldError: If any key field is not a field of ``source``.
    """

    def __init__(
        self,
        source: type[IndexSource],
        name: str | Iterable[str],
        *,
        ranged: bool = False,
        range_key: str | Iterable[str] | None = None,
        unique: bool = False,
        namespace: str = DEFAULT_NAMESPACE,
        key_encoding: KeyEncoding = KeyEncoding.DOTTED,
    ) -> None:
        self.source = source
        self.namespace = namespace
        self.key_encoding = key_encoding
        self.partition_fields = normalize(name)
        self.sort_fields: tuple[str, ...] | None = None
        if ranged:
            self.sort_fields = self.partition_fields
        elif range_key:
            self.sort_fields = normalize(range_key) or None
        self.unique = unique
        self.index_name = normalize([*self.partition_fields, *(self.sort_fields or ())])

        source_name = getattr(source, "__name__", str(source))
        if not self.partition_fields:
            raise InvalidFieldError.no_fields(source_name)
        known = source.field_names()
        missing = [key for key in self.keys() if key not in known]
        if missing:
            raise InvalidFieldError.not_a_field(source_name, missing)

    @property
    def ranged(self) -> bool:
        return self.sort_fields is not None

    def keys(self) -> tuple[str, ...]:
        """Partition fields followed by sort fields, without repeats."""
        return tuple(dict.fromkeys([*self.partition_fields, *(self.sort_fields or ())]))

    @property
    def table_name(self) -> str:
        prefix = f"{self.namespace}_"
        root = self.source.table_name(self.namespace).removeprefix(prefix)
        fields = "_and_".join(pluralize(name) for name in self.index_name)
        return f"{prefix}index_{singularize(root)}_{fields}"

    def values(self, record: Indexable | Mapping[str, Any], use_changes: bool = False) -> IndexKey:
        """Derive the index key for a record or a plain attribute mapping.

        With ``use_changes`` the key is computed from the record's state before
        its unsaved changes, which locates the row the record was last indexed
        under. If none of this index's fields changed the key is blank.
        """
        if use_changes:
            attrs = self._previous_attributes(record)  # type: ignore[arg-type]
        elif isinstance(record, Mapping):
            attrs = record
        else:
            attrs = record.attributes

        if attrs is None:
            return IndexKey("", None, self.ranged)
        return IndexKey(self._hash_value(attrs), self._range_value(attrs), self.ranged)

    def _previous_attributes(self, record: Indexable) -> dict[str, Any] | None:
        changes = record.changes
        if not any(key in changes for key in self.keys()):
            return None
        attrs = dict(record.attributes)
        sort_fields = self.sort_fields or ()
        for field, (old, new) in changes.items():
            # An absent sort value was still indexed, at 0.0
            attrs[field] = old if old is not None or field in sort_fields else new
        return attrs

    def _hash_value(self, attrs: Mapping[str, Any]) -> str:
        parts = [_to_str(attrs.get(field)) for field in self.partition_fields]
        if all(_is_empty(part) for part in parts):
            return ""
        if self.key_encoding is KeyEncoding.LENGTH_PREFIXED:
            return "".join(f"{len(part)}:{part}" for part in parts)
        return ".".join(parts)

    def _range_value(self, attrs: Mapping[str, Any]) -> float | None:
        if self.sort_fields is None:
            return None
        return sum((to_float(attrs.get(field)) for field in self.sort_fields), 0.0)

    def __repr__(self) -> str:
        return (
            f"IndexDefinition(table={self.table_name!r}, partition={self.partition_fields!r}, "
            f"sort={self.sort_fields!r}, unique={self.unique!r})"
        )
