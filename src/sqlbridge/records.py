"""
Record declarations.

Records are plain dataclasses whose fields carry a column-name annotation:

    @dataclass
    class Account:
        id: int = column('id')
        name: str | None = column('name')
        created: NullTime = column('created_at', default_factory=NullTime)

The annotation is the only contract between a result set and a record type:
columns are matched to fields by the declared name, never by field name or
position. A name wrapped in double quotes (`column('"Name"')`) is matched
case-sensitively on backends that return quoted identifiers verbatim.
"""
import dataclasses
import functools
import typing
from collections.abc import Callable
from dataclasses import MISSING, dataclass
from typing import Any

from sqlbridge.types import NullTime, is_temporal, unwrap_optional

COLUMN_METADATA = 'sqlbridge.column'
INDEX_ONLY_METADATA = 'sqlbridge.index_only'


def column(name: str, *, default: Any = None, default_factory: Callable[[], Any] | Any = MISSING,
           index_only: bool = False, **kwargs: Any) -> Any:
    """Declare the result column bound to a dataclass field.

    Parameters
        name: Column name as returned by the driver
        default: Field default, None unless given
        default_factory: Zero-argument factory, takes precedence over `default`
        index_only: Column only consumes a synthetic row number and is never
            assigned to the record
        **kwargs: Passed through to `dataclasses.field`
    """
    metadata = dict(kwargs.pop('metadata', None) or {})
    metadata[COLUMN_METADATA] = name
    metadata[INDEX_ONLY_METADATA] = index_only
    if default_factory is not MISSING:
        return dataclasses.field(default_factory=default_factory, metadata=metadata, **kwargs)
    return dataclasses.field(default=default, metadata=metadata, **kwargs)


def is_quoted(name: str) -> bool:
    return len(name) >= 2 and name[0] == name[-1] == '"'


@dataclass(frozen=True)
class FieldBinding:
    """Association of one result column with one record field.
    """
    field_name: str
    column_name: str
    target: Any = Any
    nullable: bool = True
    index_only: bool = False

    @property
    def quoted(self) -> bool:
        return is_quoted(self.column_name)

    @property
    def bare_name(self) -> str:
        """Column name without identifier quotes."""
        return self.column_name[1:-1] if self.quoted else self.column_name

    @property
    def temporal(self) -> bool:
        return is_temporal(self.target)

    def bind(self, record: Any, value: Any) -> None:
        setattr(record, self.field_name, value)


@functools.cache
def field_bindings(record_type: type) -> tuple[FieldBinding, ...]:
    """Bindings for every annotated field of a dataclass record type.

    Raises
        TypeError: If `record_type` is not a dataclass
    """
    if not dataclasses.is_dataclass(record_type):
        raise TypeError(f'{record_type!r} is not a dataclass record type')

    hints = typing.get_type_hints(record_type)
    bindings = []
    for f in dataclasses.fields(record_type):
        name = f.metadata.get(COLUMN_METADATA)
        if name is None:
            continue
        target, nullable = unwrap_optional(hints.get(f.name, Any))
        bindings.append(FieldBinding(
            field_name=f.name,
            column_name=name,
            target=target,
            nullable=nullable,
            index_only=f.metadata.get(INDEX_ONLY_METADATA, False),
            ))
    return tuple(bindings)


def column_names(record_type: type, include_index_only: bool = False) -> list[str]:
    """Declared column names in field order, without identifier quotes.
    """
    return [b.bare_name for b in field_bindings(record_type)
            if include_index_only or not b.index_only]


def record_values(record: Any) -> list[Any]:
    """Values of the declared columns in `column_names` order.

    `NullTime` fields are reduced to their database value.
    """
    values = []
    for binding in field_bindings(type(record)):
        if binding.index_only:
            continue
        value = getattr(record, binding.field_name)
        if isinstance(value, NullTime):
            value = value.value()
        values.append(value)
    return values
