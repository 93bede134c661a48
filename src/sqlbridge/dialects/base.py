"""
Dialect rule table.

A `Dialect` is an immutable description of one backend's SQL syntax profile:
how positional placeholders are spelled, how result pages are requested,
which portable idioms are rewritten and how temporal values come back from
its driver. Dialects are built once at import time by the backend modules and
looked up by identifier; nothing here is mutated afterwards, so lookups are
safe from any thread.
"""
from dataclasses import dataclass, field
from enum import Enum

from sqlbridge.exceptions import UnsupportedDialect
from sqlbridge.idioms import IdiomRule

# Registry of identifier -> dialect, aliases included
_DIALECT_REGISTRY: dict[str, 'Dialect'] = {}


class PagingStyle(Enum):
    """How a dialect expresses LIMIT / OFFSET."""
    LIMIT_OFFSET = 'limit_offset'
    FETCH = 'fetch'
    ROWNUM = 'rownum'


class TemporalPolicy(Enum):
    """How the scanner corrects temporal values returned by the driver."""
    NORMALIZE_UTC = 'normalize_utc'
    REINTERPRET_UTC = 'reinterpret_utc'
    PARSE_TEXT = 'parse_text'


@dataclass(frozen=True)
class Dialect:
    """One supported backend's SQL syntax profile.
    """
    name: str
    placeholder_prefix: str = ''
    paging: PagingStyle = PagingStyle.LIMIT_OFFSET
    idioms: tuple[IdiomRule, ...] = ()
    temporal: TemporalPolicy = TemporalPolicy.NORMALIZE_UTC
    quoted_identifiers: bool = False
    backtick_identifiers: bool = False
    rownum_column: str | None = None
    sqlalchemy_driver: str = ''
    required_options: tuple[str, ...] = ('hostname', 'database')
    aliases: tuple[str, ...] = field(default=(), compare=False)

    @property
    def uses_fetch_paging(self) -> bool:
        return self.paging == PagingStyle.FETCH

    @property
    def uses_rownum_paging(self) -> bool:
        return self.paging == PagingStyle.ROWNUM

    @property
    def renumbers_placeholders(self) -> bool:
        return bool(self.placeholder_prefix)

    def __str__(self) -> str:
        return self.name


def register_dialect(dialect: Dialect) -> Dialect:
    """Register a dialect under its name and aliases.
    """
    for identifier in (dialect.name, *dialect.aliases):
        _DIALECT_REGISTRY[identifier.lower()] = dialect
    return dialect


def get_available_dialects() -> list[str]:
    """Return list of registered dialect identifiers."""
    return list(_DIALECT_REGISTRY.keys())


def is_supported_dialect(identifier: str | None) -> bool:
    """Check if an identifier names a supported dialect."""
    return bool(identifier) and identifier.lower() in _DIALECT_REGISTRY


def get_dialect(identifier: 'str | Dialect') -> Dialect:
    """Resolve a backend identifier to its dialect.

    Raises
        UnsupportedDialect: If the identifier is not registered
    """
    if isinstance(identifier, Dialect):
        return identifier
    if not is_supported_dialect(identifier):
        raise UnsupportedDialect(identifier, get_available_dialects())
    return _DIALECT_REGISTRY[identifier.lower()]
