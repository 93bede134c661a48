"""
Pagination rewriting.

Portable templates page with a trailing `LIMIT ? OFFSET ?` (either keyword
may be missing, either case convention is accepted). Backends without that
syntax get it rewritten:

- FETCH backends (SQL Server, Oracle 12c+):
    `LIMIT ? OFFSET ?` → `OFFSET ? ROWS FETCH NEXT ? ROWS ONLY`
- ROWNUM backends (Oracle 11g):
    `q LIMIT ? OFFSET ?` → `SELECT * FROM (q) WHERE rownum BETWEEN ? AND ?`

Limitation: the clause is found by its keywords, never by placeholder
position, and arguments are always reordered at the tail of the argument
list. The paging values must therefore be the last bound parameters of the
template; anything else binds silently wrong.
"""
import logging
import operator
import re
from typing import TYPE_CHECKING, Any

from sqlbridge.exceptions import PagingArgumentError
from sqlbridge.sql import mask_literals

if TYPE_CHECKING:
    from sqlbridge.dialects.base import Dialect

logger = logging.getLogger(__name__)

_LIMIT = re.compile(r'(?<![\w$])(?:LIMIT|limit)\s+\?(?!\?)')
_OFFSET = re.compile(r'(?<![\w$])(?:OFFSET|offset)\s+\?(?!\?)(?!\s+(?i:rows))')

FETCH_OFFSET = 'OFFSET ? ROWS'
FETCH_NEXT = 'FETCH NEXT ? ROWS ONLY'
FETCH_FIRST_PAGE = 'OFFSET 0 ROWS\nFETCH NEXT ? ROWS ONLY'


def _last_match(pattern: re.Pattern, masked: str) -> re.Match | None:
    """Trailing occurrence of `pattern`, if any."""
    match = None
    for match in pattern.finditer(masked):
        pass
    return match


def _paging_int(arguments: list[Any], position: int, what: str) -> int:
    """Integer value of a trailing paging argument."""
    if len(arguments) < -position:
        raise PagingArgumentError(
            f'{what} placeholder has no matching trailing argument '
            f'({len(arguments)} argument(s) supplied)')
    value = arguments[position]
    if isinstance(value, bool):
        raise PagingArgumentError(f'{what} must be an integer, got {value!r}')
    try:
        return operator.index(value)
    except TypeError as err:
        raise PagingArgumentError(f'{what} must be an integer, got {value!r}') from err


def _swap_tail(arguments: list[Any]) -> list[Any]:
    """Swap the last two arguments (limit, offset → offset, limit)."""
    if len(arguments) >= 2:
        arguments[-2], arguments[-1] = arguments[-1], arguments[-2]
    return arguments


def fetch_paging(sql: str, arguments: list[Any], limit: re.Match | None,
                 offset: re.Match | None) -> tuple[str, list[Any]]:
    """Rewrite to `OFFSET ? ROWS [FETCH NEXT ? ROWS ONLY]`.
    """
    if limit and offset:
        if limit.start() < offset.start():
            sql = (f'{sql[:limit.start()]}{FETCH_OFFSET}'
                   f'{sql[limit.end():offset.start()]}{FETCH_NEXT}{sql[offset.end():]}')
            return sql, _swap_tail(arguments)
        sql = (f'{sql[:offset.start()]}{FETCH_OFFSET}'
               f'{sql[offset.end():limit.start()]}{FETCH_NEXT}{sql[limit.end():]}')
        return sql, arguments

    if limit:
        return f'{sql[:limit.start()]}{FETCH_FIRST_PAGE}{sql[limit.end():]}', arguments

    return f'{sql[:offset.start()]}{FETCH_OFFSET}{sql[offset.end():]}', arguments


def rownum_paging(sql: str, arguments: list[Any], limit: re.Match | None,
                  offset: re.Match | None) -> tuple[str, list[Any]]:
    """Wrap the query and filter on 1-based inclusive `rownum` bounds.

    Text after the paging clause is dropped along with it.
    """
    if limit and offset:
        start = min(limit.start(), offset.start())
        inner = sql[:start].strip()
        if limit.start() < offset.start():
            nrows = _paging_int(arguments, -2, 'LIMIT')
            skip = _paging_int(arguments, -1, 'OFFSET')
        else:
            skip = _paging_int(arguments, -2, 'OFFSET')
            nrows = _paging_int(arguments, -1, 'LIMIT')
        arguments[-2:] = [skip + 1, skip + nrows]
        return f'SELECT * FROM (\n{inner})\nWHERE rownum BETWEEN ? AND ?', arguments

    if limit:
        inner = sql[:limit.start()].strip()
        return f'SELECT * FROM (\n{inner})\nWHERE rownum BETWEEN 0 AND ?', arguments

    inner = sql[:offset.start()].strip()
    skip = _paging_int(arguments, -1, 'OFFSET')
    arguments[-1] = skip + 1
    return f'SELECT * FROM (\n{inner})\nWHERE rownum >= ?', arguments


def rewrite_paging(sql: str, arguments: list[Any] | tuple,
                   dialect: 'Dialect') -> tuple[str, list[Any]]:
    """Rewrite a trailing `LIMIT ?` / `OFFSET ?` for the dialect.

    Parameters
        sql: SQL with idioms already rewritten, placeholders still generic
        arguments: Bound arguments in template order
        dialect: Target dialect

    Returns
        Tuple of (rewritten SQL, possibly reordered argument list)

    Raises
        PagingArgumentError: For ROWNUM paging when the trailing values needed
            for the bound arithmetic are missing or not integers
    """
    arguments = list(arguments or ())
    if not sql or not (dialect.uses_fetch_paging or dialect.uses_rownum_paging):
        return sql, arguments

    masked = mask_literals(sql)
    limit = _last_match(_LIMIT, masked)
    offset = _last_match(_OFFSET, masked)
    if not limit and not offset:
        return sql, arguments

    logger.debug(f'Rewriting paging clause for {dialect.name} '
                 f'(limit={limit is not None}, offset={offset is not None})')

    if dialect.uses_fetch_paging:
        return fetch_paging(sql, arguments, limit, offset)
    return rownum_paging(sql, arguments, limit, offset)
