"""
Query preparation.

A portable template is written once with `?` placeholders:

    select col1 from table1 where col2 = ? limit ? offset ?

and prepared for one dialect in three fixed steps:

    idioms → paging → placeholder renumbering

Idiom and paging rewrites recognize the literal `?` in context (`DATE ?`,
`LIMIT ?`), so renumbering has to come last. Preparation is pure text and
argument-list work; argument-count mismatches are not checked here and
surface as driver errors at execution time.
"""
import logging
from dataclasses import dataclass, field
from typing import Any

from sqlbridge.dialects import Dialect, get_dialect
from sqlbridge.idioms import rewrite_idioms
from sqlbridge.paging import rewrite_paging
from sqlbridge.placeholders import count_placeholders, renumber_placeholders

logger = logging.getLogger(__name__)


@dataclass
class PreparedQuery:
    """One rewrite unit: template in, dialect-native text and arguments out.
    """
    dialect: Dialect
    raw_template: str
    final_text: str = ''
    arguments: list[Any] = field(default_factory=list)

    def set_arg(self, i: int, value: Any) -> None:
        """Set argument `i`, growing the argument list with None as needed.
        """
        if i < 0:
            raise ValueError('invalid index argument')
        if i >= len(self.arguments):
            self.arguments.extend([None] * (i + 1 - len(self.arguments)))
        self.arguments[i] = value

    def placeholder_count(self) -> int:
        """Number of bindable placeholders left in the final text."""
        return count_placeholders(self.final_text, self.dialect.placeholder_prefix)

    @property
    def params(self) -> tuple:
        """Arguments as the tuple DB-API `execute` expects."""
        return tuple(self.arguments)

    def __iter__(self):
        """Unpack as `sql, params`."""
        return iter((self.final_text, self.params))


def prepare_query(dialect: Dialect | str, template: str, *args: Any) -> PreparedQuery:
    """Rewrite a portable template for a dialect.

    Parameters
        dialect: Target dialect or its identifier
        template: SQL written with generic `?` placeholders and portable idioms
        *args: Arguments in template order

    Returns
        PreparedQuery with the final text and possibly reordered arguments

    Raises
        UnsupportedDialect: If `dialect` is an unknown identifier
        PagingArgumentError: See `sqlbridge.paging.rewrite_paging`
    """
    dialect = get_dialect(dialect)

    sql = rewrite_idioms(template, dialect)
    sql, arguments = rewrite_paging(sql, args, dialect)
    if dialect.renumbers_placeholders:
        sql = renumber_placeholders(sql, dialect.placeholder_prefix)

    logger.debug(f'Prepared query for {dialect.name} with {len(arguments)} argument(s)')
    return PreparedQuery(dialect, template, sql, arguments)
