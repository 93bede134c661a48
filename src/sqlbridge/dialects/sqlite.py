"""
SQLite dialect.

Placeholders stay `?`. SQLite has no temporal storage class: typed literals
go through `date()` / `datetime()` and values come back as text, which the
scanner parses (see `sqlbridge.types.parse_text_timestamp`).
"""
from sqlbridge.dialects.base import Dialect, PagingStyle, TemporalPolicy
from sqlbridge.dialects.base import register_dialect
from sqlbridge.idioms import function_rule, minus_to_except, typed_literal_rules

SQLITE = register_dialect(Dialect(
    name='sqlite3',
    aliases=('sqlite',),
    placeholder_prefix='',
    paging=PagingStyle.LIMIT_OFFSET,
    idioms=(
        function_rule('now()', 'now()', "datetime('now')"),
        function_rule('NOW()', 'NOW()', "datetime('now')"),
        *typed_literal_rules(date='date({})', timestamp='datetime({})'),
        *minus_to_except(),
    ),
    temporal=TemporalPolicy.PARSE_TEXT,
    sqlalchemy_driver='sqlite',
    required_options=('database',),
))
