"""
MySQL / MariaDB dialect.

Placeholders stay `?`. Current-instant functions become `UTC_TIMESTAMP()`,
double-quoted identifiers become backtick-quoted. `MINUS` is rewritten to
`EXCEPT`, which MariaDB 10.3+ understands.
"""
from sqlbridge.dialects.base import Dialect, PagingStyle, TemporalPolicy
from sqlbridge.dialects.base import register_dialect
from sqlbridge.idioms import function_rule, minus_to_except, typed_literal_rules

MYSQL = register_dialect(Dialect(
    name='mysql',
    aliases=('mariadb',),
    placeholder_prefix='',
    paging=PagingStyle.LIMIT_OFFSET,
    idioms=(
        function_rule('now()', 'now()', 'UTC_TIMESTAMP()'),
        function_rule('NOW()', 'NOW()', 'UTC_TIMESTAMP()'),
        function_rule('current_timestamp', 'current_timestamp', 'UTC_TIMESTAMP()', parens=True),
        function_rule('CURRENT_TIMESTAMP', 'CURRENT_TIMESTAMP', 'UTC_TIMESTAMP()', parens=True),
        *typed_literal_rules(date='{}', timestamp='{}'),
        *minus_to_except(),
    ),
    temporal=TemporalPolicy.NORMALIZE_UTC,
    backtick_identifiers=True,
    sqlalchemy_driver='mariadb+mariadbconnector',
))
