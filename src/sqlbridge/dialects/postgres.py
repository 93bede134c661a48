"""
PostgreSQL dialect.

- Positional placeholders are `$1, $2, ...`
- `now()` / `current_timestamp` are evaluated `at time zone 'UTC'`
- `DATE ?` / `TIMESTAMP ?` need no cast: the driver sends typed parameters
- `MINUS` is spelled `EXCEPT`
"""
from sqlbridge.dialects.base import Dialect, PagingStyle, TemporalPolicy
from sqlbridge.dialects.base import register_dialect
from sqlbridge.idioms import function_rule, minus_to_except, typed_literal_rules

_AT_UTC = r"\s+(?i:at\s+time\s+zone)"

POSTGRES = register_dialect(Dialect(
    name='postgres',
    aliases=('postgresql',),
    placeholder_prefix='$',
    paging=PagingStyle.LIMIT_OFFSET,
    idioms=(
        function_rule('now()', 'now()', "now() at time zone 'UTC'", guard=_AT_UTC),
        function_rule('NOW()', 'NOW()', "NOW() AT TIME ZONE 'UTC'", guard=_AT_UTC),
        function_rule('current_timestamp', 'current_timestamp',
                      "current_timestamp at time zone 'UTC'", guard=_AT_UTC),
        function_rule('CURRENT_TIMESTAMP', 'CURRENT_TIMESTAMP',
                      "CURRENT_TIMESTAMP AT TIME ZONE 'UTC'", guard=_AT_UTC),
        *typed_literal_rules(date='{}', timestamp='{}'),
        *minus_to_except(),
    ),
    temporal=TemporalPolicy.NORMALIZE_UTC,
    sqlalchemy_driver='postgresql+psycopg',
))
