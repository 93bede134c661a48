"""
Microsoft SQL Server dialect.

Placeholders stay `?`. Current-instant functions become `getutcdate()`, typed
literals become `convert(...)` calls and `LIMIT ? OFFSET ?` becomes
`OFFSET ? ROWS FETCH NEXT ? ROWS ONLY` (see `sqlbridge.paging`).
"""
from sqlbridge.dialects.base import Dialect, PagingStyle, TemporalPolicy
from sqlbridge.dialects.base import register_dialect
from sqlbridge.idioms import function_rule, minus_to_except, typed_literal_rules

MSSQL = register_dialect(Dialect(
    name='mssql',
    aliases=('sqlserver',),
    placeholder_prefix='',
    paging=PagingStyle.FETCH,
    idioms=(
        function_rule('now()', 'now()', 'getutcdate()'),
        function_rule('NOW()', 'NOW()', 'GETUTCDATE()'),
        function_rule('getdate()', 'getdate()', 'getutcdate()'),
        function_rule('GETDATE()', 'GETDATE()', 'GETUTCDATE()'),
        function_rule('current_timestamp', 'current_timestamp', 'getutcdate()'),
        function_rule('CURRENT_TIMESTAMP', 'CURRENT_TIMESTAMP', 'GETUTCDATE()'),
        *typed_literal_rules(date='convert(date, {})', timestamp='convert(datetime, {})'),
        *minus_to_except(),
    ),
    temporal=TemporalPolicy.NORMALIZE_UTC,
    sqlalchemy_driver='mssql+pyodbc',
))
