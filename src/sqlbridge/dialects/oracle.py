"""
Oracle dialects.

Both versions number placeholders `:1, :2, ...`, wrap every current-instant
function in `sys_extract_utc(systimestamp)` and spell set difference `MINUS`.
They differ in paging: 12c+ has `OFFSET .. FETCH NEXT`, 11g needs the query
wrapped and filtered on `rownum`.

The oci drivers hand back timestamps tagged with the session offset even when
UTC was asked for, so the scanner reinterprets their wall-clock fields as
UTC. Unquoted identifiers come back upper case; quoted ones keep their case.
"""
from sqlbridge.dialects.base import Dialect, PagingStyle, TemporalPolicy
from sqlbridge.dialects.base import register_dialect
from sqlbridge.idioms import except_to_minus, function_rule, typed_literal_rules

UTC_NOW = 'sys_extract_utc(systimestamp)'

ROWNUM_COLUMN = 'rnumignore'

_IDIOMS = (
    function_rule('now()', 'now()', UTC_NOW),
    function_rule('NOW()', 'NOW()', UTC_NOW),
    function_rule('systimestamp', 'systimestamp', UTC_NOW, not_after='sys_extract_utc('),
    function_rule('SYSTIMESTAMP', 'SYSTIMESTAMP', UTC_NOW),
    function_rule('sysdate', 'sysdate', UTC_NOW),
    function_rule('SYSDATE', 'SYSDATE', UTC_NOW),
    function_rule('current_timestamp', 'current_timestamp', UTC_NOW),
    function_rule('CURRENT_TIMESTAMP', 'CURRENT_TIMESTAMP', UTC_NOW),
    *typed_literal_rules(date="to_date({}, 'yyyy-mm-dd')",
                         timestamp="to_timestamp({}, 'yyyy-mm-dd HH24:mi:ss')"),
    *except_to_minus(),
)

ORACLE = register_dialect(Dialect(
    name='oracle',
    aliases=('oci8',),
    placeholder_prefix=':',
    paging=PagingStyle.FETCH,
    idioms=_IDIOMS,
    temporal=TemporalPolicy.REINTERPRET_UTC,
    quoted_identifiers=True,
    rownum_column=ROWNUM_COLUMN,
    sqlalchemy_driver='oracle+oracledb',
))

ORACLE11G = register_dialect(Dialect(
    name='oracle11g',
    placeholder_prefix=':',
    paging=PagingStyle.ROWNUM,
    idioms=_IDIOMS,
    temporal=TemporalPolicy.REINTERPRET_UTC,
    quoted_identifiers=True,
    rownum_column=ROWNUM_COLUMN,
    sqlalchemy_driver='oracle+oracledb',
))
