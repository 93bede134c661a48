"""
Portable SQL across PostgreSQL, MySQL/MariaDB, SQL Server, Oracle and SQLite.

Queries are written once with generic `?` placeholders and portable idioms,
prepared for one dialect, and their rows scanned into annotated records:

- Module functions: sqlbridge.select(cn, Account, sql, *args)
- ConnectionWrapper methods: cn.select(Account, sql, *args)

The module functions are facades over the connection methods.
"""
__version__ = '0.1.0'

from typing import Any

from sqlbridge.connection import ConnectionWrapper, connect
from sqlbridge.dialects import Dialect, PagingStyle, TemporalPolicy
from sqlbridge.dialects import get_available_dialects, get_dialect
from sqlbridge.exceptions import ColumnBindFailure, ConnectionFailure
from sqlbridge.exceptions import DatabaseError, DbConnectionError, NoRowsError
from sqlbridge.exceptions import PagingArgumentError, QueryError
from sqlbridge.exceptions import TypeConversionError, UnsupportedDialect
from sqlbridge.options import DatabaseOptions
from sqlbridge.query import PreparedQuery, prepare_query
from sqlbridge.records import FieldBinding, column, column_names
from sqlbridge.records import field_bindings, record_values
from sqlbridge.scan import Scanner
from sqlbridge.transaction import Transaction
from sqlbridge.types import ZERO_TIME, NullTime


def execute(cn: ConnectionWrapper, sql: str, *args: Any) -> int:
    """Execute a SQL query and return affected row count.
    """
    return cn.execute(sql, *args)


delete = execute
insert = execute
update = execute


def select(cn: ConnectionWrapper, record_type: type, sql: str, *args: Any) -> list:
    """Execute a query and scan every row into a new record.
    """
    return cn.select(record_type, sql, *args)


def select_into(cn: ConnectionWrapper, dest: Any, sql: str, *args: Any) -> Any:
    """Execute a query and scan the first row into `dest`.

    Raises NoRowsError if the query returns no rows.
    """
    return cn.select_into(dest, sql, *args)


def for_each_row(cn: ConnectionWrapper, sql: str, callback: Any, *args: Any,
                 record_type: type | None = None) -> int:
    """Execute a query and call `callback` once per row.
    """
    return cn.for_each_row(sql, callback, *args, record_type=record_type)


def insert_record(cn: ConnectionWrapper, table: str, record: Any) -> int:
    """Insert a record using its declared columns.
    """
    return cn.insert_record(table, record)


__all__ = [
    'ColumnBindFailure',
    'ConnectionFailure',
    'ConnectionWrapper',
    'DatabaseError',
    'DatabaseOptions',
    'DbConnectionError',
    'Dialect',
    'FieldBinding',
    'NoRowsError',
    'NullTime',
    'PagingArgumentError',
    'PagingStyle',
    'PreparedQuery',
    'QueryError',
    'Scanner',
    'TemporalPolicy',
    'Transaction',
    'TypeConversionError',
    'UnsupportedDialect',
    'ZERO_TIME',
    'column',
    'column_names',
    'connect',
    'delete',
    'execute',
    'field_bindings',
    'for_each_row',
    'get_available_dialects',
    'get_dialect',
    'insert',
    'insert_record',
    'prepare_query',
    'record_values',
    'select',
    'select_into',
    'update',
]
