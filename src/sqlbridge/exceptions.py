"""
Exception classes for query rewriting, row scanning and the client layer.
"""
import sqlite3

import psycopg


class DatabaseError(Exception):
    """Base class for all sqlbridge errors.
    """


class UnsupportedDialect(DatabaseError, ValueError):
    """Backend identifier is not one of the supported dialects.
    """

    def __init__(self, identifier: str, available: list[str]) -> None:
        self.identifier = identifier
        self.available = available
        super().__init__(f'Unsupported dialect: {identifier!r}. Available: {available}')


class ConnectionFailure(DatabaseError):
    """Error establishing or maintaining database connection.
    """


class QueryError(DatabaseError):
    """Error in query preparation or execution.
    """


class PagingArgumentError(QueryError):
    """Trailing paging arguments are missing or not integers.
    """


class NoRowsError(QueryError):
    """Query expected to return a row returned none.
    """


class TypeConversionError(DatabaseError):
    """Error converting types between Python and database.
    """


class ColumnBindFailure(TypeConversionError):
    """A result column value could not be bound to its record field.
    """

    def __init__(self, column: str, field: str, reason: str) -> None:
        self.column = column
        self.field = field
        super().__init__(f'Cannot bind column {column!r} to field {field!r}: {reason}')


DbConnectionError = (
    psycopg.OperationalError,
    psycopg.InterfaceError,
    sqlite3.OperationalError,
    sqlite3.InterfaceError,
    ConnectionFailure,
    )
