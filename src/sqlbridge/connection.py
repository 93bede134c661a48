"""
Database connection handling with SQLAlchemy.

This module provides:
1. The `connect()` function for creating new database connections
2. The `ConnectionWrapper` client that prepares portable SQL for its dialect
   and scans results into records
3. Engine creation and management through a thread-safe registry

The ConnectionWrapper is the primary database client:
- prepare(sql, *args) - Rewrite a portable template for the dialect
- execute(sql, *args) - Execute SQL and return affected row count
- select_into(dest, sql, *args) - Scan the first row into a record
- select(record_type, sql, *args) - Scan every row into new records
- for_each_row(sql, callback, *args) - Call back once per row
- insert_record(table, record) - Insert a record by its declared columns

SQLAlchemy is used for URL building and connection management only; all
statements run on the raw DB-API connection with the dialect's native
placeholders.
"""
import atexit
import datetime
import logging
import sqlite3
import threading
from collections.abc import Callable
from dataclasses import fields
from decimal import Decimal
from typing import Any, Self, TypeVar

import psycopg
import sqlalchemy as sa
from sqlalchemy.engine import Engine
from sqlalchemy.pool import NullPool
from sqlbridge.cursor import Cursor
from sqlbridge.dialects import MSSQL, ORACLE, ORACLE11G, POSTGRES, SQLITE, Dialect
from sqlbridge.exceptions import ConnectionFailure, DbConnectionError, NoRowsError
from sqlbridge.options import DatabaseOptions
from sqlbridge.query import PreparedQuery, prepare_query
from sqlbridge.records import column_names, record_values
from sqlbridge.scan import Scanner, cursor_columns
from sqlbridge.sql import make_placeholders

from libb import attrdict, load_options

__all__ = [
    'ConnectionWrapper',
    'connect',
    'configure_connection',
    'create_url_from_options',
    'get_engine_for_options',
    'dispose_all_engines',
]

logger = logging.getLogger(__name__)

R = TypeVar('R')
_engine_registry: dict[str, Engine] = {}
_engine_registry_lock = threading.RLock()


def create_url_from_options(options: DatabaseOptions,
                            url_creator: Callable[..., sa.URL] = sa.URL.create) -> sa.URL:
    """Convert DatabaseOptions to SQLAlchemy URL.
    """
    dialect = options.dialect

    if dialect is SQLITE:
        return url_creator(
            drivername=dialect.sqlalchemy_driver,
            database=options.database
        )

    query = {}
    database = options.database
    if dialect is POSTGRES:
        if options.timeout:
            query['connect_timeout'] = str(options.timeout)
        query['application_name'] = options.appname
    elif dialect is MSSQL:
        query['driver'] = 'ODBC Driver 18 for SQL Server'
        query['TrustServerCertificate'] = 'yes'
    elif dialect in (ORACLE, ORACLE11G):
        query['service_name'] = options.database
        database = None

    return url_creator(
        drivername=dialect.sqlalchemy_driver,
        username=options.username,
        password=options.password,
        host=options.hostname,
        port=options.port or None,
        database=database,
        query=query
    )


def get_engine_for_options(options: DatabaseOptions,
                           engine_factory: Callable[..., Engine] = sa.create_engine,
                           **kwargs: Any) -> Engine:
    """Get or create a SQLAlchemy engine for the given options.
    """
    key = str(options)

    with _engine_registry_lock:
        if key in _engine_registry:
            logger.debug(f'Using existing engine for {options.drivername}')
            return _engine_registry[key]

        url = create_url_from_options(options)
        engine_kwargs: dict[str, Any] = {'echo': False, 'poolclass': NullPool}
        engine_kwargs.update(kwargs)

        engine = engine_factory(url, **engine_kwargs)

        _engine_registry[key] = engine
        logger.debug(f'Created new engine for {options.drivername}')

        return engine


def dispose_all_engines() -> None:
    """Dispose all engines in the registry.
    """
    with _engine_registry_lock:
        for engine in _engine_registry.values():
            engine.dispose()
        _engine_registry.clear()
        logger.debug('All database engines disposed')


atexit.register(dispose_all_engines)


class ConnectionWrapper:
    """Wraps a SQLAlchemy connection to run portable SQL on one dialect

    This class provides a thin wrapper around SQLAlchemy connection objects that:
    1. Prepares every statement for the connection's dialect
    2. Scans result rows into records with a per-call `Scanner`
    3. Tracks query execution counts and timing
    4. Defers commits while a `sqlbridge.transaction.Transaction` is open
    5. Supports context manager protocol for explicit resource management
    """

    def __init__(self, sa_connection: sa.engine.Connection | None,
                 options: DatabaseOptions) -> None:
        """Initialize a connection wrapper

        Args:
            sa_connection: SQLAlchemy connection object to wrap
            options: The DatabaseOptions used to create this connection

        Raises
            ValueError: If no options are given, the dialect would be unknown
        """
        if options is None:
            raise ValueError('ConnectionWrapper requires DatabaseOptions to select a dialect')
        self.sa_connection = sa_connection
        self.engine = sa_connection.engine if sa_connection else None
        self.options = options
        self.dialect: Dialect = options.dialect
        self.dbapi_connection = sa_connection.connection if sa_connection else None
        self.calls = 0
        self.time = 0
        self.in_transaction = False

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None,
                 exc_tb: Any | None) -> None:
        self.close()
        logger.debug('Closed connection via context manager')

    @property
    def closed(self) -> bool:
        return self.sa_connection is None or self.sa_connection.closed

    def cursor(self) -> Cursor:
        """Get a wrapped cursor that records statistics on this connection."""
        return Cursor(self.dbapi_connection.cursor(), self)

    def scanner(self) -> Scanner:
        """New row scanner for this connection's dialect."""
        return Scanner(self.dialect, self.options.plan_cache_size)

    def addcall(self, elapsed: float) -> None:
        """Track execution statistics

        Args:
            elapsed: Time in seconds that the query took to execute
        """
        self.time += elapsed
        self.calls += 1

    def prepare(self, sql: str, *args: Any) -> PreparedQuery:
        """Rewrite a portable template for this connection's dialect."""
        return prepare_query(self.dialect, sql, *args)

    def _prepared(self, sql: str | PreparedQuery, args: tuple) -> PreparedQuery:
        if isinstance(sql, PreparedQuery):
            if args:
                raise ValueError('Arguments are bound when the query is prepared')
            return sql
        return self.prepare(sql, *args)

    def _run(self, sql: str | PreparedQuery, args: tuple) -> Cursor:
        query = self._prepared(sql, args)
        cursor = self.cursor()
        try:
            cursor.execute(query.final_text, *query.arguments)
        except Exception:
            cursor.close()
            raise
        return cursor

    def execute(self, sql: str | PreparedQuery, *args: Any) -> int:
        """Execute SQL and commit, unless a transaction is open.

        Returns
            Number of affected rows as reported by the driver
        """
        with self._run(sql, args) as cursor:
            rowcount = cursor.rowcount
        if not self.in_transaction:
            self.commit()
        return rowcount

    def select_into(self, dest: R, sql: str | PreparedQuery, *args: Any) -> R:
        """Scan the first result row into `dest`.

        Raises
            NoRowsError: If the query returns no rows
            ColumnBindFailure: If a column cannot be bound to its field
        """
        with self._run(sql, args) as cursor:
            if not self.scanner().scan(cursor, dest):
                raise NoRowsError('Query returned no rows')
        return dest

    def select(self, record_type: type[R], sql: str | PreparedQuery, *args: Any) -> list[R]:
        """Scan every result row into a new `record_type` instance."""
        with self._run(sql, args) as cursor:
            records = list(self.scanner().records(cursor, record_type))
        logger.debug(f'Selected {len(records)} {record_type.__name__} record(s)')
        return records

    def for_each_row(self, sql: str | PreparedQuery, callback: Callable[[Any], Any],
                     *args: Any, record_type: type | None = None) -> int:
        """Call `callback` once per result row.

        Rows are passed as an attrdict keyed by column name, or scanned into
        a new `record_type` instance when given. An exception raised by the
        callback stops iteration and propagates.

        Returns
            Number of rows processed
        """
        count = 0
        with self._run(sql, args) as cursor:
            if record_type is not None:
                rows = self.scanner().records(cursor, record_type)
            else:
                columns = cursor_columns(cursor)
                rows = (attrdict(zip(columns, row)) for row in cursor)
            for row in rows:
                callback(row)
                count += 1
        return count

    def insert_record(self, table: str, record: Any) -> int:
        """Insert one record using its declared columns.

        Index-only fields are left out. Returns the affected row count.
        """
        columns = column_names(type(record))
        if not columns:
            raise ValueError(f'{type(record).__name__} declares no columns')
        sql = f'insert into {table} ({", ".join(columns)}) values ({make_placeholders(len(columns))})'
        return self.execute(sql, *record_values(record))

    def commit(self) -> None:
        self.dbapi_connection.commit()

    def rollback(self) -> None:
        self.dbapi_connection.rollback()

    def close(self) -> None:
        """Close the SQLAlchemy connection and log statistics."""
        if self.closed:
            return
        self.sa_connection.close()
        logger.debug(f'Connection closed: {self.calls} queries in {self.time:.2f}s '
                     f'(avg: {self.time/max(1,self.calls):.3f}s per query)')


def _adapt_date_iso(value: datetime.date) -> str:
    return value.isoformat()


def _adapt_datetime_iso(value: datetime.datetime) -> str:
    return value.isoformat(sep=' ')


def configure_connection(sa_connection: sa.engine.Connection, dialect: Dialect) -> None:
    """Apply per-dialect settings to the raw DB-API connection.

    PostgreSQL cursors bind native `$n` placeholders through `RawCursor`.
    SQLite writes dates and timestamps as ISO text, which the scanner parses
    back, and decimals as REAL.
    """
    raw_conn = sa_connection.connection.driver_connection
    if dialect is POSTGRES:
        raw_conn.cursor_factory = psycopg.RawCursor
    elif dialect is SQLITE:
        sqlite3.register_adapter(datetime.date, _adapt_date_iso)
        sqlite3.register_adapter(datetime.datetime, _adapt_datetime_iso)
        sqlite3.register_adapter(Decimal, float)


@load_options(cls=DatabaseOptions)
def connect(options: DatabaseOptions | dict[str, Any] | str,
            config: Any | None = None, **kw: Any) -> ConnectionWrapper:
    """Connect to a database using SQLAlchemy for connection management

    Args:
        options: Can be:
                - DatabaseOptions object
                - String path to configuration
                - Dictionary of options
                - Options specified as keyword arguments
        config: Configuration object (for loading from config files)
        **kw: Additional keyword arguments to override options

    Returns
        ConnectionWrapper object for connecting to the database

    Raises
        UnsupportedDialect: If the driver name is not a supported dialect
        ConnectionFailure: If the database cannot be reached
    """
    if isinstance(options, DatabaseOptions):
        for field in fields(options):
            kw.pop(field.name, None)
    else:
        options_func = load_options(cls=DatabaseOptions)(lambda o, c: o)
        options = options_func(options, config, **kw)

    engine = get_engine_for_options(options)

    try:
        sa_connection = engine.connect()
    except (sa.exc.DBAPIError, *DbConnectionError) as err:
        raise ConnectionFailure(f"Can't connect to the database: {err}") from err

    configure_connection(sa_connection, options.dialect)
    logger.debug(f'Connected to {options.dialect} database {options.database}')

    return ConnectionWrapper(sa_connection, options)
