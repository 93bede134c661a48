"""
DB-API cursor wrapper.

Statements reaching this cursor are already prepared for the connection's
dialect (see `sqlbridge.query`); the wrapper only binds arguments, logs the
statement and records timing on the owning connection.
"""
import logging
import time
from collections.abc import Iterator
from functools import wraps
from typing import Any

logger = logging.getLogger(__name__)


def dumpsql(func):
    """Decorator for logging SQL queries and parameters."""
    @wraps(func)
    def wrapper(self, operation: str, *args: Any, **kwargs: Any):
        start = time.time()
        logger.debug(f'SQL:\n{operation}\nargs: {args}')
        try:
            result = func(self, operation, *args, **kwargs)
            if hasattr(self.dbapi_cursor, 'statusmessage'):
                logger.debug(f'Query result: {self.dbapi_cursor.statusmessage}')
            return result
        except Exception:
            logger.error(f'Error with query:\nSQL:\n{operation}\nargs: {args}')
            raise
        finally:
            elapsed = time.time() - start
            self.connwrapper.addcall(elapsed)
            logger.debug(f'Query time: {elapsed:.4f}s')
    return wrapper


class Cursor:
    """Cursor wrapper implementing the DB-API 2.0 calls the client uses.
    """

    def __init__(self, cursor: Any, connection_wrapper: Any) -> None:
        self.dbapi_cursor = cursor
        self.connwrapper = connection_wrapper

    def __getattr__(self, name: str) -> Any:
        """Delegate members to underlying cursor."""
        return getattr(self.dbapi_cursor, name)

    def __iter__(self) -> Iterator:
        while (row := self.fetchone()) is not None:
            yield row

    def __enter__(self) -> 'Cursor':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    @property
    def description(self) -> list[tuple] | None:
        """Column descriptions for last query."""
        return self.dbapi_cursor.description

    @property
    def rowcount(self) -> int:
        """Number of rows produced/affected by last operation."""
        return self.dbapi_cursor.rowcount

    def close(self) -> None:
        self.dbapi_cursor.close()

    def fetchone(self) -> tuple | None:
        return self.dbapi_cursor.fetchone()

    def fetchall(self) -> list[tuple]:
        return self.dbapi_cursor.fetchall()

    @dumpsql
    def execute(self, operation: str, *args: Any) -> int:
        """Execute a prepared statement with positional arguments.

        Driver errors propagate unchanged.
        """
        if args:
            self.dbapi_cursor.execute(operation, args)
        else:
            self.dbapi_cursor.execute(operation)
        return self.dbapi_cursor.rowcount
