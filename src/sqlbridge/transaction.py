"""
Transaction handling for grouped statements.
"""
import logging
import threading
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TypeVar

from sqlbridge.query import PreparedQuery

if TYPE_CHECKING:
    from sqlbridge.connection import ConnectionWrapper

logger = logging.getLogger(__name__)

R = TypeVar('R')

_local = threading.local()


class Transaction:
    """Context manager for running multiple commands in a transaction.

    Statements run on the wrapped connection without committing. A clean
    exit commits, an exception rolls back and propagates. Thread-local state
    tracks the open transactions; nested transactions on the same connection
    within one thread are not supported.

    Examples
        with Transaction(cn) as tx:
            tx.execute('delete from account where id = ?', 1)
            tx.insert_record('account', account)
    """

    def __init__(self, cn: 'ConnectionWrapper') -> None:
        self.connection = cn

        if not hasattr(_local, 'active_transactions'):
            _local.active_transactions = set()

        if id(cn) in _local.active_transactions:
            raise RuntimeError('Nested transactions are not supported')

    def __enter__(self) -> 'Transaction':
        _local.active_transactions.add(id(self.connection))
        self.connection.in_transaction = True
        logger.debug(f'Started transaction for connection {id(self.connection)}')
        return self

    def __exit__(self, exc_type: type | None, value: Exception | None, traceback: Any | None) -> None:
        try:
            if exc_type is not None:
                self.connection.rollback()
                logger.warning('Rolling back the current transaction')
            else:
                self.connection.commit()
                logger.debug(f'Committed transaction for connection {id(self.connection)}')
        finally:
            _local.active_transactions.discard(id(self.connection))
            self.connection.in_transaction = False

    def execute(self, sql: str | PreparedQuery, *args: Any) -> int:
        """Execute SQL within the transaction and return affected row count."""
        return self.connection.execute(sql, *args)

    def select(self, record_type: type[R], sql: str | PreparedQuery, *args: Any) -> list[R]:
        return self.connection.select(record_type, sql, *args)

    def select_into(self, dest: R, sql: str | PreparedQuery, *args: Any) -> R:
        return self.connection.select_into(dest, sql, *args)

    def for_each_row(self, sql: str | PreparedQuery, callback: Callable[[Any], Any],
                     *args: Any, record_type: type | None = None) -> int:
        return self.connection.for_each_row(sql, callback, *args, record_type=record_type)

    def insert_record(self, table: str, record: Any) -> int:
        return self.connection.insert_record(table, record)
