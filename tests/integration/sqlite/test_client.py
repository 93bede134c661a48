"""
SQLite integration tests for the connection client.

Runs portable templates against an in-memory database: idioms, paging and
text timestamps go through the real driver.
"""
import datetime
from dataclasses import dataclass
from decimal import Decimal

import pytest
import sqlbridge as db
from sqlbridge import NoRowsError, NullTime, Transaction, column, record_values

UTC = datetime.timezone.utc

SELECT_ACCOUNTS = 'select id, name, balance, created_at, closed_at from account'


@dataclass
class Account:
    id: int = column('id')
    name: str | None = column('name')
    balance: Decimal | None = column('balance')
    created: datetime.datetime | None = column('created_at')
    closed: NullTime = column('closed_at', default_factory=NullTime)


@dataclass
class Count:
    n: int = column('n')


@dataclass
class Clock:
    now: datetime.datetime | None = column('now')


class TestSelect:

    def test_select_records(self, sqlite_conn):
        accounts = db.select(sqlite_conn, Account, f'{SELECT_ACCOUNTS} order by id')

        assert [a.name for a in accounts] == ['Alice', 'Bob', 'Charlie']
        assert accounts[0].balance == Decimal('10.5')

    def test_text_timestamps_parsed(self, sqlite_conn):
        accounts = db.select(sqlite_conn, Account, f'{SELECT_ACCOUNTS} order by id')

        assert accounts[0].created == datetime.datetime(2024, 1, 15, 9, 30, tzinfo=UTC)
        assert accounts[1].created == datetime.datetime(2024, 2, 1, 12, 0, tzinfo=UTC)
        assert accounts[2].created == datetime.datetime(2024, 3, 10, tzinfo=UTC)

    def test_null_time(self, sqlite_conn):
        accounts = db.select(sqlite_conn, Account, f'{SELECT_ACCOUNTS} order by id')

        assert not accounts[0].closed.valid
        assert accounts[0].closed.time == db.ZERO_TIME
        assert accounts[1].closed.valid
        assert accounts[1].closed.time == datetime.datetime(2024, 3, 1, tzinfo=UTC)

    def test_select_into(self, sqlite_conn):
        account = db.select_into(sqlite_conn, Account(), f'{SELECT_ACCOUNTS} where id = ?', 2)
        assert account.name == 'Bob'

    def test_select_into_no_rows(self, sqlite_conn):
        with pytest.raises(NoRowsError):
            db.select_into(sqlite_conn, Account(), f'{SELECT_ACCOUNTS} where id = ?', 99)

    def test_paging(self, sqlite_conn):
        accounts = db.select(sqlite_conn, Account, f'{SELECT_ACCOUNTS} order by id limit ? offset ?', 2, 1)
        assert [a.name for a in accounts] == ['Bob', 'Charlie']

    def test_empty_result(self, sqlite_conn):
        assert db.select(sqlite_conn, Account, f'{SELECT_ACCOUNTS} where 1 = 0') == []


class TestIdioms:

    def test_now(self, sqlite_conn):
        clock = db.select_into(sqlite_conn, Clock(), 'select now() as now')

        assert clock.now.utcoffset() == datetime.timedelta(0)
        assert abs(clock.now - datetime.datetime.now(UTC)) < datetime.timedelta(minutes=5)

    def test_typed_date_literal(self, sqlite_conn):
        count = db.select_into(sqlite_conn, Count(),
                               'select count(*) as n from account where date(created_at) >= DATE ?',
                               datetime.date(2024, 2, 1))
        assert count.n == 2

    def test_minus(self, sqlite_conn):
        count = db.select_into(sqlite_conn, Count(), """
        select count(*) as n from (
            select name from account
            minus
            select name from account where id = ?
        )""", 1)
        assert count.n == 2


class TestForEachRow:

    def test_attrdict_rows(self, sqlite_conn):
        names = []
        processed = db.for_each_row(sqlite_conn, 'select id, name from account order by id',
                                    lambda row: names.append(row.name))

        assert processed == 3
        assert names == ['Alice', 'Bob', 'Charlie']

    def test_record_rows(self, sqlite_conn):
        seen = []
        sqlite_conn.for_each_row(f'{SELECT_ACCOUNTS} where balance > ? order by id', seen.append, 15,
                                 record_type=Account)

        assert [a.name for a in seen] == ['Bob', 'Charlie']
        assert all(isinstance(a, Account) for a in seen)

    def test_callback_error_stops(self, sqlite_conn):
        calls = []

        def callback(row):
            calls.append(row)
            raise ValueError('stop')

        with pytest.raises(ValueError, match='stop'):
            sqlite_conn.for_each_row('select id from account', callback)
        assert len(calls) == 1


class TestWrite:

    def test_execute_rowcount(self, sqlite_conn):
        rowcount = db.update(sqlite_conn, 'update account set balance = ? where name = ?', 99.5, 'Alice')
        assert rowcount == 1

        account = db.select_into(sqlite_conn, Account(), f'{SELECT_ACCOUNTS} where name = ?', 'Alice')
        assert account.balance == Decimal('99.5')

    def test_insert_record_round_trip(self, sqlite_conn):
        """A record inserted and selected back carries the same values."""
        record = Account(id=4, name='Dana', balance=Decimal('1.25'),
                         created=datetime.datetime(2024, 5, 1, 8, 0, tzinfo=UTC),
                         closed=NullTime.of(datetime.datetime(2024, 6, 1, 17, 45, 30, tzinfo=UTC)))

        assert db.insert_record(sqlite_conn, 'account', record) == 1

        loaded = db.select_into(sqlite_conn, Account(), f'{SELECT_ACCOUNTS} where id = ?', 4)
        assert record_values(loaded) == record_values(record)

    def test_insert_record_null_time(self, sqlite_conn):
        db.insert_record(sqlite_conn, 'account', Account(id=5, name='Eve'))

        loaded = db.select_into(sqlite_conn, Account(), f'{SELECT_ACCOUNTS} where id = ?', 5)
        assert loaded.created is None
        assert not loaded.closed.valid

    def test_prepared_query(self, sqlite_conn):
        pq = sqlite_conn.prepare('delete from account where id = ?', 3)
        assert sqlite_conn.execute(pq) == 1
        assert len(db.select(sqlite_conn, Account, SELECT_ACCOUNTS)) == 2


class TestTransaction:

    def test_commit_on_exit(self, sqlite_conn):
        with Transaction(sqlite_conn) as tx:
            tx.execute('update account set balance = ? where name = ?', 1.5, 'Alice')
            tx.execute('update account set balance = ? where name = ?', 2.5, 'Bob')
            inside = tx.select(Account, f'{SELECT_ACCOUNTS} order by id')

        assert [a.balance for a in inside[:2]] == [Decimal('1.5'), Decimal('2.5')]

        sqlite_conn.rollback()
        accounts = db.select(sqlite_conn, Account, f'{SELECT_ACCOUNTS} order by id')
        assert [a.balance for a in accounts[:2]] == [Decimal('1.5'), Decimal('2.5')]

    def test_rollback_on_error(self, sqlite_conn):
        names = []
        with pytest.raises(ValueError, match='abort'):
            with Transaction(sqlite_conn) as tx:
                tx.execute('delete from account where id = ?', 1)
                tx.insert_record('account', Account(id=9, name='Zed'))
                tx.for_each_row('select name from account order by id', lambda row: names.append(row.name))
                raise ValueError('abort')

        assert names == ['Bob', 'Charlie', 'Zed']
        accounts = db.select(sqlite_conn, Account, f'{SELECT_ACCOUNTS} order by id')
        assert [a.name for a in accounts] == ['Alice', 'Bob', 'Charlie']

    def test_select_into_sees_uncommitted(self, sqlite_conn):
        with Transaction(sqlite_conn) as tx:
            tx.execute('delete from account where id = ?', 3)
            assert tx.select_into(Count(), 'select count(*) as n from account').n == 2

    def test_execute_outside_commits(self, sqlite_conn):
        with Transaction(sqlite_conn):
            pass
        db.delete(sqlite_conn, 'delete from account where id = ?', 3)

        sqlite_conn.rollback()
        assert db.select_into(sqlite_conn, Count(), 'select count(*) as n from account').n == 2


class TestConnection:

    def test_statistics(self, sqlite_conn):
        before = sqlite_conn.calls
        db.select(sqlite_conn, Account, SELECT_ACCOUNTS)
        assert sqlite_conn.calls == before + 1

    def test_context_manager(self):
        with db.connect({'drivername': 'sqlite', 'database': ':memory:'}) as cn:
            assert db.select(cn, Count, 'select 1 as n')[0].n == 1
        assert cn.closed


if __name__ == '__main__':
    __import__('pytest').main([__file__])
