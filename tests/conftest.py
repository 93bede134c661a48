import pytest
import sqlbridge as db


class FakeCursor:
    """DB-API cursor stand-in serving fixed rows."""

    def __init__(self, columns, rows):
        self.description = [(name, None, None, None, None, None, None) for name in columns]
        self._rows = list(rows)
        self.closed = False

    def fetchone(self):
        if not self._rows:
            return None
        return self._rows.pop(0)

    def close(self):
        self.closed = True


@pytest.fixture
def fake_cursor():
    """Factory for cursors returning the given columns and rows."""
    return FakeCursor


@pytest.fixture
def sqlite_conn():
    """Create an in-memory SQLite database for testing"""
    conn = db.connect({
        'drivername': 'sqlite',
        'database': ':memory:'
    })

    create_table = """
    CREATE TABLE account (
        id INTEGER PRIMARY KEY,
        name TEXT NOT NULL UNIQUE,
        balance REAL,
        created_at TEXT,
        closed_at TEXT
    )
    """
    db.execute(conn, create_table)

    insert_data = """
    INSERT INTO account (id, name, balance, created_at, closed_at) VALUES
    (1, 'Alice', 10.5, '2024-01-15 09:30:00', NULL),
    (2, 'Bob', 20.0, '2024-02-01T12:00:00Z', '2024-03-01 00:00:00'),
    (3, 'Charlie', 30.25, '2024-03-10', NULL)
    """
    db.execute(conn, insert_data)

    yield conn
    conn.close()
