import pytest
from sqlbridge.dialects import MSSQL, POSTGRES, SQLITE
from sqlbridge.exceptions import UnsupportedDialect
from sqlbridge.options import DatabaseOptions


def test_init_defaults():
    """Test default initialization"""
    options = DatabaseOptions(
        hostname='testhost',
        username='testuser',
        password='testpass',
        database='testdb',
        port=1234,
        timeout=30
    )

    assert options.drivername == 'postgresql'
    assert options.dialect is POSTGRES
    assert options.appname is not None
    assert options.plan_cache_size == 128


def test_aliases():
    """Test driver name aliases resolve to one dialect"""
    options = DatabaseOptions(drivername='sqlserver', hostname='h', database='d')
    assert options.dialect is MSSQL


def test_validation():
    """Test validation rules"""
    with pytest.raises(UnsupportedDialect):
        DatabaseOptions(
            drivername='invalid',
            hostname='testhost',
            username='testuser',
            password='testpass',
            database='testdb',
            port=1234,
            timeout=30
        )

    with pytest.raises(ValueError, match='field database cannot be None or 0'):
        DatabaseOptions(drivername='postgresql', hostname='testhost')


def test_unsupported_is_value_error():
    with pytest.raises(ValueError):
        DatabaseOptions(drivername='db2', hostname='h', database='d')


def test_sqlite_options():
    """Test SQLite options validation"""
    options = DatabaseOptions(
        drivername='sqlite',
        database='test.db'
    )
    assert options.drivername == 'sqlite'
    assert options.dialect is SQLITE
    assert options.database == 'test.db'

    with pytest.raises(ValueError):
        DatabaseOptions(drivername='sqlite')


if __name__ == '__main__':
    __import__('pytest').main([__file__])
