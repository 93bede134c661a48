from dataclasses import dataclass

from sqlbridge.dialects import Dialect, get_dialect

from libb import ConfigOptions, scriptname

__all__ = ['DatabaseOptions']


@dataclass
class DatabaseOptions(ConfigOptions):
    """Options

    supported driver names: `postgresql` (`postgres`), `mysql` (`mariadb`),
    `mssql` (`sqlserver`), `oracle` (`oci8`), `oracle11g`, `sqlite`
    (`sqlite3`)

    plan_cache_size: binding plans kept per scanner (default: 128)
    """
    drivername: str = 'postgresql'
    hostname: str = None
    username: str = None
    password: str = None
    database: str = None
    port: int = 0
    timeout: int = 0
    appname: str = None
    plan_cache_size: int = 128

    def __post_init__(self):
        dialect = get_dialect(self.drivername)
        self.appname = self.appname or scriptname() or 'python_console'
        for field in dialect.required_options:
            if not getattr(self, field):
                raise ValueError(f'field {field} cannot be None or 0')

    @property
    def dialect(self) -> Dialect:
        return get_dialect(self.drivername)
