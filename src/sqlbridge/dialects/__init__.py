"""
Dialect lookup for the supported backends.
"""
from sqlbridge.dialects.base import Dialect as Dialect
from sqlbridge.dialects.base import PagingStyle as PagingStyle
from sqlbridge.dialects.base import TemporalPolicy as TemporalPolicy
from sqlbridge.dialects.base import get_available_dialects as get_available_dialects
from sqlbridge.dialects.base import get_dialect as get_dialect
from sqlbridge.dialects.base import is_supported_dialect as is_supported_dialect
from sqlbridge.dialects.base import register_dialect as register_dialect
from sqlbridge.dialects.mysql import MYSQL as MYSQL
from sqlbridge.dialects.oracle import ORACLE as ORACLE
from sqlbridge.dialects.oracle import ORACLE11G as ORACLE11G
from sqlbridge.dialects.postgres import POSTGRES as POSTGRES
from sqlbridge.dialects.sqlite import SQLITE as SQLITE
from sqlbridge.dialects.sqlserver import MSSQL as MSSQL
