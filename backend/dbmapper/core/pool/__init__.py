"""
DB connections and connection pool for external DataSources.

No driver layer: psycopg, pymysql and trino are installed via pip (sqlite3 is
stdlib); a DataSource (product_type, host, ...) is enough.
"""

from .connect import (
    connect,
    cursor_to_dicts,
    execute,
    get_autocommit,
    get_isolation_level,
    resolve_product_type,
    restore_isolation_level,
    set_autocommit,
    set_isolation_level,
)
from .health import health_check
from .manager import PoolManager, get_pool_manager

__all__ = [
    "connect",
    "execute",
    "cursor_to_dicts",
    "get_autocommit",
    "get_isolation_level",
    "resolve_product_type",
    "restore_isolation_level",
    "set_autocommit",
    "set_isolation_level",
    "health_check",
    "PoolManager",
    "get_pool_manager",
]
