"""
DB connection helpers for external DataSources.

Uses psycopg (PostgreSQL), pymysql (MySQL), trino (Trino) or sqlite3 (SQLite)
based on product_type. Also normalises the per-driver differences for
autocommit, isolation level and statement timeouts.
"""

import logging
import sqlite3
from typing import Any

import psycopg
import pymysql
from trino.auth import BasicAuthentication
from trino.dbapi import connect as trino_connect

from dbmapper.core.config import settings
from dbmapper.models import IsolationLevel, ProductTypeEnum

_log = logging.getLogger(__name__)

_DEFAULT_PORTS = {
    ProductTypeEnum.POSTGRES: 5432,
    ProductTypeEnum.MYSQL: 3306,
    ProductTypeEnum.TRINO: 8080,
}

_PSYCOPG_ISOLATION = {
    IsolationLevel.READ_UNCOMMITTED: psycopg.IsolationLevel.READ_UNCOMMITTED,
    IsolationLevel.READ_COMMITTED: psycopg.IsolationLevel.READ_COMMITTED,
    IsolationLevel.REPEATABLE_READ: psycopg.IsolationLevel.REPEATABLE_READ,
    IsolationLevel.SERIALIZABLE: psycopg.IsolationLevel.SERIALIZABLE,
}


def _get(datasource: Any, key: str) -> Any:
    """Get attribute or dict key from DataSource, dict, or Pydantic model."""
    if isinstance(datasource, dict):
        return datasource.get(key)
    return getattr(datasource, key, None)


def resolve_product_type(
    datasource: Any, product_type: ProductTypeEnum | None = None
) -> ProductTypeEnum:
    pt = product_type or _get(datasource, "product_type")
    if pt is None:
        raise ValueError("product_type is required (from datasource or argument)")
    if isinstance(pt, str):
        return ProductTypeEnum(pt)
    return pt


def connect(
    datasource: Any,
    *,
    product_type: ProductTypeEnum | None = None,
) -> Any:
    """
    Open a connection to an external DB from a DataSource or connection dict.

    - datasource: DataSource model or dict with host, port, database, username,
      password and product_type. SQLite only needs database (file path or ":memory:").
    - product_type: override when datasource is a dict without product_type.
    """
    pt = resolve_product_type(datasource, product_type)
    database = _get(datasource, "database")
    if database is None:
        raise ValueError("datasource must provide database")
    timeout = settings.EXTERNAL_DB_CONNECT_TIMEOUT

    if pt == ProductTypeEnum.SQLITE:
        return sqlite3.connect(database, timeout=timeout)

    host = _get(datasource, "host")
    port = _get(datasource, "port") or _DEFAULT_PORTS[pt]
    username = _get(datasource, "username")
    password = _get(datasource, "password")
    for name, val in [("host", host), ("username", username)]:
        if val is None:
            raise ValueError(f"datasource must provide {name}")
    password = password if password is not None else ""

    if pt == ProductTypeEnum.POSTGRES:
        return psycopg.connect(
            host=host,
            port=int(port),
            dbname=database,
            user=username,
            password=password,
            connect_timeout=timeout,
        )
    if pt == ProductTypeEnum.MYSQL:
        return pymysql.connect(
            host=host,
            port=int(port),
            database=database,
            user=username,
            password=password,
            connect_timeout=timeout,
        )
    if pt == ProductTypeEnum.TRINO:
        use_ssl = _get(datasource, "use_ssl") in (True, "true", "1")
        if use_ssl and not (password and password.strip()):
            raise ValueError("Password is required for Trino when using SSL/HTTPS.")
        return trino_connect(
            host=host,
            port=int(port),
            user=username,
            auth=BasicAuthentication(username, password) if use_ssl else None,
            catalog=database,
            schema="default",
            source="dbmapper",
            http_scheme="https" if use_ssl else "http",
            request_timeout=timeout,
        )
    raise ValueError(f"Unsupported product_type: {pt}")


def set_autocommit(conn: Any, value: bool, product_type: ProductTypeEnum) -> None:
    """Switch driver autocommit. Trino connections are left as opened."""
    if product_type == ProductTypeEnum.POSTGRES:
        conn.autocommit = value
    elif product_type == ProductTypeEnum.MYSQL:
        conn.autocommit(value)
    elif product_type == ProductTypeEnum.SQLITE:
        # sqlite3: isolation_level None means autocommit mode
        conn.isolation_level = None if value else ""
    else:
        _log.debug("set_autocommit not supported for %s; ignored", product_type.value)


def get_autocommit(conn: Any, product_type: ProductTypeEnum) -> bool | None:
    """Current driver autocommit, or None when the driver does not expose it."""
    if product_type == ProductTypeEnum.POSTGRES:
        return bool(conn.autocommit)
    if product_type == ProductTypeEnum.MYSQL:
        return bool(conn.get_autocommit())
    if product_type == ProductTypeEnum.SQLITE:
        return conn.isolation_level is None
    return None


def set_isolation_level(conn: Any, level: IsolationLevel, product_type: ProductTypeEnum) -> None:
    """Apply *level* for the next transaction on *conn*. NONE keeps the driver default."""
    if level == IsolationLevel.NONE:
        return
    if product_type == ProductTypeEnum.POSTGRES:
        conn.isolation_level = _PSYCOPG_ISOLATION[level]
        return
    if product_type == ProductTypeEnum.MYSQL:
        cur = conn.cursor()
        try:
            cur.execute(f"SET SESSION TRANSACTION ISOLATION LEVEL {level.value}")
        finally:
            cur.close()
        return
    _log.warning(
        "Isolation level %s not supported for %s; using driver default",
        level.value,
        product_type.value,
    )


def get_isolation_level(conn: Any, product_type: ProductTypeEnum) -> Any:
    """
    Session isolation setting in the driver's own form, for restore_isolation_level.

    psycopg: the ``isolation_level`` attribute (None = server default).
    MySQL: ``@@SESSION.transaction_isolation`` such as ``"REPEATABLE-READ"``.
    Other products: None.
    """
    if product_type == ProductTypeEnum.POSTGRES:
        return conn.isolation_level
    if product_type == ProductTypeEnum.MYSQL:
        cur = conn.cursor()
        try:
            cur.execute("SELECT @@SESSION.transaction_isolation")
            row = cur.fetchone()
        finally:
            cur.close()
        return row[0] if row else None
    return None


def restore_isolation_level(conn: Any, previous: Any, product_type: ProductTypeEnum) -> None:
    """Put back a setting read by get_isolation_level."""
    if product_type == ProductTypeEnum.POSTGRES:
        conn.isolation_level = previous
    elif product_type == ProductTypeEnum.MYSQL and previous:
        level = str(previous).replace("-", " ").upper()
        cur = conn.cursor()
        try:
            cur.execute(f"SET SESSION TRANSACTION ISOLATION LEVEL {IsolationLevel(level).value}")
        finally:
            cur.close()


def _set_statement_timeout(conn: Any, timeout_sec: int, product_type: ProductTypeEnum) -> None:
    timeout_ms = int(timeout_sec * 1000)
    cur = conn.cursor()
    try:
        if product_type == ProductTypeEnum.POSTGRES:
            cur.execute("SET statement_timeout = %s", (str(timeout_ms),))
        elif product_type == ProductTypeEnum.MYSQL:
            cur.execute("SET SESSION max_execution_time = %s", (timeout_ms,))
        elif product_type == ProductTypeEnum.TRINO:
            cur.execute("SET SESSION query_max_execution_time = '%ss'" % int(timeout_sec))
    finally:
        try:
            cur.close()
        except Exception:
            pass


def _reset_statement_timeout(conn: Any, product_type: ProductTypeEnum) -> None:
    try:
        cur = conn.cursor()
        if product_type == ProductTypeEnum.POSTGRES:
            cur.execute("SET statement_timeout = 0")
        elif product_type == ProductTypeEnum.MYSQL:
            cur.execute("SET SESSION max_execution_time = 0")
        elif product_type == ProductTypeEnum.TRINO:
            cur.execute("SET SESSION query_max_execution_time = '0s'")
        cur.close()
    except Exception as e:
        _log.warning("Resetting statement timeout failed: %s", e)


def execute(
    conn: Any,
    sql: str,
    params: dict | list | tuple | None = None,
    *,
    product_type: ProductTypeEnum | None = None,
    timeout: int | None = None,
) -> Any:
    """
    Execute SQL and return the cursor. Caller uses cursor_to_dicts(cursor) or cursor.rowcount.

    - timeout: seconds for this statement; falls back to EXTERNAL_DB_STATEMENT_TIMEOUT.
      Applied before the query and reset after (Postgres: statement_timeout,
      MySQL: max_execution_time, Trino: query_max_execution_time). SQLite has none.
    """
    timeout_sec = timeout if timeout is not None else settings.EXTERNAL_DB_STATEMENT_TIMEOUT
    use_timeout = (
        timeout_sec is not None
        and timeout_sec > 0
        and product_type is not None
        and product_type != ProductTypeEnum.SQLITE
    )

    if use_timeout:
        _set_statement_timeout(conn, timeout_sec, product_type)

    cur = conn.cursor()
    try:
        if params is not None:
            cur.execute(sql, params)
        else:
            cur.execute(sql)
    finally:
        if use_timeout:
            _reset_statement_timeout(conn, product_type)

    return cur


def cursor_to_dicts(cursor: Any) -> list[dict[str, Any]]:
    """Convert cursor result to list of dicts. Works for psycopg, pymysql, trino and sqlite3."""
    desc = cursor.description
    if not desc:
        return []
    names = [d[0] for d in desc]
    return [dict(zip(names, row, strict=True)) for row in cursor.fetchall()]
