"""
DataSourceTransaction: a transaction that owns its connection.

The connection is taken lazily from the PoolManager (or opened directly when
pooling is off), configured for autocommit and isolation level, and given
back on close. Session settings changed on a pooled connection are put back
before it returns to the pool. commit/rollback go to the driver unless autocommit is on.
"""

import logging
from typing import Any

from dbmapper.core.config import settings
from dbmapper.core.pool import (
    PoolManager,
    connect,
    get_autocommit,
    get_isolation_level,
    get_pool_manager,
    restore_isolation_level,
    set_autocommit,
    set_isolation_level,
)
from dbmapper.models import DataSource, IsolationLevel

from .base import BaseTransaction

_log = logging.getLogger(__name__)


class DataSourceTransaction(BaseTransaction):
    """
    Transaction on a connection acquired from *datasource*.

    - autocommit: defaults to TRANSACTION_AUTOCOMMIT.
    - timeout: seconds, defaults to TRANSACTION_TIMEOUT; applied per statement by the executor.
    - use_pool: defaults to ``not datasource.close_connection_after_execute``.
    """

    def __init__(
        self,
        datasource: DataSource,
        *,
        isolation_level: IsolationLevel | None = None,
        autocommit: bool | None = None,
        timeout: int | None = None,
        use_pool: bool | None = None,
        pool_manager: PoolManager | None = None,
    ) -> None:
        super().__init__(timeout=timeout if timeout is not None else settings.TRANSACTION_TIMEOUT)
        self._datasource = datasource
        self._isolation_level = isolation_level or IsolationLevel.NONE
        self._autocommit = settings.TRANSACTION_AUTOCOMMIT if autocommit is None else autocommit
        self._use_pool = (
            not datasource.close_connection_after_execute if use_pool is None else use_pool
        )
        self._pool_manager = pool_manager
        self._restore_autocommit: bool | None = None
        self._isolation_changed = False
        self._restore_isolation: Any = None

    @property
    def datasource(self) -> DataSource:
        return self._datasource

    @property
    def autocommit(self) -> bool:
        return self._autocommit

    def _pool(self) -> PoolManager:
        if self._pool_manager is None:
            self._pool_manager = get_pool_manager()
        return self._pool_manager

    def _open_connection(self) -> Any:
        ds = self._datasource
        conn = self._pool().get_connection(ds) if self._use_pool else connect(ds)
        try:
            current = get_autocommit(conn, ds.product_type)
            if current is not None and current != self._autocommit:
                set_autocommit(conn, self._autocommit, ds.product_type)
                self._restore_autocommit = current
            if self._isolation_level is not IsolationLevel.NONE:
                self._restore_isolation = get_isolation_level(conn, ds.product_type)
                self._isolation_changed = True
                set_isolation_level(conn, self._isolation_level, ds.product_type)
        except Exception:
            self._discard(conn)
            raise
        return conn

    def _commit(self, conn: Any) -> None:
        if self._autocommit:
            return
        _log.debug("Committing connection %r", conn)
        conn.commit()

    def _rollback(self, conn: Any) -> None:
        if self._autocommit:
            return
        _log.debug("Rolling back connection %r", conn)
        conn.rollback()

    def _close(self, conn: Any) -> None:
        if not self._use_pool:
            conn.close()
        elif self._reset_session(conn):
            self._pool().release(conn, self._datasource.id)
        else:
            self._pool().discard(conn)
        self._forget_session_changes()

    def _reset_session(self, conn: Any) -> bool:
        """Undo the autocommit and isolation changes; False when the connection is left dirty."""
        if self._restore_autocommit is None and not self._isolation_changed:
            return True
        product_type = self._datasource.product_type
        try:
            # drivers refuse session changes inside an open transaction
            conn.rollback()
            if self._isolation_changed:
                restore_isolation_level(conn, self._restore_isolation, product_type)
            if self._restore_autocommit is not None:
                set_autocommit(conn, self._restore_autocommit, product_type)
        except Exception as e:
            _log.warning("Resetting session settings failed, dropping connection: %s", e)
            return False
        return True

    def _discard(self, conn: Any) -> None:
        self._forget_session_changes()
        if self._use_pool:
            self._pool().discard(conn)
            return
        try:
            conn.close()
        except Exception as e:
            _log.warning("Closing half-configured connection failed: %s", e)

    def _forget_session_changes(self) -> None:
        self._restore_autocommit = None
        self._isolation_changed = False
        self._restore_isolation = None
