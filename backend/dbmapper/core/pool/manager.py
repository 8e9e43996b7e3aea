"""
Idle-connection pool keyed by DataSource id.

A connection is lent to one transaction at a time. Every connection that
comes back is rolled back before it is kept; connections older than the
configured max age are dropped on the next checkout, and connections idle
for a while are pinged before they are lent again.
"""

import logging
import threading
import time
import uuid
from typing import Any, NamedTuple

from dbmapper.core.config import settings
from dbmapper.models import DataSource, ProductTypeEnum

from .connect import connect, resolve_product_type
from .health import health_check

_log = logging.getLogger(__name__)

_PING_AFTER_IDLE_SEC = 30.0


class _Idle(NamedTuple):
    conn: Any
    opened_at: float
    returned_at: float


class PoolManager:
    """Keeps up to ``pool_size`` idle connections per datasource."""

    def __init__(self, pool_size: int | None = None, max_age_sec: float | None = None) -> None:
        self._idle: dict[uuid.UUID, list[_Idle]] = {}
        self._opened_at: dict[int, float] = {}
        self._lock = threading.Lock()
        self._pool_size = settings.EXTERNAL_DB_POOL_SIZE if pool_size is None else pool_size
        self._max_age = float(
            settings.EXTERNAL_DB_POOL_MAX_AGE_SEC if max_age_sec is None else max_age_sec
        )

    def get_connection(self, datasource: DataSource) -> Any:
        """Lend a connection for *datasource*: a reusable idle one, else a new one."""
        product_type = resolve_product_type(datasource)
        while True:
            idle = self._take_idle(datasource.id)
            if idle is None:
                break
            if self._reusable(idle, product_type):
                return idle.conn
            self.discard(idle.conn)

        conn = connect(datasource)
        with self._lock:
            self._opened_at[id(conn)] = time.monotonic()
        _log.debug("Opened new connection for datasource %s", datasource.id)
        return conn

    def release(self, conn: Any, datasource_id: uuid.UUID) -> None:
        """Take *conn* back; it is closed instead when broken or the pool is full."""
        try:
            conn.rollback()
        except Exception as e:
            _log.warning("Rollback on release failed, closing connection: %s", e)
            self.discard(conn)
            return

        now = time.monotonic()
        with self._lock:
            idle = self._idle.setdefault(datasource_id, [])
            kept = len(idle) < self._pool_size
            if kept:
                idle.append(_Idle(conn, self._opened_at.get(id(conn), now), now))
        if not kept:
            self.discard(conn)

    def discard(self, conn: Any) -> None:
        """Close a lent connection that must not be pooled again and forget it."""
        with self._lock:
            self._opened_at.pop(id(conn), None)
        try:
            conn.close()
        except Exception as e:
            _log.warning("Closing pooled connection failed: %s", e)

    def dispose(self, datasource_id: uuid.UUID | None = None) -> None:
        """Close idle connections of one datasource, or of all when *datasource_id* is None."""
        with self._lock:
            if datasource_id is None:
                dropped = [i for idle in self._idle.values() for i in idle]
                self._idle.clear()
            else:
                dropped = self._idle.pop(datasource_id, [])
        for idle in dropped:
            self.discard(idle.conn)

    def stats(self) -> dict[str, int]:
        with self._lock:
            return {
                "datasources": len(self._idle),
                "idle_connections": sum(len(i) for i in self._idle.values()),
            }

    def _take_idle(self, datasource_id: uuid.UUID) -> _Idle | None:
        with self._lock:
            idle = self._idle.get(datasource_id)
            return idle.pop() if idle else None

    def _reusable(self, idle: _Idle, product_type: ProductTypeEnum) -> bool:
        now = time.monotonic()
        if now - idle.opened_at > self._max_age:
            _log.debug("Dropping connection past max age (%.0fs)", self._max_age)
            return False
        if now - idle.returned_at > _PING_AFTER_IDLE_SEC and not health_check(idle.conn, product_type):
            _log.debug("Dropping idle connection that failed its health check")
            return False
        try:
            idle.conn.rollback()
        except Exception as e:
            _log.debug("Dropping idle connection whose rollback failed: %s", e)
            return False
        return True


_pool_manager: PoolManager | None = None
_pool_lock = threading.Lock()


def get_pool_manager() -> PoolManager:
    """Process-wide PoolManager, created on first use."""
    global _pool_manager
    if _pool_manager is None:
        with _pool_lock:
            if _pool_manager is None:
                _pool_manager = PoolManager()
    return _pool_manager
