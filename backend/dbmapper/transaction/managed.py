"""
ManagedTransaction: boundaries are owned by someone else.

commit and rollback are ignored (the surrounding container decides), and the
connection is only closed when close_connection is set.
"""

import logging
from typing import Any

from dbmapper.core.pool import connect
from dbmapper.models import DataSource

from .base import BaseTransaction

_log = logging.getLogger(__name__)


class ManagedTransaction(BaseTransaction):
    def __init__(
        self,
        connection: Any = None,
        *,
        datasource: DataSource | None = None,
        close_connection: bool = True,
        timeout: int | None = None,
    ) -> None:
        if connection is None and datasource is None:
            raise ValueError("ManagedTransaction needs a connection or a datasource")
        super().__init__(timeout=timeout)
        self._given = connection
        self._datasource = datasource
        self._close_connection = close_connection

    def _open_connection(self) -> Any:
        if self._given is not None:
            return self._given
        return connect(self._datasource)

    def _commit(self, conn: Any) -> None:
        _log.debug("Managed transaction: commit left to the owner of %r", conn)

    def _rollback(self, conn: Any) -> None:
        _log.debug("Managed transaction: rollback left to the owner of %r", conn)

    def _close(self, conn: Any) -> None:
        if self._close_connection:
            conn.close()
