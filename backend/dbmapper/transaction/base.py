"""
Transaction contract and shared lifecycle.

A transaction wraps one connection-like resource:

    UNOPENED --connection()--> OPEN --commit()/rollback()--> OPEN
    UNOPENED|OPEN --close()--> CLOSED (terminal)

Providers satisfy the ``Transaction`` protocol; ``BaseTransaction`` gives
them the state machine and error wrapping so every provider behaves the
same way:

- commit/rollback before the connection was acquired are no-ops.
- commit/rollback/connection/timeout after close raise ResourceError.
- close may be called once; a second call raises ResourceError.
- every provider failure surfaces as ResourceError chained to its cause;
  a failed commit/rollback leaves the transaction OPEN so it can be closed.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from enum import Enum
from typing import Any, Protocol, TypeVar, runtime_checkable

_log = logging.getLogger(__name__)

_T = TypeVar("_T")


class ResourceError(RuntimeError):
    """Raised when acquiring, committing, rolling back or closing a resource fails."""

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class TransactionState(str, Enum):
    UNOPENED = "unopened"
    OPEN = "open"
    CLOSED = "closed"


@runtime_checkable
class Transaction(Protocol):
    """Lifecycle of one connection: acquire, commit, rollback, close, timeout."""

    def connection(self) -> Any:
        """Return the underlying connection, acquiring it on first use."""
        ...

    def commit(self) -> None:
        """Make the work since the last commit/rollback durable."""
        ...

    def rollback(self) -> None:
        """Discard the work since the last commit/rollback."""
        ...

    def close(self) -> None:
        """Release the connection. Call exactly once."""
        ...

    def timeout(self) -> int | None:
        """Transaction timeout in seconds, or None when not set."""
        ...


class BaseTransaction(ABC):
    """State machine shared by the transaction providers."""

    def __init__(self, *, timeout: int | None = None) -> None:
        self._conn: Any = None
        self._state = TransactionState.UNOPENED
        self._timeout = timeout

    @property
    def state(self) -> TransactionState:
        return self._state

    def connection(self) -> Any:
        self._check_not_closed("acquire connection")
        if self._state is TransactionState.OPEN:
            return self._conn
        conn = self._call("acquire connection", self._open_connection)
        self._conn = conn
        self._state = TransactionState.OPEN
        _log.debug("%s opened connection %r", type(self).__name__, conn)
        return conn

    def commit(self) -> None:
        self._check_not_closed("commit")
        if self._state is TransactionState.UNOPENED:
            _log.debug("%s commit skipped: no connection acquired", type(self).__name__)
            return
        self._call("commit", self._commit, self._conn)

    def rollback(self) -> None:
        self._check_not_closed("rollback")
        if self._state is TransactionState.UNOPENED:
            _log.debug("%s rollback skipped: no connection acquired", type(self).__name__)
            return
        self._call("rollback", self._rollback, self._conn)

    def close(self) -> None:
        if self._state is TransactionState.CLOSED:
            raise ResourceError(f"{type(self).__name__} is already closed")
        conn = self._conn
        was_open = self._state is TransactionState.OPEN
        self._state = TransactionState.CLOSED
        self._conn = None
        if was_open:
            self._call("close", self._close, conn)
            _log.debug("%s closed connection %r", type(self).__name__, conn)

    def timeout(self) -> int | None:
        self._check_not_closed("query timeout")
        return self._timeout

    def __enter__(self) -> "BaseTransaction":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._state is not TransactionState.CLOSED:
            self.close()

    # ------------------------------------------------------------------
    # Provider hooks
    # ------------------------------------------------------------------

    @abstractmethod
    def _open_connection(self) -> Any:
        ...

    @abstractmethod
    def _commit(self, conn: Any) -> None:
        ...

    @abstractmethod
    def _rollback(self, conn: Any) -> None:
        ...

    @abstractmethod
    def _close(self, conn: Any) -> None:
        ...

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _check_not_closed(self, action: str) -> None:
        if self._state is TransactionState.CLOSED:
            raise ResourceError(f"Cannot {action}: {type(self).__name__} is closed")

    def _call(self, action: str, fn: Callable[..., _T], *args: Any) -> _T:
        try:
            return fn(*args)
        except ResourceError:
            raise
        except Exception as e:
            _log.error("%s %s failed: %s", type(self).__name__, action, e)
            raise ResourceError(f"Failed to {action}: {e}", e) from e


@contextmanager
def transaction_scope(transaction: Transaction) -> Iterator[Transaction]:
    """
    Run a unit of work on *transaction*: commit on success, roll back on any
    error, and close exactly once on every exit path.

    When the work fails, rollback and close failures are logged and the
    original error propagates. After a successful commit a close failure
    is raised.
    """
    try:
        yield transaction
        transaction.commit()
    except BaseException:
        try:
            transaction.rollback()
        except ResourceError as e:
            _log.warning("Rollback after failure did not succeed: %s", e)
        try:
            transaction.close()
        except ResourceError as e:
            _log.warning("Close after failure did not succeed: %s", e)
        raise
    transaction.close()
