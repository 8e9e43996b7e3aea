"""Unit tests for transaction.managed.ManagedTransaction."""

from unittest.mock import MagicMock, patch

import pytest

from dbmapper.transaction import ManagedTransaction, ResourceError, Transaction
from tests.utils.datasource import make_datasource


def test_requires_connection_or_datasource() -> None:
    with pytest.raises(ValueError):
        ManagedTransaction()


def test_is_a_transaction() -> None:
    assert isinstance(ManagedTransaction(MagicMock()), Transaction)


def test_commit_and_rollback_left_to_owner() -> None:
    conn = MagicMock()
    tx = ManagedTransaction(conn)
    assert tx.connection() is conn
    tx.commit()
    tx.rollback()
    conn.commit.assert_not_called()
    conn.rollback.assert_not_called()
    tx.close()
    conn.close.assert_called_once()


def test_close_connection_false_keeps_it_open() -> None:
    conn = MagicMock()
    tx = ManagedTransaction(conn, close_connection=False)
    tx.connection()
    tx.close()
    conn.close.assert_not_called()


@patch("dbmapper.transaction.managed.connect")
def test_opens_from_datasource(mock_connect: MagicMock) -> None:
    ds = make_datasource()
    conn = MagicMock()
    mock_connect.return_value = conn
    tx = ManagedTransaction(datasource=ds, timeout=15)
    assert tx.timeout() == 15
    assert tx.connection() is conn
    mock_connect.assert_called_once_with(ds)
    tx.close()


def test_close_failure_is_resource_error() -> None:
    conn = MagicMock()
    conn.close.side_effect = OSError("socket gone")
    tx = ManagedTransaction(conn)
    tx.connection()
    with pytest.raises(ResourceError, match="socket gone"):
        tx.close()


def test_commit_after_close_rejected() -> None:
    tx = ManagedTransaction(MagicMock())
    tx.close()
    with pytest.raises(ResourceError):
        tx.commit()
