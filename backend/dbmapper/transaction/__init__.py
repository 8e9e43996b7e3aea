"""
Transactions: the Transaction contract, shared lifecycle, providers and
transaction_scope for scoped acquisition.
"""

from dbmapper.models import IsolationLevel

from .base import BaseTransaction, ResourceError, Transaction, TransactionState, transaction_scope
from .datasource import DataSourceTransaction
from .managed import ManagedTransaction

__all__ = [
    "BaseTransaction",
    "DataSourceTransaction",
    "IsolationLevel",
    "ManagedTransaction",
    "ResourceError",
    "Transaction",
    "TransactionState",
    "transaction_scope",
]
