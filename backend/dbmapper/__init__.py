"""
dbmapper: bound SQL statements and transactional resources.

Exports the two seams used by callers: BoundSql (rendered SQL + ordered
parameter mappings + additional parameters) and the Transaction contract.
"""

from dbmapper.mapping import BoundSql, ParameterMapping
from dbmapper.reflection import ResolutionError
from dbmapper.transaction import ResourceError, Transaction, transaction_scope

__all__ = [
    "BoundSql",
    "ParameterMapping",
    "ResolutionError",
    "ResourceError",
    "Transaction",
    "transaction_scope",
]
