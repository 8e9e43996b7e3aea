"""
Engines: SQL templates (Jinja2) and StatementExecutor.
"""

from dbmapper.engines.executor import StatementExecutor
from dbmapper.engines.sql import SQLTemplateEngine, execute_bound_sql, to_paramstyle

__all__ = [
    "StatementExecutor",
    "SQLTemplateEngine",
    "execute_bound_sql",
    "to_paramstyle",
]
