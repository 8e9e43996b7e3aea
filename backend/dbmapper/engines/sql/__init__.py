"""
SQL engine: Jinja2 templates rendered into BoundSql, and BoundSql execution.

Exports: SQLTemplateEngine, execute_bound_sql, to_paramstyle.
"""

from dbmapper.engines.sql.executor import execute_bound_sql, to_paramstyle
from dbmapper.engines.sql.template_engine import SQLTemplateEngine

__all__ = [
    "SQLTemplateEngine",
    "execute_bound_sql",
    "to_paramstyle",
]
