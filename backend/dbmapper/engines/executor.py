"""
StatementExecutor: render -> open transaction -> execute -> commit/rollback -> close.

Driver errors raised while the statement runs are logged and surfaced as
ValueError("SQL execution failed: ..."). ResourceError (connection
lifecycle) and ValueError subclasses such as ResolutionError and
ParamTypeError propagate unchanged.
"""

import logging
import sqlite3
from typing import Any

import psycopg
import pymysql
from trino.exceptions import TrinoExternalError, TrinoUserError

from dbmapper.engines.sql import SQLTemplateEngine, execute_bound_sql
from dbmapper.mapping import BoundSql
from dbmapper.models import DataSource
from dbmapper.transaction import (
    DataSourceTransaction,
    ResourceError,
    Transaction,
    transaction_scope,
)

_log = logging.getLogger(__name__)


class StatementExecutor:
    """
    execute(template, params, *, datasource) -> {"data": rows | rowcount}
    execute_bound(bound_sql, *, datasource) -> {"data": rows | rowcount}
    """

    def __init__(self, template_engine: SQLTemplateEngine | None = None) -> None:
        self._engine = template_engine or SQLTemplateEngine()

    def execute(
        self,
        template: str,
        params: dict[str, Any] | None = None,
        *,
        datasource: DataSource,
        parameter_object: Any = None,
        transaction: Transaction | None = None,
    ) -> dict[str, Any]:
        """Render *template* with *params* and run it in its own transaction scope."""
        self._check_active(datasource)
        bound_sql = self._engine.render(template, params or {}, parameter_object=parameter_object)
        return self.execute_bound(bound_sql, datasource=datasource, transaction=transaction)

    def execute_bound(
        self,
        bound_sql: BoundSql,
        *,
        datasource: DataSource,
        transaction: Transaction | None = None,
    ) -> dict[str, Any]:
        """
        Run an already built BoundSql. *transaction* defaults to a new
        DataSourceTransaction; it is committed on success, rolled back on
        error and closed either way.
        """
        self._check_active(datasource)
        tx = transaction or DataSourceTransaction(datasource)
        with transaction_scope(tx):
            out = self._run(tx, bound_sql, datasource)
        return {"data": out}

    @staticmethod
    def _check_active(datasource: DataSource) -> None:
        if not datasource.is_active:
            raise ValueError("DataSource is inactive and cannot be used")

    @staticmethod
    def _run(tx: Transaction, bound_sql: BoundSql, datasource: DataSource) -> Any:
        sql = bound_sql.sql
        try:
            return execute_bound_sql(tx, bound_sql, product_type=datasource.product_type)
        except (ResourceError, ValueError):
            raise
        except psycopg.errors.QueryCanceled as e:
            _log.warning("SQL query timed out: %s", e)
            raise ValueError("SQL query timed out (statement_timeout)") from e
        except psycopg.Error as e:
            _log.error("PostgreSQL error: %s. SQL: %s", e, sql, exc_info=True)
            raise ValueError(f"SQL execution failed: {e}") from e
        except pymysql.err.ProgrammingError as e:
            _log.warning("MySQL programming error: %s", e)
            raise ValueError(f"SQL error: {e}") from e
        except pymysql.Error as e:
            _log.error("MySQL error: %s. SQL: %s", e, sql, exc_info=True)
            raise ValueError(f"SQL execution failed: {e}") from e
        except (TrinoUserError, TrinoExternalError) as e:
            _log.error("Trino error: %s. SQL: %s", e, sql, exc_info=True)
            raise ValueError(f"SQL execution failed: {e}") from e
        except sqlite3.Error as e:
            _log.error("SQLite error: %s. SQL: %s", e, sql, exc_info=True)
            raise ValueError(f"SQL execution failed: {e}") from e
        except Exception as e:
            _log.error("SQL execution failed: %s. SQL: %s", e, sql, exc_info=True)
            raise ValueError(f"SQL execution failed: {e}") from e
