"""
SQL template engine with Jinja2: renders a template into a BoundSql.

Values are never inlined into the SQL text. Every ``{{ }}`` output becomes a
positional ``?`` placeholder with a matching ParameterMapping, in output
order:

- ``{{ value }}`` binds the value under a synthetic additional parameter
  (``__bind_0``, ``__bind_1``, ...).
- ``{{ param('user.name') }}`` binds a property path of the caller's
  parameter object; it is resolved at execution time.
- ``{{ bind(item, 'item') }}`` binds under a chosen prefix (``__item_0``),
  handy inside ``{% for %}`` loops.
- ``{{ ids | in_list }}`` binds each element: ``(?, ?, ?)``.
- ``{{ name | raw }}`` emits trusted text verbatim (identifiers, sort order).

Undefined variables fail the render (StrictUndefined).
"""

import logging
from typing import Any

from jinja2 import (
    Environment,
    StrictUndefined,
    TemplateError,
    TemplateSyntaxError,
    Undefined,
    UndefinedError,
    pass_context,
)
from jinja2.runtime import Context

from dbmapper.engines.sql.extensions import SQL_EXTENSIONS
from dbmapper.mapping import BoundSql, ParameterMapping
from dbmapper.reflection import parse_property_path

_log = logging.getLogger(__name__)

PLACEHOLDER = "?"

_BINDER_KEY = "__dbmapper_binder__"

_EMPTY_IN_LIST = "(SELECT 1 WHERE 1=0)"

_SQL_ENV: Environment | None = None


class SqlText(str):
    """String subclass marking trusted SQL text that is emitted as-is."""


class _Binder:
    """Collects mappings and synthetic values for one render, in output order."""

    def __init__(self) -> None:
        self.mappings: list[ParameterMapping] = []
        self.values: dict[str, Any] = {}
        self._counter = 0

    def param(self, path: str, data_type: str | None = None) -> SqlText:
        parse_property_path(path)
        self.mappings.append(ParameterMapping(path, data_type))
        return SqlText(PLACEHOLDER)

    def bind(self, value: Any, name: str = "bind", data_type: str | None = None) -> SqlText:
        if isinstance(value, Undefined):
            value._fail_with_undefined_error()
        if not name.isidentifier():
            raise ValueError(f"bind() name must be an identifier, got {name!r}")
        key = f"__{name}_{self._counter}"
        self._counter += 1
        self.values[key] = value
        self.mappings.append(ParameterMapping(key, data_type))
        return SqlText(PLACEHOLDER)


def _binder(context: Context) -> _Binder:
    return context[_BINDER_KEY]


@pass_context
def _bind_output(context: Context, value: Any) -> str:
    """Jinja2 ``finalize``: bind every output that is not already SqlText."""
    if isinstance(value, SqlText):
        return value
    return _binder(context).bind(value)


@pass_context
def _param(context: Context, path: str, data_type: str | None = None) -> SqlText:
    return _binder(context).param(path, data_type)


@pass_context
def _bind(context: Context, value: Any, name: str = "bind", data_type: str | None = None) -> SqlText:
    return _binder(context).bind(value, name, data_type)


@pass_context
def _in_list(context: Context, value: Any, data_type: str | None = None) -> SqlText:
    if value is None:
        return SqlText(_EMPTY_IN_LIST)
    try:
        items = list(value)
    except TypeError as e:
        raise ValueError(f"in_list expects an iterable, got {type(value).__name__}") from e
    if not items:
        return SqlText(_EMPTY_IN_LIST)
    binder = _binder(context)
    marks = [binder.bind(v, "item", data_type) for v in items]
    return SqlText("(" + ", ".join(marks) + ")")


def _raw(value: Any) -> SqlText:
    return SqlText("" if value is None else str(value))


def _get_sql_env() -> Environment:
    """Return the shared Jinja2 Environment for SQL (binding finalize, filters, tags)."""
    global _SQL_ENV
    if _SQL_ENV is None:
        env = Environment(
            autoescape=False,
            extensions=SQL_EXTENSIONS,
            finalize=_bind_output,
            undefined=StrictUndefined,
        )
        env.globals.update(param=_param, bind=_bind)
        env.filters.update(in_list=_in_list, raw=_raw)
        _SQL_ENV = env
    return _SQL_ENV


def _preview(template: str) -> str:
    return template[:500] + "..." if len(template) > 500 else template


class SQLTemplateEngine:
    """Renders Jinja2 SQL templates into BoundSql."""

    def render(
        self,
        template: str,
        params: dict[str, Any],
        *,
        parameter_object: Any = None,
    ) -> BoundSql:
        """
        Render *template* with *params*.

        parameter_object is what ``param()`` paths resolve against; defaults to *params*.
        """
        env = _get_sql_env()
        binder = _Binder()
        try:
            t = env.from_string(template)
            sql = t.render({**params, _BINDER_KEY: binder})
        except TemplateSyntaxError as e:
            raise ValueError(
                f"SQL template syntax error: {e}. "
                f"Params: {list(params.keys())}. Template preview:\n{_preview(template)}"
            ) from e
        except UndefinedError as e:
            raise ValueError(
                f"SQL template variable not found: {e}. "
                f"Available params: {list(params.keys())}."
            ) from e
        except TemplateError as e:
            raise ValueError(
                f"SQL template render error: {e}. "
                f"Params: {list(params.keys())}. Template preview:\n{_preview(template)}"
            ) from e

        bound = BoundSql(
            sql.strip(),
            binder.mappings,
            params if parameter_object is None else parameter_object,
        )
        for key, value in binder.values.items():
            bound.set_additional_parameter(key, value)
        _log.debug("Rendered SQL: %s (%d parameter(s))", bound.sql, len(bound.parameter_mappings))
        return bound
