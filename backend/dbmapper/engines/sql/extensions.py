"""
Clause tags for the SQL template engine.

{% where %}...{% endwhere %}            -> "WHERE <conditions>", leading AND/OR dropped
{% set_clause %}...{% endset_clause %}  -> "SET <assignments>", trailing comma dropped

Both render nothing when every condition/assignment inside was skipped, so
optional filters and partial updates need no bookkeeping in the template.
"""

import re
from typing import Callable

from jinja2 import nodes
from jinja2.ext import Extension

_LEADING_CONNECTIVE = re.compile(r"^(?:AND|OR)\s+", re.IGNORECASE)


class _ClauseExtension(Extension):
    """Block tag whose body is trimmed by ``_trim`` and prefixed by ``keyword``."""

    keyword = ""

    def parse(self, parser) -> nodes.CallBlock:
        tag = next(parser.stream)
        body = parser.parse_statements((f"name:end{tag.value}",), drop_needle=True)
        call = self.call_method("_render_clause", [], [], [])
        return nodes.CallBlock(call, [], [], body).set_lineno(tag.lineno)

    def _render_clause(self, caller: Callable[[], str]) -> str:
        body = caller()
        text = self._trim(body.strip()) if isinstance(body, str) else ""
        return f"{self.keyword} {text}" if text else ""

    def _trim(self, text: str) -> str:
        return text


class WhereExtension(_ClauseExtension):
    tags = {"where"}
    keyword = "WHERE"

    def _trim(self, text: str) -> str:
        return _LEADING_CONNECTIVE.sub("", text).strip()


class SetClauseExtension(_ClauseExtension):
    tags = {"set_clause"}
    keyword = "SET"

    def _trim(self, text: str) -> str:
        return text.rstrip(",").strip()


SQL_EXTENSIONS: list[type[Extension]] = [WhereExtension, SetClauseExtension]
