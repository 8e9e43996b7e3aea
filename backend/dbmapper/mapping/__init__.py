"""
Bound statements: BoundSql, ParameterMapping and parameter value resolution.
"""

from .bound_sql import BoundSql
from .parameter_mapping import ParameterMapping
from .parameters import resolve_parameter_values

__all__ = [
    "BoundSql",
    "ParameterMapping",
    "resolve_parameter_values",
]
