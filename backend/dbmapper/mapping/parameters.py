"""
Resolve the positional parameter values of a BoundSql.

For each mapping (in order): additional parameters win, then a scalar
parameter object binds as-is, otherwise the path is read from the
parameter object. A path that cannot be resolved raises ResolutionError;
it is never bound as NULL.
"""

import logging
from typing import Any

from dbmapper.core.param_type import coerce_value
from dbmapper.mapping.bound_sql import BoundSql
from dbmapper.reflection import MetaObject, ResolutionError, ValueKind, kind_of

_log = logging.getLogger(__name__)


def resolve_parameter_values(bound_sql: BoundSql) -> list[Any]:
    """Return one coerced value per parameter mapping, in placeholder order."""
    parameter_object = bound_sql.parameter_object
    meta_object: MetaObject | None = None
    values: list[Any] = []

    for mapping in bound_sql.parameter_mappings:
        path = mapping.property
        if bound_sql.has_additional_parameter(path):
            value = bound_sql.get_additional_parameter(path)
        elif parameter_object is None:
            raise ResolutionError(
                f"Cannot resolve parameter {path!r}: no parameter object and no additional parameter",
                path,
            )
        elif kind_of(parameter_object) is ValueKind.SCALAR:
            value = parameter_object
        else:
            if meta_object is None:
                meta_object = MetaObject(parameter_object)
            value = meta_object.get_value(path)
        values.append(coerce_value(value, mapping.data_type, mapping.numeric_scale))

    _log.debug("Resolved %d parameter value(s)", len(values))
    return values
