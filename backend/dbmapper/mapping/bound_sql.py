"""
BoundSql: rendered SQL text, its ordered parameter mappings, the caller's
parameter object, and the additional parameters introduced while the SQL
was built (loop items, synthetic binds).

Additional parameters are addressed with the same property-path syntax as
ordinary parameters, so the executor resolves every mapping the same way
whatever its origin.
"""

from collections.abc import Callable, Iterable
from types import MappingProxyType
from typing import Any

from dbmapper.mapping.parameter_mapping import ParameterMapping
from dbmapper.reflection import MetaObject, root_property_name


class BoundSql:
    def __init__(
        self,
        sql: str,
        parameter_mappings: Iterable[ParameterMapping],
        parameter_object: Any,
        *,
        meta_object_factory: Callable[[Any], MetaObject] = MetaObject,
    ) -> None:
        self._sql = sql
        self._parameter_mappings = tuple(parameter_mappings)
        self._parameter_object = parameter_object
        self._additional_parameters: dict[str, Any] = {}
        self._meta_parameters = meta_object_factory(self._additional_parameters)

    @property
    def sql(self) -> str:
        return self._sql

    @property
    def parameter_mappings(self) -> tuple[ParameterMapping, ...]:
        return self._parameter_mappings

    @property
    def parameter_object(self) -> Any:
        return self._parameter_object

    @property
    def additional_parameters(self) -> MappingProxyType:
        """Read-only view of the additional parameters."""
        return MappingProxyType(self._additional_parameters)

    def has_additional_parameter(self, name: str) -> bool:
        """True if the root of *name* (``"item"`` for ``"item[0].name"``) was set."""
        return root_property_name(name) in self._additional_parameters

    def set_additional_parameter(self, name: str, value: Any) -> None:
        self._meta_parameters.set_value(name, value)

    def get_additional_parameter(self, name: str) -> Any:
        return self._meta_parameters.get_value(name)

    def __repr__(self) -> str:
        return (
            f"BoundSql(sql={self._sql!r}, "
            f"parameter_mappings={[m.property for m in self._parameter_mappings]!r}, "
            f"additional_parameters={sorted(self._additional_parameters)!r})"
        )
