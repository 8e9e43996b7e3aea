"""
ParameterMapping: describes the value source of one positional ``?`` placeholder.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ParameterMapping:
    """
    One placeholder binding.

    - property: property path resolved against the additional parameters or
      the caller's parameter object (``"id"``, ``"user.name"``, ``"ids[0]"``).
    - data_type: optional coercion hint (see core.param_type); opaque to BoundSql.
    - numeric_scale: optional rounding for ``number``/``decimal`` values.
    """

    property: str
    data_type: str | None = None
    numeric_scale: int | None = None

    def __post_init__(self) -> None:
        if not self.property or not isinstance(self.property, str):
            raise ValueError("ParameterMapping.property must be a non-empty string")
