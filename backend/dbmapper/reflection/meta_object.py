"""
Nested-property reads and writes over dynamically shaped values.

Each value is classified into a ``ValueKind`` (scalar, sequence, mapping,
record) and the resolver dispatches on that tag per path segment:

- MAPPING: ``name`` is a key; ``[key]`` is a string key.
- SEQUENCE: ``[i]`` is a non-negative integer index.
- RECORD: ``name`` is an attribute (dataclass, pydantic model, plain object).
- SCALAR: leaf only; descending into it is a type mismatch.

Missing segments always raise ``ResolutionError``; nothing defaults to None.
"""

import uuid
from collections.abc import Mapping, MutableMapping
from datetime import date, time, timedelta
from decimal import Decimal
from enum import Enum
from typing import Any

from .property_path import PathSegment, ResolutionError, parse_property_path

_SCALAR_TYPES = (
    str,
    bytes,
    bytearray,
    bool,
    int,
    float,
    complex,
    Decimal,
    date,
    time,
    timedelta,
    uuid.UUID,
    Enum,
)


class ValueKind(str, Enum):
    SCALAR = "scalar"
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    RECORD = "record"


def kind_of(value: Any) -> ValueKind:
    """Classify *value*. None counts as a scalar."""
    if value is None or isinstance(value, _SCALAR_TYPES):
        return ValueKind.SCALAR
    if isinstance(value, Mapping):
        return ValueKind.MAPPING
    if isinstance(value, (list, tuple)):
        return ValueKind.SEQUENCE
    return ValueKind.RECORD


def _sequence_index(index: str, path: str) -> int:
    if not index.isdecimal():
        raise ResolutionError(f"Sequence index must be a non-negative integer, got {index!r} in {path!r}", path)
    return int(index)


class MetaObject:
    """Reads and writes values at property paths below *root*."""

    def __init__(self, root: Any) -> None:
        self._root = root

    @property
    def root(self) -> Any:
        return self._root

    def get_value(self, path: str) -> Any:
        """Return the value at *path*; raise ResolutionError if any segment is missing."""
        current = self._root
        for seg in parse_property_path(path):
            current = self._read_segment(current, seg, path)
        return current

    def has_value(self, path: str) -> bool:
        try:
            self.get_value(path)
        except ResolutionError:
            return False
        return True

    def set_value(self, path: str, value: Any) -> None:
        """
        Store *value* at *path*. Missing plain intermediates inside a mutable
        mapping are created as dicts; everything else that is missing raises.
        """
        segments = parse_property_path(path)
        current = self._root
        for seg in segments[:-1]:
            current = self._descend_for_write(current, seg, path)
        self._write_segment(current, segments[-1], value, path)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _read_segment(self, current: Any, seg: PathSegment, path: str) -> Any:
        value = self._read_name(current, seg.name, path)
        if seg.index is None:
            return value
        return self._read_index(value, seg, path)

    @staticmethod
    def _read_name(current: Any, name: str, path: str) -> Any:
        kind = kind_of(current)
        if kind is ValueKind.MAPPING:
            try:
                return current[name]
            except KeyError:
                raise ResolutionError(f"No key {name!r} while resolving {path!r}", path) from None
        if kind is ValueKind.RECORD:
            try:
                return getattr(current, name)
            except AttributeError:
                raise ResolutionError(
                    f"{type(current).__name__} has no property {name!r} while resolving {path!r}", path
                ) from None
        raise ResolutionError(
            f"Cannot read property {name!r} of {kind.value} value ({type(current).__name__}) in {path!r}",
            path,
        )

    @staticmethod
    def _read_index(container: Any, seg: PathSegment, path: str) -> Any:
        kind = kind_of(container)
        if kind is ValueKind.SEQUENCE:
            i = _sequence_index(seg.index, path)
            if i >= len(container):
                raise ResolutionError(
                    f"Index {i} out of range for {seg.name!r} (length {len(container)}) in {path!r}", path
                )
            return container[i]
        if kind is ValueKind.MAPPING:
            try:
                return container[seg.index]
            except KeyError:
                raise ResolutionError(f"No key {seg.index!r} in {seg.name!r} while resolving {path!r}", path) from None
        raise ResolutionError(f"{seg.name!r} is not indexable ({type(container).__name__}) in {path!r}", path)

    def _descend_for_write(self, current: Any, seg: PathSegment, path: str) -> Any:
        if seg.index is None and isinstance(current, MutableMapping) and seg.name not in current:
            created: dict[str, Any] = {}
            current[seg.name] = created
            return created
        return self._read_segment(current, seg, path)

    def _write_segment(self, current: Any, seg: PathSegment, value: Any, path: str) -> None:
        if seg.index is None:
            self._write_name(current, seg.name, value, path)
            return
        container = self._read_name(current, seg.name, path)
        self._write_index(container, seg, value, path)

    @staticmethod
    def _write_name(current: Any, name: str, value: Any, path: str) -> None:
        kind = kind_of(current)
        if kind is ValueKind.MAPPING:
            if not isinstance(current, MutableMapping):
                raise ResolutionError(f"Mapping is read-only while writing {path!r}", path)
            current[name] = value
            return
        if kind is ValueKind.RECORD:
            try:
                setattr(current, name, value)
            except (AttributeError, TypeError, ValueError) as e:
                raise ResolutionError(
                    f"Cannot set property {name!r} on {type(current).__name__} in {path!r}: {e}", path
                ) from e
            return
        raise ResolutionError(
            f"Cannot set property {name!r} on {kind.value} value ({type(current).__name__}) in {path!r}",
            path,
        )

    @staticmethod
    def _write_index(container: Any, seg: PathSegment, value: Any, path: str) -> None:
        if isinstance(container, list):
            i = _sequence_index(seg.index, path)
            if i < len(container):
                container[i] = value
            elif i == len(container):
                container.append(value)
            else:
                raise ResolutionError(
                    f"Index {i} out of range for {seg.name!r} (length {len(container)}) in {path!r}", path
                )
            return
        if isinstance(container, MutableMapping):
            container[seg.index] = value
            return
        raise ResolutionError(
            f"{seg.name!r} ({type(container).__name__}) does not support indexed assignment in {path!r}", path
        )
