"""
Property paths: ``name``, ``name[0]``, ``name.sub``, ``items[2].name``, ``map[key].x``.

A path is parsed once into a tuple of ``PathSegment`` (name + optional raw
index) and the result is cached; ``MetaObject`` walks the segments.
"""

import functools
from typing import NamedTuple


class ResolutionError(ValueError):
    """Raised when a property path cannot be parsed, read or written."""

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class PathSegment(NamedTuple):
    name: str
    index: str | None = None

    def __str__(self) -> str:
        if self.index is None:
            return self.name
        return f"{self.name}[{self.index}]"


def root_property_name(path: str) -> str:
    """Portion of *path* before the first ``.`` or ``[`` (``"item[0].name"`` -> ``"item"``)."""
    for i, ch in enumerate(path):
        if ch in ".[":
            return path[:i]
    return path


@functools.lru_cache(maxsize=1024)
def parse_property_path(path: str) -> tuple[PathSegment, ...]:
    """
    Split *path* into segments. Grammar: ``segment ('.' segment)*`` where
    ``segment := name ('[' index ']')?``; name and index must be non-empty.
    """
    if not isinstance(path, str) or not path:
        raise ResolutionError("Property path is empty", path)

    segments: list[PathSegment] = []
    for part in path.split("."):
        if not part:
            raise ResolutionError(f"Empty segment in property path {path!r}", path)
        bracket = part.find("[")
        if bracket == -1:
            if "]" in part:
                raise ResolutionError(f"Unbalanced ']' in property path {path!r}", path)
            segments.append(PathSegment(part))
            continue
        name = part[:bracket]
        if not name:
            raise ResolutionError(f"Missing property name before '[' in {path!r}", path)
        if not part.endswith("]"):
            raise ResolutionError(f"Expected ']' at end of segment {part!r} in {path!r}", path)
        index = part[bracket + 1 : -1]
        if not index or "[" in index or "]" in index:
            raise ResolutionError(f"Invalid index in segment {part!r} of {path!r}", path)
        segments.append(PathSegment(name, index))
    return tuple(segments)
