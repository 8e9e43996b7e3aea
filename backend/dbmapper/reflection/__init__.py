"""
Nested-property resolution: path parsing (property_path) and the
kind-dispatching reader/writer (meta_object).
"""

from .meta_object import MetaObject, ValueKind, kind_of
from .property_path import PathSegment, ResolutionError, parse_property_path, root_property_name

__all__ = [
    "MetaObject",
    "ValueKind",
    "kind_of",
    "PathSegment",
    "ResolutionError",
    "parse_property_path",
    "root_property_name",
]
