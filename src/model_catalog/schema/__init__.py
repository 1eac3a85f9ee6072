"""Schema resolution and input/parameter classification."""

from .classifier import (
    InputDescriptor,
    ParameterDescriptor,
    SchemaResolution,
    classify_schema,
    to_label,
)
from .resolver import (
    ResolvedType,
    locate_request_schema,
    parse_node,
    resolve,
    resolve_properties,
)

__all__ = [
    "InputDescriptor",
    "ParameterDescriptor",
    "ResolvedType",
    "SchemaResolution",
    "classify_schema",
    "locate_request_schema",
    "parse_node",
    "resolve",
    "resolve_properties",
    "to_label",
]
