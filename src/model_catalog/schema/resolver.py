"""Resolution of JSON-schema property nodes into concrete types.

Provider request schemas mix plain typed nodes with ``$ref`` indirection,
nullable ``anyOf``/``oneOf`` wrappers, ``allOf`` enum references, and arrays
whose ``items`` may be missing. Raw dicts are first parsed into a small set of
node types and then resolved by a pure recursive function. A set of already
visited reference names guards against cyclic definitions.
"""

import logging
import re
from dataclasses import dataclass, field, replace
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)

REF_PATTERN = re.compile(r"^#/(?:components/schemas|definitions|\$defs)/(.+)$")

SCALAR_TYPES = {"string", "integer", "number", "boolean", "null"}


class _Missing:
    """Marker for an absent default (None is a valid default)."""

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


@dataclass(frozen=True)
class Annotations:
    """Non-structural keywords carried by any node."""

    description: Optional[str] = None
    default: Any = MISSING
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    enum: Optional[tuple] = None
    format: Optional[str] = None

    @classmethod
    def from_raw(cls, raw: dict[str, Any]) -> "Annotations":
        enum = raw.get("enum")
        minimum = raw.get("minimum")
        maximum = raw.get("maximum")
        description = raw.get("description")
        return cls(
            description=description if isinstance(description, str) else None,
            default=raw["default"] if "default" in raw else MISSING,
            minimum=minimum if isinstance(minimum, (int, float)) else None,
            maximum=maximum if isinstance(maximum, (int, float)) else None,
            enum=tuple(enum) if isinstance(enum, list) else None,
            format=raw.get("format") if isinstance(raw.get("format"), str) else None,
        )


@dataclass(frozen=True)
class RefNode:
    ref: str
    meta: Annotations = field(default_factory=Annotations)


@dataclass(frozen=True)
class UnionNode:
    kind: str  # anyOf, oneOf or allOf
    options: tuple
    meta: Annotations = field(default_factory=Annotations)


@dataclass(frozen=True)
class ScalarNode:
    type: str
    meta: Annotations = field(default_factory=Annotations)


@dataclass(frozen=True)
class ArrayNode:
    items: Optional["SchemaNode"]
    meta: Annotations = field(default_factory=Annotations)


@dataclass(frozen=True)
class ObjectNode:
    properties: dict = field(default_factory=dict)
    required: tuple = ()
    meta: Annotations = field(default_factory=Annotations)


@dataclass(frozen=True)
class UnknownNode:
    meta: Annotations = field(default_factory=Annotations)


SchemaNode = Union[RefNode, UnionNode, ScalarNode, ArrayNode, ObjectNode, UnknownNode]


@dataclass(frozen=True)
class ResolvedType:
    """Concrete type of a schema property after resolution."""

    type: str
    format: Optional[str] = None
    items_type: Optional[str] = None
    enum_values: Optional[tuple] = None
    default: Any = MISSING
    description: Optional[str] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None

    @property
    def has_default(self) -> bool:
        return self.default is not MISSING

    @property
    def is_array(self) -> bool:
        return self.type == "array"


def parse_node(raw: Any) -> SchemaNode:
    """Parse a raw schema dict into a node.

    Args:
        raw: A JSON-schema fragment. Non-dict values parse as UnknownNode.

    Returns:
        The parsed node. Child nodes of unions and arrays are parsed eagerly;
        object properties are kept raw.
    """
    if not isinstance(raw, dict):
        return UnknownNode()

    meta = Annotations.from_raw(raw)

    ref = raw.get("$ref")
    if isinstance(ref, str):
        return RefNode(ref=ref, meta=meta)

    for kind in ("anyOf", "oneOf", "allOf"):
        options = raw.get(kind)
        if isinstance(options, list) and options:
            return UnionNode(kind=kind, options=tuple(parse_node(o) for o in options), meta=meta)

    node_type = raw.get("type")
    if isinstance(node_type, list):
        # JSON Schema 2020 nullable form: {"type": ["string", "null"]}
        options = tuple(ScalarNode(type=t) for t in node_type if isinstance(t, str))
        return UnionNode(kind="anyOf", options=options, meta=meta)

    if node_type == "array":
        items = raw.get("items")
        return ArrayNode(items=parse_node(items) if isinstance(items, dict) else None, meta=meta)

    if node_type == "object" or "properties" in raw:
        properties = raw.get("properties")
        required = raw.get("required")
        return ObjectNode(
            properties=properties if isinstance(properties, dict) else {},
            required=tuple(required) if isinstance(required, list) else (),
            meta=meta,
        )

    if node_type in SCALAR_TYPES:
        return ScalarNode(type=node_type, meta=meta)

    return UnknownNode(meta=meta)


def ref_name(ref: str) -> Optional[str]:
    """Extract the definition name from a local reference."""
    match = REF_PATTERN.match(ref)
    return match.group(1) if match else None


def _overlay(resolved: ResolvedType, meta: Annotations) -> ResolvedType:
    """Apply annotations from an outer node over a resolved inner type."""
    changes: dict[str, Any] = {}
    if meta.description:
        changes["description"] = meta.description
    if meta.default is not MISSING:
        changes["default"] = meta.default
    if meta.minimum is not None:
        changes["minimum"] = meta.minimum
    if meta.maximum is not None:
        changes["maximum"] = meta.maximum
    if meta.enum is not None:
        changes["enum_values"] = meta.enum
    if meta.format:
        changes["format"] = meta.format
    return replace(resolved, **changes) if changes else resolved


def _from_meta(type_name: str, meta: Annotations) -> ResolvedType:
    return _overlay(ResolvedType(type=type_name), meta)


def _infer_enum_type(values: tuple) -> str:
    if values and all(isinstance(v, bool) for v in values):
        return "boolean"
    if values and all(isinstance(v, int) and not isinstance(v, bool) for v in values):
        return "integer"
    if values and all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in values):
        return "number"
    return "string"


def _resolve_union(
    node: UnionNode, definitions: dict[str, Any], seen: frozenset
) -> ResolvedType:
    if node.kind == "allOf":
        merged: Optional[ResolvedType] = None
        for option in node.options:
            current = resolve(option, definitions, seen)
            if merged is None:
                merged = current
                continue
            merged = replace(
                merged,
                type=merged.type if merged.type != "string" else current.type,
                enum_values=merged.enum_values or current.enum_values,
                default=merged.default if merged.has_default else current.default,
                description=merged.description or current.description,
                format=merged.format or current.format,
            )
        return _overlay(merged or ResolvedType(type="string"), node.meta)

    non_null = [
        option
        for option in node.options
        if not (isinstance(option, ScalarNode) and option.type == "null")
    ]
    if len(non_null) == 1:
        return _overlay(resolve(non_null[0], definitions, seen), node.meta)

    resolved = [resolve(option, definitions, seen) for option in non_null]
    if resolved and all(r.type == resolved[0].type for r in resolved):
        return _overlay(resolved[0], node.meta)

    logger.debug(f"Ambiguous {node.kind} with {len(non_null)} alternatives, using string")
    return _from_meta("string", node.meta)


def resolve(
    node: SchemaNode,
    definitions: Optional[dict[str, Any]] = None,
    seen: frozenset = frozenset(),
) -> ResolvedType:
    """Resolve a node to a concrete type.

    Args:
        node: Parsed schema node.
        definitions: Named definitions for ``$ref`` lookup (components.schemas).
        seen: Reference names already being resolved on this path.

    Returns:
        The resolved type. Unresolvable or cyclic references resolve to string.
    """
    definitions = definitions or {}

    if isinstance(node, RefNode):
        name = ref_name(node.ref)
        if name is None or name not in definitions:
            logger.debug(f"Unresolvable reference {node.ref}, using string")
            return _from_meta("string", node.meta)
        if name in seen:
            logger.warning(f"Cyclic reference {node.ref}, using string")
            return _from_meta("string", node.meta)
        target = resolve(parse_node(definitions[name]), definitions, seen | {name})
        return _overlay(target, node.meta)

    if isinstance(node, UnionNode):
        return _resolve_union(node, definitions, seen)

    if isinstance(node, ScalarNode):
        return _from_meta(node.type, node.meta)

    if isinstance(node, ArrayNode):
        items_type = None
        if node.items is not None and not isinstance(node.items, UnknownNode):
            items_type = resolve(node.items, definitions, seen).type
        return replace(_from_meta("array", node.meta), items_type=items_type)

    if isinstance(node, ObjectNode):
        return _from_meta("object", node.meta)

    if node.meta.enum:
        return _from_meta(_infer_enum_type(node.meta.enum), node.meta)
    return _from_meta("string", node.meta)


def resolve_properties(
    schema: dict[str, Any], definitions: Optional[dict[str, Any]] = None
) -> dict[str, ResolvedType]:
    """Resolve every top-level property of an object schema.

    Local ``$defs``/``definitions`` blocks on the schema are merged into the
    lookup table, with explicit ``definitions`` taking precedence.
    """
    properties = schema.get("properties")
    if not isinstance(properties, dict):
        return {}

    lookup: dict[str, Any] = {}
    for key in ("$defs", "definitions"):
        local = schema.get(key)
        if isinstance(local, dict):
            lookup.update(local)
    lookup.update(definitions or {})

    return {name: resolve(parse_node(prop), lookup) for name, prop in properties.items()}


def _child(node: Any, key: str) -> dict[str, Any]:
    value = node.get(key) if isinstance(node, dict) else None
    return value if isinstance(value, dict) else {}


def locate_request_schema(
    openapi: dict[str, Any],
) -> Optional[tuple[dict[str, Any], dict[str, Any]]]:
    """Find the JSON request-body schema of the first POST operation.

    A top-level ``$ref`` on the body schema is followed one level into
    ``components.schemas``.

    Returns:
        (object schema, components.schemas) or None if no usable schema exists.
    """
    components = _child(_child(openapi, "components"), "schemas")
    for path_item in _child(openapi, "paths").values():
        content = _child(_child(_child(path_item, "post"), "requestBody"), "content")
        body_schema = _child(content, "application/json").get("schema")
        if not isinstance(body_schema, dict):
            continue

        ref = body_schema.get("$ref")
        if isinstance(ref, str):
            name = ref_name(ref)
            target = components.get(name) if name else None
            if isinstance(target, dict):
                return target, components
        elif "properties" in body_schema:
            return body_schema, components

    return None
