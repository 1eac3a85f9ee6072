"""Split a request schema into connectable media inputs and form parameters."""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Optional

from .resolver import MISSING, ResolvedType, resolve_properties

logger = logging.getLogger(__name__)

# Exact property names that are always image inputs (when type-eligible)
IMAGE_INPUT_NAMES = frozenset(
    [
        "image_url",
        "image_urls",
        "image",
        "images",
        "image_input",
        "input_image",
        "first_frame",
        "last_frame",
        "tail_image_url",
        "start_image",
        "end_image",
        "reference_image",
        "init_image",
        "mask_image",
        "control_image",
    ]
)

TEXT_INPUT_NAMES = frozenset(["prompt", "negative_prompt"])

# Image-prefixed names that are settings, not inputs
IMAGE_NAME_EXCLUSIONS = frozenset(["image_size"])

# Internal/system fields never surfaced as parameters
EXCLUDED_PARAMS = frozenset(
    [
        "webhook",
        "webhook_events_filter",
        "sync_mode",
        "disable_safety_checker",
        "go_fast",
        "enable_safety_checker",
        "output_format",
        "output_quality",
        "request_id",
    ]
)

PRIORITY_PARAMS = frozenset(
    [
        "seed",
        "num_inference_steps",
        "inference_steps",
        "steps",
        "guidance_scale",
        "guidance",
        "negative_prompt",
        "width",
        "height",
        "image_size",
        "num_outputs",
        "num_images",
        "scheduler",
        "strength",
        "cfg_scale",
        "lora_scale",
    ]
)

URI_FORMATS = frozenset(["uri", "data-uri", "binary"])

IMAGE_DESCRIPTION_PHRASES = (
    "image url",
    "base64 image",
    "data uri",
    "image file",
    "url of the image",
    "path to image",
)

# Substrings marking counts or settings rather than images
SETTING_MARKERS = ("_images", "guidance", "generation", "_count", "_size", "_scale")


@dataclass
class ParameterDescriptor:
    """A tunable scalar field rendered as a form control."""

    name: str
    data_type: str
    required: bool = False
    default: Any = MISSING
    enum_values: Optional[list] = None
    description: Optional[str] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    kind: str = "scalar"

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "kind": self.kind,
            "dataType": self.data_type,
            "required": self.required,
        }
        if self.default is not MISSING:
            data["default"] = self.default
        if self.enum_values is not None:
            data["enumValues"] = self.enum_values
        if self.description:
            data["description"] = self.description
        if self.minimum is not None:
            data["minimum"] = self.minimum
        if self.maximum is not None:
            data["maximum"] = self.maximum
        return data


@dataclass
class InputDescriptor:
    """A connectable media slot (image or text)."""

    name: str
    media_type: str
    required: bool = False
    label: str = ""
    description: Optional[str] = None
    is_array: bool = False
    kind: str = "media"

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "kind": self.kind,
            "mediaType": self.media_type,
            "required": self.required,
            "label": self.label,
            "isArray": self.is_array,
        }
        if self.description:
            data["description"] = self.description
        return data


@dataclass
class SchemaResolution:
    """Classified schema: parameters and inputs, each in display order."""

    parameters: list[ParameterDescriptor] = field(default_factory=list)
    inputs: list[InputDescriptor] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.parameters and not self.inputs

    def to_dict(self) -> dict[str, Any]:
        return {
            "parameters": [p.to_dict() for p in self.parameters],
            "inputs": [i.to_dict() for i in self.inputs],
        }


def to_label(name: str) -> str:
    """Humanize a property name: ``start_image_url`` -> ``Start Image``."""
    text = re.sub(r"_url$", "", name).replace("_", " ")
    return re.sub(r"\b\w", lambda m: m.group().upper(), text)


def is_media_eligible(resolved: ResolvedType) -> bool:
    """Only strings and arrays of strings (or untyped items) can carry media."""
    if resolved.type == "string":
        return True
    return resolved.type == "array" and resolved.items_type in (None, "string")


def _has_image_affix(name: str) -> bool:
    return name.endswith("_image") or name.startswith("image_") or "_image_" in name


def is_image_input(name: str, resolved: ResolvedType) -> bool:
    """Decide whether a resolved property is an image input.

    Type gate first, then the explicit exclusion, then format, description,
    exact-name and affix heuristics.
    """
    if not is_media_eligible(resolved):
        return False
    if name in IMAGE_NAME_EXCLUSIONS:
        return False

    if resolved.format in URI_FORMATS and (name in IMAGE_INPUT_NAMES or _has_image_affix(name)):
        return True

    description = (resolved.description or "").lower()
    if any(phrase in description for phrase in IMAGE_DESCRIPTION_PHRASES):
        return True

    if name in IMAGE_INPUT_NAMES:
        return True

    if any(marker in name for marker in SETTING_MARKERS):
        return False

    return _has_image_affix(name)


def is_text_input(name: str, resolved: ResolvedType) -> bool:
    return name in TEXT_INPUT_NAMES and is_media_eligible(resolved)


def _parameter_type(resolved: ResolvedType) -> str:
    if resolved.enum_values and resolved.type == "string":
        return "enum"
    if resolved.type in ("integer", "number", "boolean", "array"):
        return resolved.type
    return "string"


def _parameter_sort_key(param: ParameterDescriptor) -> tuple:
    return (param.name not in PRIORITY_PARAMS, param.name)


def _input_sort_key(item: InputDescriptor) -> tuple:
    return (not item.required, item.media_type != "image", item.name)


def classify_schema(
    schema: Optional[dict[str, Any]],
    definitions: Optional[dict[str, Any]] = None,
) -> SchemaResolution:
    """Classify every top-level property of an object schema.

    Args:
        schema: Object schema with ``properties`` and optional ``required``.
        definitions: Named definitions for ``$ref`` resolution.

    Returns:
        SchemaResolution with parameters (priority names first, then
        alphabetical) and inputs (required first, image before text, then
        alphabetical).
    """
    if not schema or not isinstance(schema.get("properties"), dict):
        return SchemaResolution()

    required = set(schema.get("required") or [])
    parameters: list[ParameterDescriptor] = []
    inputs: list[InputDescriptor] = []

    for name, resolved in resolve_properties(schema, definitions).items():
        media_type = None
        if is_image_input(name, resolved):
            media_type = "image"
        elif is_text_input(name, resolved):
            media_type = "text"

        if media_type:
            inputs.append(
                InputDescriptor(
                    name=name,
                    media_type=media_type,
                    required=name in required,
                    label=to_label(name),
                    description=resolved.description,
                    is_array=resolved.is_array,
                )
            )
            continue

        if name in EXCLUDED_PARAMS:
            logger.debug(f"Dropping internal parameter {name}")
            continue

        parameters.append(
            ParameterDescriptor(
                name=name,
                data_type=_parameter_type(resolved),
                required=name in required,
                default=resolved.default,
                enum_values=list(resolved.enum_values) if resolved.enum_values else None,
                description=resolved.description,
                minimum=resolved.minimum,
                maximum=resolved.maximum,
            )
        )

    parameters.sort(key=_parameter_sort_key)
    inputs.sort(key=_input_sort_key)
    return SchemaResolution(parameters=parameters, inputs=inputs)
