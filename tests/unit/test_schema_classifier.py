"""Tests for splitting request schemas into inputs and parameters."""

from model_catalog.schema.classifier import (
    classify_schema,
    is_image_input,
    is_text_input,
    to_label,
)
from model_catalog.schema.resolver import MISSING, ResolvedType


def _names(items):
    return [item.name for item in items]


class TestToLabel:
    """Tests for to_label."""

    def test_strips_url_suffix(self):
        """Test humanizing a URL property."""
        assert to_label("start_image_url") == "Start Image"

    def test_plain_name(self):
        """Test a name without suffix."""
        assert to_label("prompt") == "Prompt"
        assert to_label("negative_prompt") == "Negative Prompt"


class TestIsImageInput:
    """Tests for the image-input heuristics."""

    def test_type_gate(self):
        """Test that non-string types never become image inputs."""
        assert is_image_input("image", ResolvedType(type="integer")) is False
        assert is_image_input("use_image", ResolvedType(type="boolean")) is False
        assert is_image_input("images", ResolvedType(type="array", items_type="integer")) is False

    def test_image_size_excluded(self):
        """Test that image_size stays a setting."""
        assert is_image_input("image_size", ResolvedType(type="string")) is False

    def test_uri_format_with_affix(self):
        """Test format-based detection."""
        assert is_image_input("style_image", ResolvedType(type="string", format="uri")) is True

    def test_description_phrase(self):
        """Test detection from the property description."""
        resolved = ResolvedType(type="string", description="URL of the image to edit")

        assert is_image_input("source", resolved) is True

    def test_exact_names(self):
        """Test the known image input names."""
        assert is_image_input("first_frame", ResolvedType(type="string")) is True
        assert is_image_input("image_urls", ResolvedType(type="array", items_type="string")) is True

    def test_untyped_array_items(self):
        """Test that arrays with no item type are still eligible."""
        assert is_image_input("images", ResolvedType(type="array")) is True

    def test_setting_markers(self):
        """Test that count and scale names are not images."""
        assert is_image_input("image_guidance", ResolvedType(type="string")) is False
        assert is_image_input("max_images", ResolvedType(type="string")) is False

    def test_affix(self):
        """Test prefix and suffix detection."""
        assert is_image_input("subject_image", ResolvedType(type="string")) is True
        assert is_image_input("image_reference", ResolvedType(type="string")) is True
        assert is_image_input("imagery", ResolvedType(type="string")) is False


class TestIsTextInput:
    """Tests for text input detection."""

    def test_prompt_names(self):
        """Test that prompt fields are text inputs."""
        assert is_text_input("prompt", ResolvedType(type="string")) is True
        assert is_text_input("negative_prompt", ResolvedType(type="string")) is True

    def test_requires_string(self):
        """Test that a non-string prompt is not a text input."""
        assert is_text_input("prompt", ResolvedType(type="integer")) is False

    def test_other_names(self):
        """Test that other string fields are not text inputs."""
        assert is_text_input("caption", ResolvedType(type="string")) is False


class TestClassifySchema:
    """Tests for classify_schema."""

    def test_empty_schema(self):
        """Test that missing or property-less schemas classify to nothing."""
        assert classify_schema(None).is_empty()
        assert classify_schema({"type": "object"}).is_empty()

    def test_ref_schema(self):
        """Test a schema whose properties are references into components."""
        definitions = {
            "AspectRatio": {"type": "string", "enum": ["16:9", "9:16", "1:1"]},
            "Duration": {"type": "string", "enum": ["5", "10"]},
        }
        schema = {
            "type": "object",
            "required": ["prompt", "start_image_url"],
            "properties": {
                "prompt": {"type": "string", "description": "Text prompt"},
                "start_image_url": {"type": "string", "format": "uri"},
                "end_image_url": {
                    "anyOf": [{"type": "string", "format": "uri"}, {"type": "null"}]
                },
                "aspect_ratio": {
                    "$ref": "#/components/schemas/AspectRatio",
                    "default": "16:9",
                },
                "duration": {"$ref": "#/components/schemas/Duration"},
                "cfg_scale": {"type": "number", "minimum": 0, "maximum": 1, "default": 0.5},
            },
        }

        result = classify_schema(schema, definitions)

        assert _names(result.inputs) == ["start_image_url", "prompt", "end_image_url"]
        start = result.inputs[0]
        assert start.media_type == "image"
        assert start.required is True
        assert start.label == "Start Image"
        assert result.inputs[1].media_type == "text"

        assert _names(result.parameters) == ["cfg_scale", "aspect_ratio", "duration"]
        aspect = result.parameters[1]
        assert aspect.data_type == "enum"
        assert aspect.enum_values == ["16:9", "9:16", "1:1"]
        assert aspect.default == "16:9"
        cfg = result.parameters[0]
        assert cfg.data_type == "number"
        assert cfg.minimum == 0
        assert cfg.maximum == 1

    def test_non_string_image_names_are_parameters(self):
        """Test that type-ineligible image-like names become parameters."""
        schema = {
            "properties": {
                "image_size": {"type": "string", "enum": ["square", "landscape_4_3"]},
                "num_images": {"type": "integer", "default": 1},
                "enable_image": {"type": "boolean"},
                "image": {"type": "array", "items": {"type": "integer"}},
            }
        }

        result = classify_schema(schema)

        assert result.inputs == []
        types = {p.name: p.data_type for p in result.parameters}
        assert types == {
            "image_size": "enum",
            "num_images": "integer",
            "enable_image": "boolean",
            "image": "array",
        }

    def test_image_named_numbers_and_booleans(self):
        """Test non-string fields whose names mention images."""
        schema = {
            "properties": {
                "sequential_image_generation": {"type": "boolean"},
                "max_images": {"type": "integer"},
                "image_guidance_scale": {"anyOf": [{"type": "number"}, {"type": "null"}]},
                "reference_image": {"type": "string"},
            }
        }

        result = classify_schema(schema)

        assert _names(result.inputs) == ["reference_image"]
        assert result.inputs[0].media_type == "image"
        assert sorted(_names(result.parameters)) == [
            "image_guidance_scale",
            "max_images",
            "sequential_image_generation",
        ]

    def test_nullable_numbers_are_parameters(self):
        """Test anyOf number/integer/boolean with null resolves to the typed parameter."""
        schema = {
            "properties": {
                "seed": {"anyOf": [{"type": "integer"}, {"type": "null"}]},
                "guidance_scale": {"anyOf": [{"type": "number"}, {"type": "null"}]},
                "expand_prompt": {"anyOf": [{"type": "boolean"}, {"type": "null"}]},
            }
        }

        result = classify_schema(schema)

        types = {p.name: p.data_type for p in result.parameters}
        assert types == {"seed": "integer", "guidance_scale": "number", "expand_prompt": "boolean"}

    def test_excluded_params_dropped(self):
        """Test that internal fields are not surfaced."""
        schema = {
            "properties": {
                "webhook": {"type": "string"},
                "sync_mode": {"type": "boolean"},
                "output_format": {"type": "string", "enum": ["png", "jpg"]},
                "steps": {"type": "integer"},
            }
        }

        result = classify_schema(schema)

        assert _names(result.parameters) == ["steps"]

    def test_parameter_order(self):
        """Test priority names first, then alphabetical."""
        schema = {
            "properties": {
                "num_frames": {"type": "integer"},
                "width": {"type": "integer"},
                "aspect_ratio": {"type": "string"},
                "seed": {"type": "integer"},
                "guidance_scale": {"type": "number"},
            }
        }

        result = classify_schema(schema)

        assert _names(result.parameters) == [
            "guidance_scale",
            "seed",
            "width",
            "aspect_ratio",
            "num_frames",
        ]

    def test_input_order(self):
        """Test required first, image before text, then alphabetical."""
        schema = {
            "required": ["prompt", "image_url"],
            "properties": {
                "negative_prompt": {"type": "string"},
                "mask_image": {"type": "string"},
                "prompt": {"type": "string"},
                "image_url": {"type": "string"},
            },
        }

        result = classify_schema(schema)

        assert _names(result.inputs) == ["image_url", "prompt", "mask_image", "negative_prompt"]

    def test_image_array_input(self):
        """Test a multi-image input."""
        schema = {
            "properties": {
                "image_urls": {"type": "array", "items": {"type": "string", "format": "uri"}}
            }
        }

        result = classify_schema(schema)

        assert len(result.inputs) == 1
        assert result.inputs[0].is_array is True
        assert result.inputs[0].label == "Image Urls"

    def test_every_property_classified_once(self):
        """Test that each non-excluded property lands in exactly one list."""
        schema = {
            "properties": {
                "prompt": {"type": "string"},
                "image": {"type": "string"},
                "seed": {"type": "integer"},
                "webhook": {"type": "string"},
                "style": {"type": "string"},
            }
        }

        result = classify_schema(schema)

        names = _names(result.inputs) + _names(result.parameters)
        assert sorted(names) == ["image", "prompt", "seed", "style"]

    def test_default_absent_vs_null(self):
        """Test that defaults are only reported when declared."""
        schema = {
            "properties": {
                "style": {"type": "string"},
                "lora": {"type": "string", "default": None},
            }
        }

        params = {p.name: p for p in classify_schema(schema).parameters}

        assert params["style"].default is MISSING
        assert "default" not in params["style"].to_dict()
        assert params["lora"].to_dict()["default"] is None

    def test_to_dict(self):
        """Test the serialized shape."""
        schema = {
            "required": ["prompt"],
            "properties": {
                "prompt": {"type": "string", "description": "What to draw"},
                "steps": {"type": "integer", "default": 28, "minimum": 1, "maximum": 50},
            },
        }

        data = classify_schema(schema).to_dict()

        assert data["inputs"] == [
            {
                "name": "prompt",
                "kind": "media",
                "mediaType": "text",
                "required": True,
                "label": "Prompt",
                "isArray": False,
                "description": "What to draw",
            }
        ]
        assert data["parameters"] == [
            {
                "name": "steps",
                "kind": "scalar",
                "dataType": "integer",
                "required": False,
                "default": 28,
                "minimum": 1,
                "maximum": 50,
            }
        ]
