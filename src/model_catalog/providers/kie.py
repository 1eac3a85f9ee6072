"""Kie.ai catalog provider.

Kie.ai has no discovery or schema API, so both the model list and the
per-model request schemas are maintained here by hand.
"""

import logging
from typing import Optional

from ..models import Capability, CatalogEntry, Pricing, ProviderType
from ..schema.classifier import InputDescriptor, ParameterDescriptor, SchemaResolution
from .base import MAX_PAGES, CatalogProvider

logger = logging.getLogger(__name__)

T2I = Capability.TEXT_TO_IMAGE
I2I = Capability.IMAGE_TO_IMAGE
T2V = Capability.TEXT_TO_VIDEO
I2V = Capability.IMAGE_TO_VIDEO
T2A = Capability.TEXT_TO_AUDIO

# (id, name, description, capabilities, price per run, page url)
_KIE_CATALOG = [
    ("z-image", "Z-Image", "Fast, affordable text-to-image generation. Great for quick iterations.",
     [T2I], 0.004, "https://kie.ai/z-image"),
    ("seedream/4.5-text-to-image", "Seedream 4.5",
     "High-quality text-to-image generation with excellent prompt following.",
     [T2I], 0.032, "https://kie.ai/seedream"),
    ("seedream/4.5-edit", "Seedream 4.5 Edit", "Image editing and transformation using Seedream 4.5.",
     [I2I], 0.032, "https://kie.ai/seedream"),
    ("gpt-image/1.5-text-to-image", "GPT Image 1.5",
     "OpenAI-style image generation with excellent prompt understanding.",
     [T2I], 0.06, "https://kie.ai/gpt-image-1"),
    ("gpt-image/1.5-image-to-image", "GPT Image 1.5 Edit", "Image editing using GPT Image 1.5 model.",
     [I2I], 0.06, "https://kie.ai/gpt-image-1"),
    ("flux-2/pro-text-to-image", "FLUX.2 Pro", "FLUX.2 Pro text-to-image generation via Kie.ai.",
     [T2I], None, "https://kie.ai/flux-2"),
    ("flux-2/pro-image-to-image", "FLUX.2 Pro Edit", "FLUX.2 Pro image editing via Kie.ai.",
     [I2I], None, "https://kie.ai/flux-2"),
    ("flux-2/flex-text-to-image", "FLUX.2 Flex", "FLUX.2 Flex text-to-image generation via Kie.ai.",
     [T2I], None, "https://kie.ai/flux-2"),
    ("flux-2/flex-image-to-image", "FLUX.2 Flex Edit", "FLUX.2 Flex image editing via Kie.ai.",
     [I2I], None, "https://kie.ai/flux-2"),
    ("nano-banana-pro", "Nano Banana Pro",
     "Google Gemini 3 Pro image generation via Kie.ai. Supports text-to-image and "
     "image-to-image with up to 8 input images.",
     [T2I, I2I], None, "https://docs.kie.ai/market/google/pro-image-to-image"),
    ("grok-imagine/text-to-image", "Grok Imagine", "Grok Imagine text-to-image generation via Kie.ai.",
     [T2I], None, "https://kie.ai/grok-imagine"),
    ("grok-imagine/image-to-image", "Grok Imagine Edit", "Grok Imagine image editing via Kie.ai.",
     [I2I], None, "https://kie.ai/grok-imagine"),
    ("grok-imagine/text-to-video", "Grok Imagine Video", "Grok Imagine text-to-video generation via Kie.ai.",
     [T2V], None, "https://kie.ai/grok-imagine"),
    ("grok-imagine/image-to-video", "Grok Imagine I2V", "Grok Imagine image-to-video generation via Kie.ai.",
     [I2V], None, "https://kie.ai/grok-imagine"),
    ("kling-2.6/text-to-video", "Kling 2.6", "Kling 2.6 video generation from text.",
     [T2V], 0.60, "https://kie.ai/kling-2-6"),
    ("kling-2.6/image-to-video", "Kling 2.6 Image-to-Video", "Kling 2.6 video generation from images.",
     [I2V], 0.60, "https://kie.ai/kling-2-6"),
    ("kling-2.6/motion-control", "Kling 2.6 Motion Control",
     "Motion transfer from video to static image. Supports 720p and 1080p output.",
     [I2V], None, "https://kie.ai/kling-2-6"),
    ("kling/v2-5-turbo-text-to-video-pro", "Kling 2.5 Turbo",
     "Kling 2.5 Turbo text-to-video generation via Kie.ai.",
     [T2V], None, "https://kie.ai/kling-2-6"),
    ("kling/v2-5-turbo-image-to-video-pro", "Kling 2.5 Turbo I2V",
     "Kling 2.5 Turbo image-to-video generation via Kie.ai.",
     [I2V], None, "https://kie.ai/kling-2-6"),
    ("wan/2-6-text-to-video", "Wan 2.6", "Wan 2.6 video generation from text.",
     [T2V], 0.90, "https://kie.ai/wan-2-6"),
    ("wan/2-6-image-to-video", "Wan 2.6 Image-to-Video", "Wan 2.6 video generation from images.",
     [I2V], 0.90, "https://kie.ai/wan-2-6"),
    ("wan/2-6-video-to-video", "Wan 2.6 V2V", "Wan 2.6 video-to-video transformation via Kie.ai.",
     [I2V], None, "https://kie.ai/wan-2-6"),
    ("topaz/video-upscale", "Topaz Video Upscale", "AI video upscaling. Supports 1x, 2x, and 4x scaling factors.",
     [I2V], None, "https://kie.ai/topaz"),
    ("veo3/text-to-video", "Veo 3",
     "Google Veo 3.1 high-quality text-to-video generation with audio via Kie.ai.",
     [T2V], None, "https://docs.kie.ai/veo3-api/quickstart"),
    ("veo3/image-to-video", "Veo 3 I2V",
     "Google Veo 3.1 image-to-video generation via Kie.ai. Supports 1-2 reference images.",
     [I2V], None, "https://docs.kie.ai/veo3-api/quickstart"),
    ("veo3-fast/text-to-video", "Veo 3 Fast",
     "Google Veo 3.1 fast text-to-video generation with audio via Kie.ai.",
     [T2V], None, "https://docs.kie.ai/veo3-api/quickstart"),
    ("veo3-fast/image-to-video", "Veo 3 Fast I2V",
     "Google Veo 3.1 fast image-to-video generation via Kie.ai. Supports 1-2 reference images.",
     [I2V], None, "https://docs.kie.ai/veo3-api/quickstart"),
    ("elevenlabs/turbo-v2.5", "ElevenLabs Turbo v2.5",
     "Fast, high-quality text-to-speech with natural-sounding voices from ElevenLabs via Kie.ai.",
     [T2A], 0.05, "https://kie.ai/elevenlabs-tts"),
    ("elevenlabs/multilingual-v2", "ElevenLabs Multilingual v2",
     "Multilingual text-to-speech supporting multiple languages with natural voices via Kie.ai.",
     [T2A], 0.05, "https://kie.ai/elevenlabs-tts"),
    ("elevenlabs/text-to-dialogue-v3", "ElevenLabs Eleven V3",
     "ElevenLabs' most expressive text-to-speech model with emotional nuance, supporting "
     "70+ languages and audio tags for dialogue via Kie.ai.",
     [T2A], 0.06, "https://kie.ai/elevenlabs/text-to-dialogue-v3"),
    ("elevenlabs/sound-effect-v2", "ElevenLabs Sound Effects v2",
     "Generate sound effects from text descriptions. Supports looping, 0.5-22 second "
     "duration, and multiple output formats via Kie.ai.",
     [T2A], 0.02, "https://kie.ai/elevenlabs-sound-effect"),
]

KIE_MODELS = [
    CatalogEntry(
        id=model_id,
        name=name,
        description=description,
        provider=ProviderType.KIE,
        capabilities=list(capabilities),
        pricing=Pricing(amount=price) if price is not None else None,
        page_url=page_url,
    )
    for model_id, name, description, capabilities, price, page_url in _KIE_CATALOG
]


def _choice(name: str, description: str, values: list[str], default: str) -> ParameterDescriptor:
    return ParameterDescriptor(
        name=name, data_type="enum", enum_values=values, default=default, description=description
    )


def _number(name: str, description: str, default=None, minimum=None, maximum=None) -> ParameterDescriptor:
    param = ParameterDescriptor(
        name=name, data_type="number", description=description, minimum=minimum, maximum=maximum
    )
    if default is not None:
        param.default = default
    return param


def _seed(name: str = "seed", description: str = "Random seed for reproducibility", minimum=0, maximum=None):
    return ParameterDescriptor(
        name=name, data_type="integer", description=description, minimum=minimum, maximum=maximum
    )


def _prompt(required: bool = True, label: str = "Prompt", name: str = "prompt") -> InputDescriptor:
    return InputDescriptor(name=name, media_type="text", required=required, label=label)


def _media(name: str, label: str = "Image", required: bool = True, is_array: bool = True) -> InputDescriptor:
    return InputDescriptor(name=name, media_type="image", required=required, label=label, is_array=is_array)


SQUARE_RATIOS = ["1:1", "4:3", "3:4", "16:9", "9:16"]
SEEDREAM_RATIOS = ["1:1", "4:3", "3:4", "16:9", "9:16", "2:3", "3:2", "21:9"]
GPT_IMAGE_RATIOS = ["1:1", "2:3", "3:2"]
FLUX2_RATIOS = ["1:1", "4:3", "3:4", "16:9", "9:16", "3:2", "2:3", "auto"]
GROK_RATIOS = ["2:3", "3:2", "1:1", "16:9", "9:16"]
KLING_RATIOS = ["16:9", "9:16", "1:1"]
VEO_RATIOS = ["16:9", "9:16"]
AUDIO_FORMATS = ["mp3_44100_128", "mp3_44100_192", "pcm_16000", "pcm_22050", "pcm_24000", "pcm_44100"]


def _voice_params(with_voice: bool = True) -> list[ParameterDescriptor]:
    params = [
        _number("stability", "Voice stability (0-1)", default=0.5, minimum=0, maximum=1),
        _number("similarity_boost", "Similarity boost (0-1)", default=0.75, minimum=0, maximum=1),
        _choice("output_format", "Audio output format", AUDIO_FORMATS, "mp3_44100_128"),
    ]
    if with_voice:
        params.insert(0, ParameterDescriptor(name="voice_id", data_type="string", description="Voice ID to use for synthesis"))
    return params


def _seedream_params() -> list[ParameterDescriptor]:
    return [
        _choice("aspect_ratio", "Output aspect ratio", SEEDREAM_RATIOS, "1:1"),
        _choice("quality", "Output quality", ["basic", "high"], "basic"),
        _seed(),
    ]


def _gpt_image_params() -> list[ParameterDescriptor]:
    return [
        _choice("aspect_ratio", "Output aspect ratio", GPT_IMAGE_RATIOS, "3:2"),
        _choice("quality", "Output quality", ["medium", "high"], "medium"),
    ]


def _flux2_params() -> list[ParameterDescriptor]:
    return [
        _choice("aspect_ratio", "Output aspect ratio", FLUX2_RATIOS, "1:1"),
        _choice("resolution", "Output resolution", ["1K", "2K"], "1K"),
        _seed(),
    ]


def _grok_video_params() -> list[ParameterDescriptor]:
    return [
        _choice("aspect_ratio", "Output aspect ratio", GROK_RATIOS, "2:3"),
        _choice("duration", "Video duration in seconds", ["6", "10"], "6"),
        _choice("mode", "Generation mode", ["fun", "normal", "spicy"], "normal"),
        _seed(),
    ]


def _kling26_params() -> list[ParameterDescriptor]:
    sound = ParameterDescriptor(name="sound", data_type="boolean", default=True, description="Enable sound generation")
    return [
        _choice("aspect_ratio", "Output aspect ratio", KLING_RATIOS, "16:9"),
        _choice("duration", "Video duration", ["5", "10"], "5"),
        sound,
        _seed(),
    ]


def _kling25_params() -> list[ParameterDescriptor]:
    return [
        _choice("aspect_ratio", "Output aspect ratio", KLING_RATIOS, "16:9"),
        _choice("duration", "Video duration", ["5", "10"], "5"),
        _number("cfg_scale", "Guidance scale", default=0.5, minimum=0, maximum=1),
        _seed(),
    ]


def _wan_params(durations: list[str]) -> list[ParameterDescriptor]:
    return [
        _choice("duration", "Video duration in seconds", durations, "5"),
        _choice("resolution", "Output resolution", ["720p", "1080p"], "1080p"),
        _seed(),
    ]


def _veo_params() -> list[ParameterDescriptor]:
    return [
        _choice("aspect_ratio", "Output aspect ratio", VEO_RATIOS, "16:9"),
        _seed("seeds", "Random seed (10000-99999)", minimum=10000, maximum=99999),
    ]


def build_kie_schemas() -> dict[str, SchemaResolution]:
    """Build the hand-maintained schema table. Fresh objects on every call."""
    basic_image = [_choice("aspect_ratio", "Output aspect ratio", SQUARE_RATIOS, "1:1"), _seed()]
    return {
        "z-image": SchemaResolution(basic_image, [_prompt()]),
        "seedream/4.5-text-to-image": SchemaResolution(_seedream_params(), [_prompt()]),
        "seedream/4.5-edit": SchemaResolution(_seedream_params(), [_prompt(), _media("image_urls")]),
        "gpt-image/1.5-text-to-image": SchemaResolution(_gpt_image_params(), [_prompt()]),
        "gpt-image/1.5-image-to-image": SchemaResolution(_gpt_image_params(), [_prompt(), _media("input_urls")]),
        "flux-2/pro-text-to-image": SchemaResolution(_flux2_params(), [_prompt()]),
        "flux-2/pro-image-to-image": SchemaResolution(_flux2_params(), [_prompt(), _media("input_urls")]),
        "flux-2/flex-text-to-image": SchemaResolution(_flux2_params(), [_prompt()]),
        "flux-2/flex-image-to-image": SchemaResolution(_flux2_params(), [_prompt(), _media("input_urls")]),
        "nano-banana-pro": SchemaResolution(
            [
                _choice(
                    "aspect_ratio",
                    "Output aspect ratio",
                    ["1:1", "2:3", "3:2", "4:3", "16:9", "9:16", "21:9", "auto"],
                    "1:1",
                ),
                _choice("resolution", "Output resolution", ["1K", "2K", "4K"], "1K"),
                _choice("output_format", "Output format", ["png", "jpg"], "png"),
            ],
            [_prompt(), _media("image_input", required=False)],
        ),
        "grok-imagine/text-to-image": SchemaResolution(
            [_choice("aspect_ratio", "Output aspect ratio", GROK_RATIOS, "1:1"), _seed()],
            [_prompt()],
        ),
        "grok-imagine/image-to-image": SchemaResolution([], [_prompt(required=False), _media("image_urls")]),
        "elevenlabs/turbo-v2.5": SchemaResolution(_voice_params(), [_prompt(label="Text")]),
        "elevenlabs/multilingual-v2": SchemaResolution(_voice_params(), [_prompt(label="Text")]),
        "elevenlabs/text-to-dialogue-v3": SchemaResolution(
            _voice_params(with_voice=False), [_prompt(label="Text / Dialogue Script")]
        ),
        "elevenlabs/sound-effect-v2": SchemaResolution(
            [
                _number("duration_seconds", "Duration in seconds (0.5-22)", minimum=0.5, maximum=22),
                ParameterDescriptor(name="loop", data_type="boolean", default=False, description="Enable smooth looping"),
                _number("prompt_influence", "How closely to follow the prompt (0-1)", default=0.3, minimum=0, maximum=1),
                _choice("output_format", "Audio output format", AUDIO_FORMATS, "mp3_44100_128"),
            ],
            [_prompt(label="Sound Description")],
        ),
        "grok-imagine/text-to-video": SchemaResolution(_grok_video_params(), [_prompt()]),
        "grok-imagine/image-to-video": SchemaResolution(
            _grok_video_params(), [_prompt(required=False), _media("image_urls")]
        ),
        "kling-2.6/text-to-video": SchemaResolution(_kling26_params(), [_prompt()]),
        "kling-2.6/image-to-video": SchemaResolution(
            _kling26_params(), [_prompt(required=False), _media("image_urls")]
        ),
        "kling-2.6/motion-control": SchemaResolution(
            [
                _choice("mode", "Output resolution", ["720p", "1080p"], "720p"),
                _choice("character_orientation", "Character orientation source", ["image", "video"], "video"),
            ],
            [_prompt(required=False), _media("input_urls"), _media("video_urls", label="Video")],
        ),
        "kling/v2-5-turbo-text-to-video-pro": SchemaResolution(
            _kling25_params(),
            [_prompt(), _prompt(required=False, label="Negative Prompt", name="negative_prompt")],
        ),
        "kling/v2-5-turbo-image-to-video-pro": SchemaResolution(
            _kling25_params(),
            [
                _prompt(required=False),
                _prompt(required=False, label="Negative Prompt", name="negative_prompt"),
                _media("image_url", is_array=False),
                _media("tail_image_url", label="Tail Image", required=False, is_array=False),
            ],
        ),
        "wan/2-6-text-to-video": SchemaResolution(_wan_params(["5", "10", "15"]), [_prompt()]),
        "wan/2-6-image-to-video": SchemaResolution(
            _wan_params(["5", "10", "15"]), [_prompt(required=False), _media("image_urls")]
        ),
        "wan/2-6-video-to-video": SchemaResolution(
            _wan_params(["5", "10"]), [_prompt(required=False), _media("video_urls", label="Video")]
        ),
        "topaz/video-upscale": SchemaResolution(
            [_choice("upscale_factor", "Upscale factor", ["1", "2", "4"], "2")],
            [_media("video_url", label="Video", is_array=False)],
        ),
        "veo3/text-to-video": SchemaResolution(_veo_params(), [_prompt()]),
        "veo3/image-to-video": SchemaResolution(_veo_params(), [_prompt(), _media("imageUrls")]),
        "veo3-fast/text-to-video": SchemaResolution(_veo_params(), [_prompt()]),
        "veo3-fast/image-to-video": SchemaResolution(_veo_params(), [_prompt(), _media("imageUrls")]),
    }


class KieProvider(CatalogProvider):
    """Static Kie.ai catalog, listed only when a Kie key is configured."""

    requires_key = True
    static = True

    @property
    def name(self) -> ProviderType:
        return ProviderType.KIE

    def list_models(
        self,
        api_key: Optional[str] = None,
        search: Optional[str] = None,
        max_pages: int = MAX_PAGES,
    ) -> list[CatalogEntry]:
        return list(KIE_MODELS)

    def fetch_schema(self, model_id: str, api_key: Optional[str]) -> SchemaResolution:
        """Return the hand-maintained schema, or an empty one for unknown IDs."""
        schema = build_kie_schemas().get(model_id)
        if schema is None:
            logger.info(f"No Kie schema defined for {model_id}")
            return SchemaResolution()
        return schema
