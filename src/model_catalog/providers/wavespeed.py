"""WaveSpeed catalog provider."""

import logging
from typing import Any, Optional

from ..discovery.cache import CacheStore
from ..discovery.capabilities import WAVESPEED_CLASSIFIER, build_search_text
from ..errors import UpstreamError
from ..models import CatalogEntry, Pricing, ProviderType
from ..schema.classifier import (
    InputDescriptor,
    ParameterDescriptor,
    SchemaResolution,
    classify_schema,
)
from .base import MAX_PAGES, CatalogProvider

logger = logging.getLogger(__name__)

WAVESPEED_API_BASE = "https://api.wavespeed.ai/api/v3"

# The listing has used each of these keys for the model array and the model ID
LIST_KEYS = ("models", "data", "results")
ID_KEYS = ("model_id", "id", "modelId", "name")

VIDEO_ID_MARKERS = ("wan", "video", "kling", "luma", "minimax", "t2v", "i2v")
EDIT_ID_MARKERS = ("kontext", "img2img", "edit", "inpaint", "controlnet")


def extract_model_list(data: Any) -> list[dict[str, Any]]:
    """Return the model array from any of the known response shapes."""
    if not isinstance(data, dict):
        return []
    for key in LIST_KEYS:
        models = data.get(key)
        if models:
            return models if isinstance(models, list) else []
    return []


def model_identifier(raw: dict[str, Any]) -> Optional[str]:
    for key in ID_KEYS:
        if raw.get(key):
            return str(raw[key])
    return None


def extract_request_schema(api_schema: Any) -> Optional[dict[str, Any]]:
    """Pull ``api_schemas[0].request_schema`` out of an ``api_schema`` blob."""
    if not isinstance(api_schema, dict):
        return None
    schemas = api_schema.get("api_schemas")
    if not isinstance(schemas, list) or not schemas or not isinstance(schemas[0], dict):
        return None
    request_schema = schemas[0].get("request_schema")
    return request_schema if isinstance(request_schema, dict) else None


def static_schema(model_id: str) -> SchemaResolution:
    """Heuristic schema for models that publish none, chosen by ID keywords."""
    lowered = model_id.lower()
    seed = ParameterDescriptor(
        name="seed",
        data_type="integer",
        default=-1,
        description="Random seed for reproducibility. Use -1 for random.",
    )

    if any(marker in lowered for marker in VIDEO_ID_MARKERS):
        parameters = [
            ParameterDescriptor(
                name="num_frames",
                data_type="integer",
                default=81,
                minimum=16,
                maximum=256,
                description="Number of frames to generate",
            ),
            ParameterDescriptor(
                name="fps",
                data_type="integer",
                default=16,
                minimum=8,
                maximum=30,
                description="Frames per second for the output video",
            ),
            seed,
            ParameterDescriptor(
                name="resolution",
                data_type="enum",
                default="480p",
                enum_values=["480p", "720p", "1080p"],
                description="Output video resolution",
            ),
        ]
        inputs = []
        if "i2v" in lowered:
            inputs.append(
                InputDescriptor(
                    name="image",
                    media_type="image",
                    required=True,
                    label="Input Image",
                    description="Starting image for video generation",
                )
            )
        return SchemaResolution(parameters=parameters, inputs=inputs)

    parameters = [
        ParameterDescriptor(
            name="num_inference_steps",
            data_type="integer",
            default=28,
            minimum=1,
            maximum=100,
            description="Number of denoising steps.",
        ),
        ParameterDescriptor(
            name="guidance_scale",
            data_type="number",
            default=3.5,
            minimum=0,
            maximum=20,
            description="Guidance scale for classifier-free guidance.",
        ),
        seed,
        ParameterDescriptor(
            name="image_size",
            data_type="enum",
            default="1024x1024",
            enum_values=[
                "512x512",
                "768x768",
                "1024x1024",
                "1024x576",
                "576x1024",
                "1024x768",
                "768x1024",
                "1280x720",
                "720x1280",
            ],
            description="Output image dimensions",
        ),
    ]
    inputs = []
    if any(marker in lowered for marker in EDIT_ID_MARKERS):
        parameters.append(
            ParameterDescriptor(
                name="strength",
                data_type="number",
                default=0.8,
                minimum=0,
                maximum=1,
                description="How much to transform the input image.",
            )
        )
        inputs.append(
            InputDescriptor(
                name="images",
                media_type="image",
                required=True,
                label="Input Image",
                description="Image to transform or edit",
                is_array=True,
            )
        )
    return SchemaResolution(parameters=parameters, inputs=inputs)


class WaveSpeedProvider(CatalogProvider):
    """Lists WaveSpeed models from a single unpaginated call.

    Listing responses embed each model's ``api_schema``; these are stored in
    the injected schema store so later schema lookups need no network call.
    """

    client_filtered = True

    def __init__(
        self,
        timeout: float = 30.0,
        base_url: str = WAVESPEED_API_BASE,
        schema_store: Optional[CacheStore] = None,
    ):
        super().__init__(timeout=timeout)
        self.base_url = base_url
        self.schema_store = schema_store if schema_store is not None else CacheStore()

    @property
    def name(self) -> ProviderType:
        return ProviderType.WAVESPEED

    @staticmethod
    def schema_key(model_id: str) -> str:
        return f"wavespeed-api-schema:{model_id}"

    def _headers(self, api_key: Optional[str]) -> dict[str, str]:
        return {"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"}

    @staticmethod
    def to_entry(raw: dict[str, Any]) -> CatalogEntry:
        """Map one WaveSpeed model record."""
        model_id = model_identifier(raw) or "unknown"
        display_name = str(raw.get("display_name") or raw.get("name") or model_id)
        category = raw.get("category") or raw.get("type")
        search_text = build_search_text(
            raw.get("model_id"),
            raw.get("name") or raw.get("display_name"),
            raw.get("description"),
            category,
        )

        pricing = None
        raw_pricing = raw.get("pricing")
        if isinstance(raw_pricing, dict):
            pricing = Pricing(
                amount=raw_pricing.get("amount") or 0,
                currency=raw_pricing.get("currency") or "USD",
            )

        return CatalogEntry(
            id=model_id,
            name=display_name,
            description=raw.get("description") or None,
            provider=ProviderType.WAVESPEED,
            capabilities=WAVESPEED_CLASSIFIER.classify(search_text),
            cover_image=raw.get("thumbnail_url") or raw.get("cover_image") or raw.get("coverImage"),
            pricing=pricing,
        )

    def _fetch_raw_models(self, api_key: Optional[str]) -> list[dict[str, Any]]:
        data = self._get_json(f"{self.base_url}/models", headers=self._headers(api_key), label="WaveSpeed")
        models = extract_model_list(data)
        if not models and isinstance(data, dict) and not any(k in data for k in LIST_KEYS):
            logger.warning(f"Unexpected WaveSpeed response format with keys: {list(data)}")
        return models

    def harvest_schemas(self, raw_models: list[dict[str, Any]]) -> int:
        """Store every embedded ``api_schema`` blob. Returns how many were stored."""
        stored = 0
        for raw in raw_models:
            model_id = model_identifier(raw)
            if model_id and raw.get("api_schema"):
                self.schema_store.set(self.schema_key(model_id), raw["api_schema"])
                stored += 1
        if stored:
            logger.info(f"Cached {stored} WaveSpeed model schemas")
        return stored

    def list_models(
        self,
        api_key: Optional[str],
        search: Optional[str] = None,
        max_pages: int = MAX_PAGES,
    ) -> list[CatalogEntry]:
        raw_models = [m for m in self._fetch_raw_models(api_key) if isinstance(m, dict)]
        self.harvest_schemas(raw_models)
        logger.info(f"Fetched {len(raw_models)} models from WaveSpeed")
        return [self.to_entry(m) for m in raw_models]

    def _classify_blob(self, api_schema: Any) -> SchemaResolution:
        request_schema = extract_request_schema(api_schema)
        if request_schema is None:
            return SchemaResolution()
        return classify_schema(request_schema)

    def fetch_schema(self, model_id: str, api_key: Optional[str]) -> SchemaResolution:
        """Resolve a schema from the harvested blob, then the API, then heuristics."""
        blob = self.schema_store.get(self.schema_key(model_id))
        if blob is not None:
            result = self._classify_blob(blob)
            if not result.is_empty():
                logger.debug(f"Using harvested WaveSpeed schema for {model_id}")
                return result

        if api_key:
            try:
                raw_models = self._fetch_raw_models(api_key)
            except UpstreamError as e:
                logger.warning(f"WaveSpeed schema refetch failed for {model_id}: {e.message}")
                raw_models = []

            for raw in raw_models:
                if isinstance(raw, dict) and model_identifier(raw) == model_id and raw.get("api_schema"):
                    self.schema_store.set(self.schema_key(model_id), raw["api_schema"])
                    result = self._classify_blob(raw["api_schema"])
                    if not result.is_empty():
                        return result
                    break

        logger.info(f"Using static fallback schema for WaveSpeed model {model_id}")
        return static_schema(model_id)
