"""Gemini image models (static catalog)."""

from typing import Optional

from ..models import Capability, CatalogEntry, Pricing, ProviderType
from .base import MAX_PAGES, CatalogProvider

GEMINI_MODELS = [
    CatalogEntry(
        id="nano-banana",
        name="Nano Banana",
        description=(
            "Fast image generation with Gemini 2.5 Flash. Supports text-to-image "
            "and image-to-image with aspect ratio control."
        ),
        provider=ProviderType.GEMINI,
        capabilities=[Capability.TEXT_TO_IMAGE, Capability.IMAGE_TO_IMAGE],
        pricing=Pricing(amount=0.039),
    ),
    CatalogEntry(
        id="nano-banana-pro",
        name="Nano Banana Pro",
        description=(
            "High-quality image generation with Gemini 3 Pro. Supports text-to-image, "
            "image-to-image, resolution control (1K/2K/4K), and Google Search grounding."
        ),
        provider=ProviderType.GEMINI,
        capabilities=[Capability.TEXT_TO_IMAGE, Capability.IMAGE_TO_IMAGE],
        pricing=Pricing(amount=0.134),
    ),
]


class GeminiProvider(CatalogProvider):
    """Always-available provider backed by a fixed model list."""

    requires_key = False
    static = True
    supports_schema = False

    @property
    def name(self) -> ProviderType:
        return ProviderType.GEMINI

    def list_models(
        self,
        api_key: Optional[str] = None,
        search: Optional[str] = None,
        max_pages: int = MAX_PAGES,
    ) -> list[CatalogEntry]:
        return list(GEMINI_MODELS)
