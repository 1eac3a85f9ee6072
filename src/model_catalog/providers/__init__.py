"""Catalog providers."""

from typing import Optional

from ..discovery.cache import CacheStore
from ..models import ProviderType
from .base import MAX_PAGES, CatalogProvider
from .fal import FalProvider
from .gemini import GeminiProvider
from .kie import KieProvider
from .replicate import ReplicateProvider
from .wavespeed import WaveSpeedProvider


def default_providers(
    timeout: float = 30.0, schema_store: Optional[CacheStore] = None
) -> dict[ProviderType, CatalogProvider]:
    """Create one adapter per known provider.

    Args:
        timeout: HTTP timeout for networked adapters.
        schema_store: Store for schemas harvested from WaveSpeed listings.

    Returns:
        Adapters keyed by provider tag.
    """
    return {
        ProviderType.GEMINI: GeminiProvider(timeout=timeout),
        ProviderType.KIE: KieProvider(timeout=timeout),
        ProviderType.WAVESPEED: WaveSpeedProvider(timeout=timeout, schema_store=schema_store),
        ProviderType.REPLICATE: ReplicateProvider(timeout=timeout),
        ProviderType.FAL: FalProvider(timeout=timeout),
    }


__all__ = [
    "MAX_PAGES",
    "CatalogProvider",
    "FalProvider",
    "GeminiProvider",
    "KieProvider",
    "ReplicateProvider",
    "WaveSpeedProvider",
    "default_providers",
]
