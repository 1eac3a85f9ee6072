"""Replicate catalog provider."""

import logging
from typing import Any, Optional

from ..discovery.capabilities import REPLICATE_CLASSIFIER, build_search_text
from ..models import CatalogEntry, ProviderType
from ..schema.classifier import SchemaResolution, classify_schema
from .base import MAX_PAGES, CatalogProvider

logger = logging.getLogger(__name__)

REPLICATE_API_BASE = "https://api.replicate.com/v1"


class ReplicateProvider(CatalogProvider):
    """Lists public Replicate models by following ``next`` page links.

    The Replicate search endpoint is unreliable, so the full listing is
    fetched and searched locally.
    """

    client_filtered = True
    schema_requires_key = True

    def __init__(self, timeout: float = 30.0, base_url: str = REPLICATE_API_BASE):
        super().__init__(timeout=timeout)
        self.base_url = base_url

    @property
    def name(self) -> ProviderType:
        return ProviderType.REPLICATE

    def _headers(self, api_key: Optional[str]) -> dict[str, str]:
        return {"Authorization": f"Bearer {api_key}"}

    @staticmethod
    def to_entry(raw: dict[str, Any]) -> CatalogEntry:
        """Map one item of the Replicate ``results`` array."""
        owner = raw.get("owner") or ""
        model_name = raw.get("name") or ""
        description = raw.get("description")
        return CatalogEntry(
            id=f"{owner}/{model_name}",
            name=model_name,
            description=description,
            provider=ProviderType.REPLICATE,
            capabilities=REPLICATE_CLASSIFIER.classify(build_search_text(model_name, description)),
            cover_image=raw.get("cover_image_url"),
            page_url=raw.get("url"),
        )

    def list_models(
        self,
        api_key: Optional[str],
        search: Optional[str] = None,
        max_pages: int = MAX_PAGES,
    ) -> list[CatalogEntry]:
        """Walk the paginated model listing up to ``max_pages`` pages."""
        models: list[CatalogEntry] = []
        url: Optional[str] = f"{self.base_url}/models"
        pages = 0

        while url and pages < max_pages:
            data = self._get_object(url, headers=self._headers(api_key), label="Replicate")
            results = data.get("results")
            if isinstance(results, list):
                models.extend(self.to_entry(m) for m in results if isinstance(m, dict))
            next_url = data.get("next")
            url = next_url if isinstance(next_url, str) else None
            pages += 1

        if url:
            logger.debug(f"Replicate listing truncated after {pages} pages")
        logger.info(f"Fetched {len(models)} models from Replicate in {pages} pages")
        return models

    def fetch_schema(self, model_id: str, api_key: Optional[str]) -> SchemaResolution:
        """Classify ``latest_version.openapi_schema.components.schemas.Input``."""
        data = self._get_object(
            f"{self.base_url}/models/{model_id}",
            headers=self._headers(api_key),
            label="Replicate",
        )
        latest_version = data.get("latest_version")
        openapi = latest_version.get("openapi_schema") if isinstance(latest_version, dict) else None
        if not isinstance(openapi, dict):
            logger.info(f"No OpenAPI schema published for {model_id}")
            return SchemaResolution()

        components = openapi.get("components")
        schemas = components.get("schemas") if isinstance(components, dict) else None
        if not isinstance(schemas, dict):
            return SchemaResolution()
        input_schema = schemas.get("Input")
        if not isinstance(input_schema, dict):
            return SchemaResolution()
        return classify_schema(input_schema, schemas)
