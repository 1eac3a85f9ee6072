"""fal.ai catalog provider."""

import logging
from typing import Any, Optional

from ..discovery.capabilities import RELEVANT_CATEGORIES, classify_category
from ..errors import UpstreamError
from ..models import CatalogEntry, ProviderType
from ..schema.classifier import SchemaResolution, classify_schema
from ..schema.resolver import locate_request_schema
from .base import MAX_PAGES, CatalogProvider

logger = logging.getLogger(__name__)

FAL_API_BASE = "https://api.fal.ai/v1"


class FalProvider(CatalogProvider):
    """Lists active fal.ai endpoints using cursor pagination.

    fal.ai searches server-side, so results depend on the query and are
    cached per query. Only endpoints in a relevant category are kept.
    """

    client_filtered = False
    schema_requires_key = True

    def __init__(self, timeout: float = 30.0, base_url: str = FAL_API_BASE):
        super().__init__(timeout=timeout)
        self.base_url = base_url

    @property
    def name(self) -> ProviderType:
        return ProviderType.FAL

    def _headers(self, api_key: Optional[str]) -> dict[str, str]:
        return {"Authorization": f"Key {api_key}"} if api_key else {}

    @staticmethod
    def is_relevant(raw: Any) -> bool:
        if not isinstance(raw, dict) or not isinstance(raw.get("metadata"), dict):
            return False
        return raw["metadata"].get("category") in RELEVANT_CATEGORIES

    @staticmethod
    def to_entry(raw: dict[str, Any]) -> CatalogEntry:
        """Map one item of the fal.ai ``models`` array."""
        metadata = raw.get("metadata") or {}
        capability = classify_category(metadata.get("category"))
        endpoint_id = raw.get("endpoint_id") or ""
        return CatalogEntry(
            id=endpoint_id,
            name=metadata.get("display_name") or endpoint_id,
            description=metadata.get("description"),
            provider=ProviderType.FAL,
            capabilities=[capability] if capability else [],
            cover_image=metadata.get("thumbnail_url"),
            page_url=metadata.get("model_url"),
        )

    def list_models(
        self,
        api_key: Optional[str],
        search: Optional[str] = None,
        max_pages: int = MAX_PAGES,
    ) -> list[CatalogEntry]:
        """Follow ``next_cursor`` while ``has_more`` is set, up to ``max_pages``."""
        models: list[CatalogEntry] = []
        cursor: Optional[str] = None
        has_more = True
        pages = 0

        while has_more and pages < max_pages:
            params: dict[str, str] = {"status": "active"}
            if search:
                params["q"] = search
            if cursor:
                params["cursor"] = cursor

            data = self._get_object(
                f"{self.base_url}/models",
                headers=self._headers(api_key),
                params=params,
                label="fal.ai",
            )
            raw_models = data.get("models")
            if isinstance(raw_models, list):
                models.extend(self.to_entry(m) for m in raw_models if self.is_relevant(m))
            next_cursor = data.get("next_cursor")
            cursor = next_cursor if isinstance(next_cursor, str) else None
            has_more = bool(data.get("has_more")) and bool(cursor)
            pages += 1

        logger.info(f"Fetched {len(models)} relevant models from fal.ai in {pages} pages")
        return models

    def fetch_schema(self, model_id: str, api_key: Optional[str]) -> SchemaResolution:
        """Classify the endpoint's OpenAPI request body.

        A failed lookup yields an empty schema so the model stays usable
        without a form.
        """
        try:
            data = self._get_object(
                f"{self.base_url}/models",
                headers=self._headers(api_key),
                params={"endpoint_id": model_id, "expand": "openapi-3.0"},
                label="fal.ai",
            )
        except UpstreamError as e:
            logger.warning(f"fal.ai schema lookup failed for {model_id}: {e.message}")
            return SchemaResolution()

        models = data.get("models")
        first = models[0] if isinstance(models, list) and models else None
        openapi = first.get("openapi") if isinstance(first, dict) else None
        if not isinstance(openapi, dict):
            return SchemaResolution()

        located = locate_request_schema(openapi)
        if located is None:
            logger.info(f"No request body schema found for {model_id}")
            return SchemaResolution()

        schema, definitions = located
        return classify_schema(schema, definitions)
