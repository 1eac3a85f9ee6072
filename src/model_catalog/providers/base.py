"""Base class for catalog providers."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

import httpx

from ..errors import UpstreamError
from ..models import CatalogEntry, ProviderType
from ..schema.classifier import SchemaResolution

logger = logging.getLogger(__name__)

# Upper bound on pages walked per listing call; extra pages are silently dropped
MAX_PAGES = 15


class CatalogProvider(ABC):
    """Abstract base class for catalog providers.

    Subclasses set ``client_filtered`` to False when the upstream API performs
    search itself; in that case the query participates in the cache key.
    Static providers serve a hand-curated list and never touch the network
    when listing.
    """

    client_filtered: bool = True
    requires_key: bool = True
    static: bool = False
    supports_schema: bool = True
    schema_requires_key: bool = False

    def __init__(self, timeout: float = 30.0):
        self.timeout = timeout

    @property
    @abstractmethod
    def name(self) -> ProviderType:
        """Return the provider tag."""
        ...

    @abstractmethod
    def list_models(
        self,
        api_key: Optional[str],
        search: Optional[str] = None,
        max_pages: int = MAX_PAGES,
    ) -> list[CatalogEntry]:
        """List models from this provider.

        Args:
            api_key: Provider API key, or None.
            search: Search query, only used by server-side searchable providers.
            max_pages: Pagination cap.

        Returns:
            The full (unfiltered for client-filtered providers) model list.

        Raises:
            UpstreamError: If any page request fails.
        """
        ...

    def fetch_schema(self, model_id: str, api_key: Optional[str]) -> SchemaResolution:
        """Fetch and classify the request schema for a model.

        Raises:
            UpstreamError: If the schema cannot be fetched.
        """
        return SchemaResolution()

    def is_available(self, api_key: Optional[str]) -> bool:
        """Check whether the provider can be used with the given key."""
        return bool(api_key) or not self.requires_key

    def _get_json(
        self,
        url: str,
        headers: Optional[dict[str, str]] = None,
        params: Optional[dict[str, Any]] = None,
        label: str = "",
    ) -> Any:
        """GET a URL and decode JSON, converting failures to UpstreamError."""
        label = label or self.name.value
        try:
            response = httpx.get(url, headers=headers or {}, params=params, timeout=self.timeout)
        except httpx.HTTPError as e:
            raise UpstreamError(f"{label} API error: {e}", provider=self.name.value)

        if not response.is_success:
            raise UpstreamError(
                f"{label} API error: {response.status_code}",
                provider=self.name.value,
                status=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(f"{label} returned invalid JSON: {e}", provider=self.name.value)

    def _get_object(
        self,
        url: str,
        headers: Optional[dict[str, str]] = None,
        params: Optional[dict[str, Any]] = None,
        label: str = "",
    ) -> dict[str, Any]:
        """GET a URL whose body must be a JSON object."""
        data = self._get_json(url, headers=headers, params=params, label=label)
        if not isinstance(data, dict):
            label = label or self.name.value
            raise UpstreamError(f"{label} returned an unexpected response", provider=self.name.value)
        return data
