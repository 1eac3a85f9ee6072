"""Catalog aggregation across providers and schema lookup.

Listing fans out one task per selected provider. Each task reads the
provider's cache entry (unless refreshing), fetches and caches the full
listing on a miss, then applies the search filter locally when the provider
cannot search server-side. Failures are captured per provider and never
abort the other tasks.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx

from .config import CREDENTIAL_SOURCES, Credentials
from .discovery.cache import CacheStore
from .discovery.model_filter import ModelFilter
from .errors import (
    AuthError,
    CatalogError,
    ConfigurationError,
    TotalFailureError,
    UpstreamError,
    ValidationError,
)
from .models import Capability, CatalogEntry, ProviderType
from .providers.base import MAX_PAGES, CatalogProvider
from .schema.classifier import SchemaResolution

logger = logging.getLogger(__name__)

PROVIDER_LABELS: dict[ProviderType, str] = {
    ProviderType.FAL: "fal.ai",
    ProviderType.GEMINI: "Gemini",
    ProviderType.KIE: "Kie.ai",
    ProviderType.REPLICATE: "Replicate",
    ProviderType.WAVESPEED: "WaveSpeed",
}


@dataclass
class CatalogQuery:
    """Parsed catalog listing request."""

    provider: Optional[str] = None
    search: Optional[str] = None
    refresh: bool = False
    capabilities: list[Capability] = field(default_factory=list)


@dataclass
class ProviderOutcome:
    """Result of fetching one provider's listing."""

    provider: ProviderType
    success: bool
    models: list[CatalogEntry] = field(default_factory=list)
    cached: bool = False
    error: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"success": self.success, "count": len(self.models)}
        if self.success:
            data["cached"] = self.cached
        if self.error:
            data["error"] = self.error
        return data


@dataclass
class CatalogResult:
    """Merged, filtered and sorted catalog."""

    models: list[CatalogEntry]
    cached: bool
    providers: dict[str, ProviderOutcome]
    errors: list[str] = field(default_factory=list)


@dataclass
class SchemaResult:
    """Classified schema plus cache provenance."""

    resolution: SchemaResolution
    cached: bool = False


def _missing_key_message(provider: ProviderType) -> str:
    header, env_var = CREDENTIAL_SOURCES[provider]
    return f"{PROVIDER_LABELS[provider]} API key required. Set {env_var} or send the {header} header."


class CatalogAggregator:
    """Coordinates provider adapters, the listing cache and the schema cache."""

    def __init__(
        self,
        cache: CacheStore,
        providers: dict[ProviderType, CatalogProvider],
        schema_cache: Optional[CacheStore] = None,
        max_workers: int = 5,
        page_cap: int = MAX_PAGES,
    ):
        """Initialize the aggregator.

        Args:
            cache: Store for per-provider listings.
            providers: Adapters keyed by provider tag, in selection order.
            schema_cache: Store for classified schemas, keyed ``provider:model_id``.
            max_workers: Upper bound on concurrent provider fetches.
            page_cap: Pagination cap passed to each adapter.
        """
        self.cache = cache
        self.providers = providers
        self.schema_cache = schema_cache if schema_cache is not None else CacheStore()
        self.max_workers = max(1, max_workers)
        self.page_cap = page_cap

    def _parse_provider(self, value: str) -> Optional[ProviderType]:
        try:
            provider = ProviderType(value.strip().lower())
        except ValueError:
            return None
        return provider if provider in self.providers else None

    def select_providers(
        self, provider_filter: Optional[str], credentials: Credentials
    ) -> list[ProviderType]:
        """Pick the providers to query for a listing request.

        Raises:
            ConfigurationError: For an unknown provider, an explicitly requested
                provider without credentials, or when no provider is usable.
        """
        if provider_filter:
            provider = self._parse_provider(provider_filter)
            if provider is None:
                valid = ", ".join(p.value for p in self.providers)
                raise ConfigurationError(
                    f"Unknown provider: {provider_filter}. Valid providers: {valid}"
                )
            if not self.providers[provider].is_available(credentials.get(provider)):
                raise ConfigurationError(_missing_key_message(provider), provider=provider.value)
            return [provider]

        selected = [
            p for p, adapter in self.providers.items() if adapter.is_available(credentials.get(p))
        ]
        if not selected:
            env_vars = ", ".join(env for _, env in CREDENTIAL_SOURCES.values())
            raise ConfigurationError(f"No providers available. Set one of {env_vars}.")
        return selected

    def fetch_provider(
        self, provider: ProviderType, query: CatalogQuery, api_key: Optional[str]
    ) -> ProviderOutcome:
        """Fetch one provider's listing through the cache.

        Never raises for provider failures; they are returned as a failed
        outcome carrying the error message.
        """
        adapter = self.providers[provider]

        if adapter.static:
            models = adapter.list_models(api_key)
            if query.search:
                models = ModelFilter(models).search(query.search).to_list()
            return ProviderOutcome(provider=provider, success=True, models=models, cached=True)

        key = self.cache.build_key(provider.value, query.search, adapter.client_filtered)
        models: Optional[list[CatalogEntry]] = None
        from_cache = False

        if not query.refresh:
            models = self.cache.get(key)
            from_cache = models is not None

        if models is None:
            try:
                search = None if adapter.client_filtered else query.search
                models = adapter.list_models(api_key, search=search, max_pages=self.page_cap)
            except (CatalogError, httpx.HTTPError, ValueError) as e:
                message = e.message if isinstance(e, CatalogError) else str(e)
                logger.error(f"{provider.value}: {message}")
                return ProviderOutcome(provider=provider, success=False, error=message)
            self.cache.set(key, models)

        if adapter.client_filtered and query.search:
            models = ModelFilter(models).search(query.search).to_list()

        return ProviderOutcome(provider=provider, success=True, models=models, cached=from_cache)

    def list_catalog(self, query: CatalogQuery, credentials: Credentials) -> CatalogResult:
        """Aggregate, filter and sort models from every selected provider.

        Args:
            query: Provider filter, search text, refresh flag and capability filter.
            credentials: Per-request API keys.

        Returns:
            CatalogResult with models sorted by provider then name.

        Raises:
            ConfigurationError: If no provider can be queried.
            TotalFailureError: If nothing was returned and every networked
                provider failed.
        """
        selected = self.select_providers(query.provider, credentials)
        logger.info(f"Listing models from: {', '.join(p.value for p in selected)}")

        workers = min(self.max_workers, len(selected))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {
                p: executor.submit(self.fetch_provider, p, query, credentials.get(p)) for p in selected
            }
            outcomes = [futures[p].result() for p in selected]

        merged: list[CatalogEntry] = []
        errors: list[str] = []
        seen: set[tuple[ProviderType, str]] = set()
        for outcome in outcomes:
            if outcome.success:
                for model in outcome.models:
                    # IDs are unique per provider; pages can overlap
                    if (model.provider, model.id) not in seen:
                        seen.add((model.provider, model.id))
                        merged.append(model)
            else:
                errors.append(f"{outcome.provider.value}: {outcome.error}")

        networked = [o for o in outcomes if not self.providers[o.provider].static]
        if not merged and errors and len(errors) == len(networked):
            raise TotalFailureError(errors)

        models = ModelFilter.apply_filters(merged, capabilities=query.capabilities)
        cached = any(o.cached for o in outcomes) and all(o.cached for o in outcomes)
        return CatalogResult(
            models=models,
            cached=cached,
            providers={o.provider.value: o for o in outcomes},
            errors=errors,
        )

    def get_schema(
        self, provider_value: Optional[str], model_id: str, credentials: Credentials
    ) -> SchemaResult:
        """Resolve a model's request schema into parameters and inputs.

        Raises:
            ValidationError: Unknown provider or one without schema support.
            AuthError: The provider needs a key for schema lookup and none is set.
            UpstreamError: Any other fetch or parse failure.
        """
        provider = self._parse_provider(provider_value) if provider_value else None
        if provider is None or not self.providers[provider].supports_schema:
            options = ", or ".join(
                f"?provider={p.value}" for p, a in self.providers.items() if a.supports_schema
            )
            raise ValidationError(f"Invalid or missing provider. Use {options}")

        key = f"{provider.value}:{model_id}"
        cached = self.schema_cache.get(key)
        if cached is not None:
            return SchemaResult(resolution=cached, cached=True)

        adapter = self.providers[provider]
        api_key = credentials.get(provider)
        if adapter.schema_requires_key and not api_key:
            raise AuthError(_missing_key_message(provider), provider=provider.value)

        try:
            resolution = adapter.fetch_schema(model_id, api_key)
        except UpstreamError as e:
            logger.error(f"Schema fetch failed for {key}: {e.message}")
            raise
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Schema fetch failed for {key}: {e}")
            raise UpstreamError(str(e), provider=provider.value)

        self.schema_cache.set(key, resolution)
        logger.info(
            f"Resolved schema for {key}: {len(resolution.parameters)} parameters, "
            f"{len(resolution.inputs)} inputs"
        )
        return SchemaResult(resolution=resolution, cached=False)

    def get_stats(self) -> dict[str, Any]:
        """Statistics for both caches."""
        return {"catalog": self.cache.get_stats(), "schema": self.schema_cache.get_stats()}
