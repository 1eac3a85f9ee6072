"""Tests for catalog aggregation and schema lookup."""

from typing import Optional
from unittest.mock import patch

import httpx
import pytest

from model_catalog.aggregator import CatalogAggregator, CatalogQuery
from model_catalog.config import Credentials
from model_catalog.discovery.cache import CacheStore
from model_catalog.errors import (
    AuthError,
    ConfigurationError,
    TotalFailureError,
    UpstreamError,
    ValidationError,
)
from model_catalog.models import Capability, CatalogEntry, ProviderType
from model_catalog.providers.base import MAX_PAGES, CatalogProvider
from model_catalog.providers.fal import FAL_API_BASE, FalProvider
from model_catalog.providers.gemini import GeminiProvider
from model_catalog.providers.replicate import REPLICATE_API_BASE, ReplicateProvider
from model_catalog.schema.classifier import ParameterDescriptor, SchemaResolution


class FakeProvider(CatalogProvider):
    """In-memory adapter that records calls."""

    def __init__(
        self,
        provider: ProviderType,
        models=None,
        error: Optional[Exception] = None,
        client_filtered: bool = True,
        schema: Optional[SchemaResolution] = None,
        schema_error: Optional[Exception] = None,
        schema_requires_key: bool = False,
    ):
        super().__init__()
        self._name = provider
        self.models = models or []
        self.error = error
        self.client_filtered = client_filtered
        self.schema = schema or SchemaResolution()
        self.schema_error = schema_error
        self.schema_requires_key = schema_requires_key
        self.list_calls = []
        self.schema_calls = []

    @property
    def name(self) -> ProviderType:
        return self._name

    def list_models(self, api_key, search=None, max_pages=MAX_PAGES):
        self.list_calls.append(search)
        if self.error:
            raise self.error
        return list(self.models)

    def fetch_schema(self, model_id, api_key):
        self.schema_calls.append(model_id)
        if self.schema_error:
            raise self.schema_error
        return self.schema


def _entry(id, name, provider, capabilities=None):
    return CatalogEntry(
        id=id,
        name=name,
        provider=provider,
        capabilities=capabilities or [Capability.TEXT_TO_IMAGE],
    )


ALL_KEYS = Credentials(
    keys={
        ProviderType.REPLICATE: "r8-key",
        ProviderType.FAL: "fal-key",
        ProviderType.KIE: "kie-key",
        ProviderType.WAVESPEED: "ws-key",
    }
)


@pytest.fixture
def replicate():
    return FakeProvider(
        ProviderType.REPLICATE,
        models=[
            _entry("owner/zeta", "zeta", ProviderType.REPLICATE),
            _entry("owner/flux-dev", "flux-dev", ProviderType.REPLICATE),
            _entry("owner/kling", "kling", ProviderType.REPLICATE, [Capability.TEXT_TO_VIDEO]),
        ],
    )


@pytest.fixture
def fal():
    return FakeProvider(
        ProviderType.FAL,
        models=[_entry("fal-ai/flux", "FLUX", ProviderType.FAL)],
        client_filtered=False,
    )


def _aggregator(*providers, **kwargs):
    return CatalogAggregator(
        cache=CacheStore(),
        providers={p.name: p for p in providers},
        **kwargs,
    )


class TestSelectProviders:
    """Tests for provider selection."""

    def test_skips_providers_without_keys(self, replicate, fal):
        """Test that only providers with credentials are selected."""
        aggregator = _aggregator(GeminiProvider(), replicate, fal)
        credentials = Credentials(keys={ProviderType.FAL: "fal-key"})

        selected = aggregator.select_providers(None, credentials)

        assert selected == [ProviderType.GEMINI, ProviderType.FAL]

    def test_unknown_provider(self, replicate):
        """Test an unrecognized provider filter."""
        aggregator = _aggregator(replicate)

        with pytest.raises(ConfigurationError) as exc_info:
            aggregator.select_providers("midjourney", ALL_KEYS)

        assert exc_info.value.message == "Unknown provider: midjourney. Valid providers: replicate"
        assert exc_info.value.status_code == 400

    def test_explicit_provider_without_key(self, replicate):
        """Test requesting a keyed provider with no credentials."""
        aggregator = _aggregator(replicate)

        with pytest.raises(ConfigurationError) as exc_info:
            aggregator.select_providers("replicate", Credentials())

        assert "REPLICATE_API_KEY" in exc_info.value.message
        assert "X-Replicate-Key" in exc_info.value.message

    def test_explicit_provider_is_case_insensitive(self, replicate, fal):
        """Test that the provider filter ignores case."""
        aggregator = _aggregator(replicate, fal)

        assert aggregator.select_providers("FAL", ALL_KEYS) == [ProviderType.FAL]

    def test_no_providers_available(self, replicate):
        """Test that no credentials at all is a configuration error."""
        aggregator = _aggregator(replicate)

        with pytest.raises(ConfigurationError) as exc_info:
            aggregator.select_providers(None, Credentials())

        assert exc_info.value.message.startswith("No providers available")


class TestListCatalog:
    """Tests for list_catalog."""

    def test_merges_and_sorts(self, replicate, fal):
        """Test merging providers ordered by provider then name."""
        aggregator = _aggregator(replicate, fal)

        result = aggregator.list_catalog(CatalogQuery(), ALL_KEYS)

        assert [m.id for m in result.models] == [
            "fal-ai/flux",
            "owner/flux-dev",
            "owner/kling",
            "owner/zeta",
        ]
        assert result.errors == []
        assert result.cached is False
        assert result.providers["replicate"].to_dict() == {"success": True, "count": 3, "cached": False}

    @patch("model_catalog.providers.base.httpx.get")
    def test_paginated_providers(self, mock_get):
        """Test that every page of every provider is merged."""

        def respond(url, headers=None, params=None, timeout=None):
            if url.startswith(REPLICATE_API_BASE):
                return httpx.Response(
                    200,
                    json={
                        "results": [{"owner": "r", "name": "one"}, {"owner": "r", "name": "two"}],
                        "next": None,
                    },
                )
            cursor = (params or {}).get("cursor")
            pages = {None: ("c2", "a"), "c2": ("c3", "b"), "c3": (None, "c")}
            next_cursor, endpoint = pages[cursor]
            return httpx.Response(
                200,
                json={
                    "models": [{"endpoint_id": endpoint, "metadata": {"category": "text-to-image"}}],
                    "has_more": next_cursor is not None,
                    "next_cursor": next_cursor,
                },
            )

        mock_get.side_effect = respond
        aggregator = _aggregator(ReplicateProvider(), FalProvider())

        result = aggregator.list_catalog(CatalogQuery(), ALL_KEYS)

        assert len(result.models) == 5
        assert result.providers["replicate"].to_dict()["count"] == 2
        assert result.providers["fal"].to_dict()["count"] == 3
        assert mock_get.call_count == 4
        assert f"{FAL_API_BASE}/models" in {c[0][0] for c in mock_get.call_args_list}

    def test_deduplicates_within_provider(self):
        """Test that repeated IDs from one provider are merged once."""
        entry = _entry("owner/flux", "flux", ProviderType.REPLICATE)
        other = _entry("owner/flux", "flux", ProviderType.FAL)
        aggregator = _aggregator(
            FakeProvider(ProviderType.REPLICATE, models=[entry, entry]),
            FakeProvider(ProviderType.FAL, models=[other]),
        )

        result = aggregator.list_catalog(CatalogQuery(), ALL_KEYS)

        assert [(m.provider.value, m.id) for m in result.models] == [
            ("fal", "owner/flux"),
            ("replicate", "owner/flux"),
        ]

    def test_partial_failure(self, replicate):
        """Test that one failing provider does not hide the others."""
        failing = FakeProvider(ProviderType.FAL, error=UpstreamError("fal.ai API error: 500"))
        aggregator = _aggregator(replicate, failing)

        result = aggregator.list_catalog(CatalogQuery(), ALL_KEYS)

        assert len(result.models) == 3
        assert result.errors == ["fal: fal.ai API error: 500"]
        assert result.providers["fal"].to_dict() == {
            "success": False,
            "count": 0,
            "error": "fal.ai API error: 500",
        }

    def test_failure_is_not_cached(self, replicate):
        """Test that a failed fetch is retried on the next request."""
        failing = FakeProvider(ProviderType.FAL, error=httpx.ConnectError("down"))
        aggregator = _aggregator(replicate, failing)

        aggregator.list_catalog(CatalogQuery(), ALL_KEYS)
        aggregator.list_catalog(CatalogQuery(), ALL_KEYS)

        assert len(failing.list_calls) == 2

    def test_total_failure(self):
        """Test that every provider failing raises."""
        aggregator = _aggregator(
            FakeProvider(ProviderType.REPLICATE, error=UpstreamError("Replicate API error: 401")),
            FakeProvider(ProviderType.FAL, error=UpstreamError("fal.ai API error: 500")),
        )

        with pytest.raises(TotalFailureError) as exc_info:
            aggregator.list_catalog(CatalogQuery(), ALL_KEYS)

        assert exc_info.value.message == (
            "All providers failed: replicate: Replicate API error: 401; fal: fal.ai API error: 500"
        )
        assert exc_info.value.status_code == 500

    def test_static_models_survive_network_failure(self):
        """Test that static catalogs still answer when networked providers fail."""
        aggregator = _aggregator(
            GeminiProvider(),
            FakeProvider(ProviderType.REPLICATE, error=UpstreamError("Replicate API error: 500")),
        )

        result = aggregator.list_catalog(CatalogQuery(), ALL_KEYS)

        assert [m.id for m in result.models] == ["nano-banana", "nano-banana-pro"]
        assert result.errors == ["replicate: Replicate API error: 500"]

    @patch("model_catalog.providers.base.httpx.get")
    def test_unexpected_body_is_a_provider_failure(self, mock_get):
        """Test that a non-object listing body fails only that provider."""
        mock_get.return_value = httpx.Response(200, json=["not", "an", "object"])
        aggregator = _aggregator(GeminiProvider(), ReplicateProvider())

        result = aggregator.list_catalog(CatalogQuery(), ALL_KEYS)

        assert [m.id for m in result.models] == ["nano-banana", "nano-banana-pro"]
        assert result.errors == ["replicate: Replicate returned an unexpected response"]
        assert result.providers["replicate"].to_dict() == {
            "success": False,
            "count": 0,
            "error": "Replicate returned an unexpected response",
        }

    @patch("model_catalog.providers.base.httpx.get")
    def test_malformed_items_are_skipped(self, mock_get):
        """Test that null listing items do not fail the request."""

        def respond(url, headers=None, params=None, timeout=None):
            if url.startswith(REPLICATE_API_BASE):
                return httpx.Response(
                    200, json={"results": [None, {"owner": "r", "name": "one"}], "next": None}
                )
            return httpx.Response(
                200,
                json={
                    "models": [None, {"endpoint_id": "fal-ai/flux", "metadata": {"category": "text-to-image"}}],
                    "has_more": False,
                },
            )

        mock_get.side_effect = respond
        aggregator = _aggregator(GeminiProvider(), ReplicateProvider(), FalProvider())

        result = aggregator.list_catalog(CatalogQuery(), ALL_KEYS)

        assert [m.id for m in result.models] == [
            "fal-ai/flux",
            "nano-banana",
            "nano-banana-pro",
            "r/one",
        ]
        assert result.errors == []
        assert result.providers["replicate"].to_dict()["count"] == 1
        assert result.providers["fal"].to_dict()["count"] == 1

    def test_total_failure_with_static_provider(self):
        """Test that static providers with no matches do not mask total failure."""
        aggregator = _aggregator(
            GeminiProvider(),
            FakeProvider(ProviderType.REPLICATE, error=UpstreamError("Replicate API error: 500")),
        )

        with pytest.raises(TotalFailureError):
            aggregator.list_catalog(CatalogQuery(search="kling"), ALL_KEYS)

    def test_cache_hit(self, replicate):
        """Test that a second request is served from cache."""
        aggregator = _aggregator(replicate)

        first = aggregator.list_catalog(CatalogQuery(), ALL_KEYS)
        second = aggregator.list_catalog(CatalogQuery(), ALL_KEYS)

        assert len(replicate.list_calls) == 1
        assert first.cached is False
        assert second.cached is True
        assert [m.id for m in second.models] == [m.id for m in first.models]

    def test_refresh_bypasses_cache(self, replicate):
        """Test that refresh always refetches and reports uncached."""
        aggregator = _aggregator(replicate)
        aggregator.list_catalog(CatalogQuery(), ALL_KEYS)

        result = aggregator.list_catalog(CatalogQuery(refresh=True), ALL_KEYS)

        assert len(replicate.list_calls) == 2
        assert result.cached is False

    def test_client_filtered_search_shares_cache(self, replicate):
        """Test that different searches reuse one full listing."""
        aggregator = _aggregator(replicate)

        flux = aggregator.list_catalog(CatalogQuery(search="flux"), ALL_KEYS)
        kling = aggregator.list_catalog(CatalogQuery(search="KLING"), ALL_KEYS)

        assert replicate.list_calls == [None]
        assert [m.id for m in flux.models] == ["owner/flux-dev"]
        assert [m.id for m in kling.models] == ["owner/kling"]
        assert kling.cached is True

    def test_server_search_cached_per_query(self, fal):
        """Test that server-searched providers fetch once per distinct query."""
        aggregator = _aggregator(fal)

        aggregator.list_catalog(CatalogQuery(search="flux"), ALL_KEYS)
        aggregator.list_catalog(CatalogQuery(search=" Flux "), ALL_KEYS)
        aggregator.list_catalog(CatalogQuery(search="kling"), ALL_KEYS)

        assert fal.list_calls == ["flux", "kling"]

    def test_cached_requires_every_provider(self, replicate, fal):
        """Test that cached is true only when every provider was cached."""
        aggregator = _aggregator(replicate, fal)
        aggregator.list_catalog(CatalogQuery(search="a"), ALL_KEYS)

        result = aggregator.list_catalog(CatalogQuery(search="b"), ALL_KEYS)

        assert result.providers["replicate"].cached is True
        assert result.providers["fal"].cached is False
        assert result.cached is False

    def test_static_only_is_cached(self):
        """Test that static catalogs report as cached."""
        result = _aggregator(GeminiProvider()).list_catalog(CatalogQuery(), Credentials())

        assert result.cached is True

    def test_capability_filter(self, replicate):
        """Test filtering merged results by capability."""
        aggregator = _aggregator(replicate)

        result = aggregator.list_catalog(
            CatalogQuery(capabilities=[Capability.TEXT_TO_VIDEO]), ALL_KEYS
        )

        assert [m.id for m in result.models] == ["owner/kling"]
        assert result.providers["replicate"].to_dict()["count"] == 3

    def test_provider_filter(self, replicate, fal):
        """Test that an explicit provider limits the fan-out."""
        aggregator = _aggregator(replicate, fal)

        result = aggregator.list_catalog(CatalogQuery(provider="replicate"), ALL_KEYS)

        assert list(result.providers) == ["replicate"]
        assert fal.list_calls == []


class TestGetSchema:
    """Tests for get_schema."""

    def _schema(self):
        return SchemaResolution(parameters=[ParameterDescriptor(name="seed", data_type="integer")])

    def test_missing_provider(self):
        """Test that the provider query parameter is required."""
        aggregator = _aggregator(GeminiProvider(), FakeProvider(ProviderType.REPLICATE))

        with pytest.raises(ValidationError) as exc_info:
            aggregator.get_schema(None, "owner/model", ALL_KEYS)

        assert exc_info.value.message == "Invalid or missing provider. Use ?provider=replicate"
        assert exc_info.value.status_code == 400

    def test_provider_without_schema_support(self):
        """Test that static catalogs without schemas are rejected."""
        aggregator = _aggregator(GeminiProvider())

        with pytest.raises(ValidationError):
            aggregator.get_schema("gemini", "nano-banana", ALL_KEYS)

    def test_missing_key(self):
        """Test that providers needing a key for schemas report 401."""
        provider = FakeProvider(ProviderType.REPLICATE, schema_requires_key=True)
        aggregator = _aggregator(provider)

        with pytest.raises(AuthError) as exc_info:
            aggregator.get_schema("replicate", "owner/model", Credentials())

        assert exc_info.value.status_code == 401
        assert provider.schema_calls == []

    def test_success_and_cache(self):
        """Test a schema lookup followed by a cached lookup."""
        provider = FakeProvider(ProviderType.FAL, schema=self._schema())
        aggregator = _aggregator(provider)

        first = aggregator.get_schema("fal", "fal-ai/flux/dev", ALL_KEYS)
        second = aggregator.get_schema("fal", "fal-ai/flux/dev", ALL_KEYS)

        assert first.cached is False
        assert second.cached is True
        assert second.resolution.parameters[0].name == "seed"
        assert provider.schema_calls == ["fal-ai/flux/dev"]
        assert len(aggregator.schema_cache) == 1

    def test_upstream_error_propagates(self):
        """Test that fetch failures surface as UpstreamError."""
        provider = FakeProvider(
            ProviderType.REPLICATE, schema_error=UpstreamError("Replicate API error: 404")
        )
        aggregator = _aggregator(provider)

        with pytest.raises(UpstreamError) as exc_info:
            aggregator.get_schema("replicate", "owner/missing", ALL_KEYS)

        assert exc_info.value.message == "Replicate API error: 404"
        assert len(aggregator.schema_cache) == 0

    def test_transport_error_wrapped(self):
        """Test that raw transport errors are converted."""
        provider = FakeProvider(ProviderType.REPLICATE, schema_error=httpx.ReadTimeout("timed out"))
        aggregator = _aggregator(provider)

        with pytest.raises(UpstreamError) as exc_info:
            aggregator.get_schema("replicate", "owner/model", ALL_KEYS)

        assert exc_info.value.provider == "replicate"

    def test_get_stats(self):
        """Test statistics for both caches."""
        stats = _aggregator(GeminiProvider()).get_stats()

        assert set(stats) == {"catalog", "schema"}
        assert stats["catalog"]["size"] == 0
