"""HTTP surface for the model catalog."""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from . import __version__
from .aggregator import CatalogAggregator, CatalogQuery
from .config import Credentials, Settings
from .discovery.cache import CacheStore
from .discovery.model_filter import parse_capabilities
from .errors import CatalogError
from .providers import default_providers
from .responses import catalog_envelope, error_envelope, schema_envelope

logger = logging.getLogger(__name__)


def build_aggregator(settings: Settings) -> CatalogAggregator:
    """Wire caches and provider adapters from settings."""
    schema_cache = CacheStore(ttl_seconds=settings.schema_cache_ttl)
    # Harvested WaveSpeed blobs share the listing's lifetime
    harvested = CacheStore(ttl_seconds=settings.cache_ttl)
    return CatalogAggregator(
        cache=CacheStore(ttl_seconds=settings.cache_ttl),
        providers=default_providers(timeout=settings.timeout, schema_store=harvested),
        schema_cache=schema_cache,
        max_workers=settings.max_workers,
    )


def create_app(
    aggregator: Optional[CatalogAggregator] = None, settings: Optional[Settings] = None
) -> FastAPI:
    """Create the FastAPI application.

    Args:
        aggregator: Preconfigured aggregator. Built from settings when omitted.
        settings: Service settings. Read from the environment when omitted.

    Returns:
        The configured application.
    """
    settings = settings or Settings.from_env()
    aggregator = aggregator or build_aggregator(settings)

    app = FastAPI(title="Model Catalog", version=__version__)
    app.state.aggregator = aggregator

    @app.get("/health")
    def health():
        return {"status": "ok", "version": __version__, "cache": aggregator.get_stats()}

    @app.get("/api/models")
    def list_models(
        request: Request,
        provider: Optional[str] = None,
        search: Optional[str] = None,
        refresh: Optional[str] = None,
        capabilities: Optional[str] = None,
    ):
        query = CatalogQuery(
            provider=provider or None,
            search=search or None,
            refresh=refresh == "true",
            capabilities=parse_capabilities(capabilities),
        )
        try:
            result = aggregator.list_catalog(query, Credentials.resolve(request.headers))
            status, body = catalog_envelope(result)
        except CatalogError as e:
            logger.warning(f"Catalog request failed: {e.message}")
            status, body = error_envelope(e)
        except Exception as e:
            status, body = error_envelope(e)
        return JSONResponse(status_code=status, content=body)

    @app.get("/api/models/{model_id:path}")
    def get_model_schema(request: Request, model_id: str, provider: Optional[str] = None):
        try:
            result = aggregator.get_schema(provider, model_id, Credentials.resolve(request.headers))
            status, body = schema_envelope(result)
        except CatalogError as e:
            logger.warning(f"Schema request for {model_id} failed: {e.message}")
            status, body = error_envelope(e)
        except Exception as e:
            status, body = error_envelope(e)
        return JSONResponse(status_code=status, content=body)

    return app
