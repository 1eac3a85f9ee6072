"""Response envelopes for the catalog and schema endpoints."""

import logging
from typing import Any

from .aggregator import CatalogResult, SchemaResult
from .errors import CatalogError

logger = logging.getLogger(__name__)


def catalog_envelope(result: CatalogResult) -> tuple[int, dict[str, Any]]:
    """Build the listing response. ``errors`` is present only on partial failure."""
    body: dict[str, Any] = {
        "success": True,
        "models": [m.to_dict() for m in result.models],
        "cached": result.cached,
        "providers": {name: outcome.to_dict() for name, outcome in result.providers.items()},
    }
    if result.errors:
        body["errors"] = list(result.errors)
    return 200, body


def schema_envelope(result: SchemaResult) -> tuple[int, dict[str, Any]]:
    """Build the schema response."""
    body: dict[str, Any] = {"success": True, "cached": result.cached}
    body.update(result.resolution.to_dict())
    return 200, body


def error_envelope(error: Exception) -> tuple[int, dict[str, Any]]:
    """Map an exception to a status code and failure body.

    Catalog errors carry their own status; anything else is reported as 500.
    """
    if isinstance(error, CatalogError):
        return error.status_code, {"success": False, "error": error.message}
    logger.error(f"Unexpected error while handling request: {error}", exc_info=error)
    return 500, {"success": False, "error": str(error) or "Unknown error"}
