"""Query-time filtering and ordering of catalog entries."""

import logging
from typing import Iterable, Optional

from ..models import Capability, CatalogEntry

logger = logging.getLogger(__name__)


def parse_capabilities(raw: Optional[str]) -> list[Capability]:
    """Parse a comma-separated capability list, dropping unknown tags.

    Args:
        raw: e.g. "text-to-image,image-to-video".

    Returns:
        The recognized capabilities, in input order.
    """
    if not raw:
        return []
    capabilities = []
    for token in raw.split(","):
        token = token.strip()
        if not token:
            continue
        try:
            capabilities.append(Capability(token))
        except ValueError:
            logger.warning(f"Ignoring unknown capability filter: {token}")
    return capabilities


class ModelFilter:
    """Filter catalog entries by various criteria.

    This class provides chainable methods to filter entries by:
    - Free-text search on name, description, and ID
    - Capability intersection
    - Provider
    and to sort them into the catalog's canonical order.
    """

    def __init__(self, models: list[CatalogEntry]):
        """Initialize the filter with a list of entries.

        Args:
            models: Entries to filter. The list itself is never mutated.
        """
        self.models = models

    def search(self, query: Optional[str]) -> "ModelFilter":
        """Keep entries whose name, description, or ID contains the query."""
        if not query:
            return ModelFilter(list(self.models))
        return ModelFilter([m for m in self.models if m.matches(query)])

    def by_capabilities(self, capabilities: Iterable[Capability]) -> "ModelFilter":
        """Keep entries sharing at least one capability with the filter set."""
        wanted = set(capabilities)
        if not wanted:
            return ModelFilter(list(self.models))
        return ModelFilter([m for m in self.models if wanted.intersection(m.capabilities)])

    def sort_by_provider_and_name(self) -> "ModelFilter":
        """Sort by provider tag, then case-insensitively by name."""
        return ModelFilter(sorted(self.models, key=lambda m: (m.provider.value, m.name.lower())))

    def to_list(self) -> list[CatalogEntry]:
        """Get the filtered entries as a list."""
        return list(self.models)

    @classmethod
    def apply_filters(
        cls,
        models: list[CatalogEntry],
        search: Optional[str] = None,
        capabilities: Optional[Iterable[Capability]] = None,
    ) -> list[CatalogEntry]:
        """Apply search and capability filters, then sort.

        Args:
            models: Entries to filter.
            search: Free-text search query.
            capabilities: Capability filter set.

        Returns:
            Filtered entries in (provider, name) order.
        """
        result = cls(models)
        if search:
            result = result.search(search)
        if capabilities:
            result = result.by_capabilities(capabilities)
        return result.sort_by_provider_and_name().to_list()
