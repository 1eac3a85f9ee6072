"""Shared data models for the model catalog."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class ProviderType(str, Enum):
    """Known model providers."""

    FAL = "fal"
    GEMINI = "gemini"
    KIE = "kie"
    REPLICATE = "replicate"
    WAVESPEED = "wavespeed"


class Capability(str, Enum):
    """Normalized capability tags used for catalog filtering."""

    TEXT_TO_IMAGE = "text-to-image"
    IMAGE_TO_IMAGE = "image-to-image"
    TEXT_TO_VIDEO = "text-to-video"
    IMAGE_TO_VIDEO = "image-to-video"
    TEXT_TO_3D = "text-to-3d"
    IMAGE_TO_3D = "image-to-3d"
    TEXT_TO_AUDIO = "text-to-audio"


@dataclass
class Pricing:
    """Price of a single run."""

    amount: float
    currency: str = "USD"
    type: str = "per-run"

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "amount": self.amount, "currency": self.currency}


@dataclass
class CatalogEntry:
    """A model from any provider with normalized metadata."""

    id: str
    name: str
    provider: ProviderType
    description: Optional[str] = None
    capabilities: list[Capability] = field(default_factory=list)
    cover_image: Optional[str] = None
    pricing: Optional[Pricing] = None
    page_url: Optional[str] = None

    def matches(self, query: str) -> bool:
        """Case-insensitive substring match on name, description, or ID."""
        query_lower = query.lower()
        return (
            query_lower in self.name.lower()
            or query_lower in (self.description or "").lower()
            or query_lower in self.id.lower()
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the public camelCase shape, omitting absent optionals."""
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "provider": self.provider.value,
            "capabilities": [c.value for c in self.capabilities],
        }
        if self.cover_image:
            data["coverImage"] = self.cover_image
        if self.pricing:
            data["pricing"] = self.pricing.to_dict()
        if self.page_url:
            data["pageUrl"] = self.page_url
        return data
