"""Runtime configuration and per-request credential resolution."""

import logging
import os
import sys
from dataclasses import dataclass, field
from typing import Mapping, Optional

from dotenv import load_dotenv

from .models import ProviderType

logger = logging.getLogger(__name__)

# Provider -> (request header, environment variable)
CREDENTIAL_SOURCES: dict[ProviderType, tuple[str, str]] = {
    ProviderType.REPLICATE: ("X-Replicate-Key", "REPLICATE_API_KEY"),
    ProviderType.FAL: ("X-Fal-Key", "FAL_API_KEY"),
    ProviderType.KIE: ("X-Kie-Key", "KIE_API_KEY"),
    ProviderType.WAVESPEED: ("X-WaveSpeed-Key", "WAVESPEED_API_KEY"),
}


def load_env_file() -> Optional[str]:
    """Load a .env file from the first of several candidate locations.

    Returns:
        The path that was loaded, or None if no file was found.
    """
    main_dir = os.path.dirname(os.path.abspath(sys.argv[0]))
    env_locations = [
        os.path.join(os.getcwd(), ".env"),
        os.path.join(os.getcwd(), ".env.local"),
        os.path.join(main_dir, ".env"),
        os.path.join(os.path.dirname(main_dir), ".env"),
    ]

    for env_path in env_locations:
        if os.path.exists(env_path):
            logger.info(f"Loading .env from {env_path}")
            load_dotenv(env_path)
            return env_path

    logger.debug("No .env file found in expected locations")
    return None


@dataclass
class Settings:
    """Service settings read from the environment."""

    cache_ttl: Optional[float] = 3600.0
    schema_cache_ttl: Optional[float] = 600.0
    timeout: float = 30.0
    max_workers: int = 5
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from CATALOG_* environment variables.

        A TTL of 0 disables expiry for that cache.
        """
        cache_ttl = float(os.getenv("CATALOG_CACHE_TTL", "3600"))
        schema_cache_ttl = float(os.getenv("CATALOG_SCHEMA_CACHE_TTL", "600"))
        return cls(
            cache_ttl=cache_ttl or None,
            schema_cache_ttl=schema_cache_ttl or None,
            timeout=float(os.getenv("CATALOG_TIMEOUT", "30")),
            max_workers=int(os.getenv("CATALOG_MAX_WORKERS", "5")),
            host=os.getenv("CATALOG_HOST", "127.0.0.1"),
            port=int(os.getenv("CATALOG_PORT", "8000")),
            debug=bool(os.getenv("CATALOG_DEBUG")),
        )


@dataclass
class Credentials:
    """API keys available for a single request."""

    keys: dict[ProviderType, Optional[str]] = field(default_factory=dict)

    @classmethod
    def resolve(cls, headers: Optional[Mapping[str, str]] = None) -> "Credentials":
        """Resolve keys from request headers, falling back to the environment.

        Args:
            headers: Request headers. Lookup is case-insensitive.

        Returns:
            Credentials with one entry per keyed provider.
        """
        lowered = {k.lower(): v for k, v in (headers or {}).items()}
        keys: dict[ProviderType, Optional[str]] = {}
        for provider, (header, env_var) in CREDENTIAL_SOURCES.items():
            keys[provider] = lowered.get(header.lower()) or os.getenv(env_var) or None
        return cls(keys=keys)

    def get(self, provider: ProviderType) -> Optional[str]:
        """Get the key for a provider, or None."""
        return self.keys.get(provider)
