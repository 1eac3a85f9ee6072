"""Exception hierarchy for the model catalog service."""

from typing import Optional


class CatalogError(Exception):
    """Base exception for catalog and schema errors.

    Each subclass carries the HTTP status the response layer should use.
    """

    status_code = 500

    def __init__(self, message: str, provider: str = ""):
        super().__init__(message)
        self.message = message
        self.provider = provider


class ConfigurationError(CatalogError):
    """Raised when no usable credentials exist for the requested providers."""

    status_code = 400


class ValidationError(CatalogError):
    """Raised for a malformed or unknown provider selector."""

    status_code = 400


class AuthError(CatalogError):
    """Raised when a provider requires a credential that is absent."""

    status_code = 401


class UpstreamError(CatalogError):
    """Raised when a provider call fails or returns a non-success status."""

    status_code = 500

    def __init__(self, message: str, provider: str = "", status: Optional[int] = None):
        super().__init__(message, provider)
        self.status = status


class TotalFailureError(CatalogError):
    """Raised when every attempted provider failed."""

    status_code = 500

    def __init__(self, errors: list[str]):
        super().__init__(f"All providers failed: {'; '.join(errors)}")
        self.errors = errors
