"""Unified catalog of generative models with request-schema introspection."""

__version__ = "1.0.0"
