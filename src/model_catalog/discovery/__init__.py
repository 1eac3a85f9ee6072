"""Catalog caching, capability classification, and filtering."""

from .cache import CacheEntry, CacheStore
from .capabilities import (
    REPLICATE_CLASSIFIER,
    WAVESPEED_CLASSIFIER,
    CapabilityClassifier,
    CapabilityRule,
    KeywordSet,
    build_search_text,
    classify_category,
)
from .model_filter import ModelFilter, parse_capabilities

__all__ = [
    "CacheEntry",
    "CacheStore",
    "CapabilityClassifier",
    "CapabilityRule",
    "KeywordSet",
    "ModelFilter",
    "REPLICATE_CLASSIFIER",
    "WAVESPEED_CLASSIFIER",
    "build_search_text",
    "classify_category",
    "parse_capabilities",
]
