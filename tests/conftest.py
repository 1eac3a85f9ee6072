"""Pytest configuration shared by all test modules."""

import sys
from pathlib import Path

import pytest

# Make the src layout importable without an editable install
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))
sys.path.insert(0, str(project_root / "src"))


@pytest.fixture(autouse=True)
def clear_provider_keys(monkeypatch):
    """Keep a developer's exported provider keys out of credential resolution."""
    for env_var in ("REPLICATE_API_KEY", "FAL_API_KEY", "KIE_API_KEY", "WAVESPEED_API_KEY"):
        monkeypatch.delenv(env_var, raising=False)
