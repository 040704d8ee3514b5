"""
Pytest configuration and fixtures for schemalineage tests.
"""

from __future__ import annotations

import os
from typing import Dict, Generator

import pytest

from schemalineage.config import reset_config
from schemalineage.mapping.loader import PlanLoader
from schemalineage.mapping.schema import Attribute, Schema


# ============================================================================
# Environment Fixtures
# ============================================================================


@pytest.fixture(scope="session")
def test_env() -> Dict[str, str]:
    """Test environment variables."""
    return {
        "SCHEMALINEAGE_EMPTY_COMMIT_POLICY": "empty",
        "SCHEMALINEAGE_EMIT_SPAN_EVENTS": "true",
    }


@pytest.fixture(autouse=True)
def set_test_env(test_env: Dict[str, str]) -> Generator[None, None, None]:
    """Set test environment variables and reset cached state for each test."""
    original = {}
    for key, value in test_env.items():
        original[key] = os.environ.get(key)
        os.environ[key] = value
    reset_config()
    PlanLoader.clear_cache()

    yield

    reset_config()
    PlanLoader.clear_cache()
    for key, value in original.items():
        if value is None:
            os.environ.pop(key, None)
        else:
            os.environ[key] = value


# ============================================================================
# Schema Fixtures
# ============================================================================


@pytest.fixture
def pokemon_schema() -> Schema:
    """Source schema of a small pokemon dataset."""
    return Schema.of(
        Attribute(name="id", data_type="string"),
        Attribute(name="name", data_type="string"),
        Attribute(name="base_experience", data_type="string"),
    )
