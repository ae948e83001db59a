"""
Pytest configuration and shared fixtures for Merkle tree tests.

This conftest.py:
1. Adds project root to sys.path for imports
2. Provides commonly-used fixtures via pytest's autodiscovery
3. Configures pytest markers and settings
"""

import sys
from pathlib import Path

import pytest

# =============================================================================
# Path Setup - Must happen before any local imports
# =============================================================================

_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_TESTS_ROOT = Path(__file__).resolve().parent

for _path in [str(_PROJECT_ROOT), str(_TESTS_ROOT)]:
    if _path not in sys.path:
        sys.path.insert(0, _path)

from fixtures.common import (  # noqa: E402
    ENCODING,
    make_leaves,
    make_values,
)


# =============================================================================
# Pytest Fixtures (autodiscovered by pytest)
# =============================================================================

@pytest.fixture
def leaves():
    """Seven distinct 32-byte leaf hashes."""
    return make_leaves(7)


@pytest.fixture
def values():
    """Five (ContractAddress, u256) value tuples."""
    return make_values(5)


@pytest.fixture
def encoding():
    """Leaf encoding matching the values fixture."""
    return list(ENCODING)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Isolate config lookup from the developer's environment."""
    for name in ["MERKLE_HASH", "MERKLE_VALIDATE_ON_LOAD", "MERKLE_LOG_LEVEL", "MERKLE_LOG_FILE"]:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.chdir(tmp_path)
    return tmp_path


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
