"""
Shared pytest fixtures for owlauth tests.

This module provides common fixtures including:
- Identity validator mocks with canned responses
- Credential store mocks (recording and failing)
- Redis mocks for the Redis-backed store
"""

import os
import sys
from typing import Any, Dict, Optional
from unittest.mock import AsyncMock

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from owlauth.modules.auth.interfaces import IdentityResponse
from owlauth.modules.storage import LoadResult, MemoryCredentialStore, StorageUnavailable


# =============================================================================
# Identity Validator Mocking
# =============================================================================

def identity_ok(user_id: str = "u1") -> IdentityResponse:
    """Response the identity endpoint gives for a known key."""
    return IdentityResponse(ok=True, status_code=200, status_text="OK", user_id=user_id)


def identity_rejected(status_code: int = 401, status_text: str = "Unauthorized") -> IdentityResponse:
    """Response the identity endpoint gives for an unknown key."""
    return IdentityResponse(ok=False, status_code=status_code, status_text=status_text)


@pytest.fixture
def mock_validator():
    """Identity validator accepting every key as user u1."""
    validator = AsyncMock()
    validator.fetch_identity = AsyncMock(return_value=identity_ok("u1"))
    return validator


# =============================================================================
# Credential Store Mocking
# =============================================================================

def make_store_mock(data: Optional[Dict[str, Any]] = None, success: bool = True) -> AsyncMock:
    """Store mock that loads `data` and records saves."""
    store = AsyncMock()
    store.load = AsyncMock(return_value=LoadResult(success=success, data=dict(data or {})))
    store.save = AsyncMock(return_value=None)
    return store


@pytest.fixture
def mock_store():
    """Empty credential store mock."""
    return make_store_mock()


@pytest.fixture
def memory_store():
    """Real in-memory credential store."""
    return MemoryCredentialStore()


@pytest.fixture
def failing_store():
    """Store whose every call raises StorageUnavailable."""
    store = AsyncMock()
    store.load = AsyncMock(side_effect=StorageUnavailable("disk on fire"))
    store.save = AsyncMock(side_effect=StorageUnavailable("disk on fire"))
    return store


# =============================================================================
# Redis Mocking Infrastructure
# =============================================================================

@pytest.fixture
def mock_redis_with_data():
    """
    Redis mock with in-memory hash storage.

    This allows testing code that reads back what it writes.
    """
    storage: Dict[str, Dict[str, str]] = {}

    redis = AsyncMock()

    async def mock_hset(key, field, value):
        storage.setdefault(key, {})[field] = value
        return 1

    async def mock_hgetall(key):
        return dict(storage.get(key, {}))

    redis.hset = mock_hset
    redis.hgetall = mock_hgetall
    redis.aclose = AsyncMock()
    redis._storage = storage  # Expose for test assertions

    return redis


# =============================================================================
# Test Markers Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: Integration tests requiring infrastructure"
    )
