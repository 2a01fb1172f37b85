"""Unit test configuration.

Unit tests are fast and isolated: GitHub is mocked with respx and Redis
with AsyncMock doubles.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from repo_analyzer.auth.store import InMemoryAuthSessionStore


@pytest.fixture
def memory_store() -> InMemoryAuthSessionStore:
    return InMemoryAuthSessionStore(ttl_seconds=600)


@pytest.fixture
def mock_redis() -> MagicMock:
    """Create a mock Redis client."""
    mock = MagicMock()
    mock.get = AsyncMock(return_value=None)
    mock.set = AsyncMock(return_value=True)
    mock.getdel = AsyncMock(return_value=None)
    mock.ping = AsyncMock(return_value=True)
    return mock
