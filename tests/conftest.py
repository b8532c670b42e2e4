import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from restforce.models import Credential  # noqa: E402


def pytest_configure(config):
    # Register the asyncio marker so pytest doesn't warn when it's used.
    config.addinivalue_line(
        "markers", "asyncio: mark test to run in an asyncio event loop"
    )
    # Add custom markers for test organization
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "auth: mark test as testing authentication"
    )


@pytest.fixture(autouse=True)
def mock_env_vars(monkeypatch):
    """Set required environment variables for tests.

    This fixture automatically sets up the minimum environment needed for
    the Settings class to initialize properly during tests.
    """
    # Connected app configuration
    monkeypatch.setenv("SALESFORCE_CLIENT_ID", "test-client-id")
    monkeypatch.setenv("SALESFORCE_CLIENT_SECRET", "test-client-secret")
    monkeypatch.setenv("SALESFORCE_LOGIN_URL", "https://login.example.com")

    # API configuration
    monkeypatch.setenv("SALESFORCE_API_VERSION", "v45.0")
    monkeypatch.setenv("SALESFORCE_MAX_RETRY_REQUESTS", "2")
    monkeypatch.delenv("SALESFORCE_TOKEN_STORE_PATH", raising=False)
    monkeypatch.delenv("SALESFORCE_TOKEN_ENCRYPT", raising=False)
    monkeypatch.delenv("SALESFORCE_TOKEN_ENCRYPTION_KEY", raising=False)
    monkeypatch.delenv("SALESFORCE_TOKEN_ENCRYPT", raising=False)
    monkeypatch.delenv("SALESFORCE_TOKEN_ENCRYPTION_KEY", raising=False)

    # Logging
    monkeypatch.setenv("LOG_LEVEL", "INFO")

    yield


@pytest.fixture
def credential():
    """Initial credential held by a client."""
    return Credential(
        access_token="access-0",
        refresh_token="refresh-0",
        instance_url="https://na1.example.com",
        id_url="https://login.example.com/id/00D/005",
    )


@pytest.fixture
def credential_factory():
    """Build numbered credentials, as a token endpoint would issue them."""

    def _make(n: int, instance_url: str = "https://na1.example.com") -> Credential:
        return Credential(
            access_token=f"access-{n}",
            refresh_token="refresh-0",
            instance_url=instance_url,
        )

    return _make


@pytest.fixture
def make_response():
    """Build an httpx response with the given status."""

    def _make(status_code: int, **kwargs) -> httpx.Response:
        return httpx.Response(status_code, **kwargs)

    return _make


@pytest.fixture
def mock_executor():
    """Request executor mock; set ``side_effect`` to script responses."""
    return MagicMock()


@pytest.fixture
def mock_exchanger(credential_factory):
    """Credential exchanger issuing access-1, access-2, ... on each call."""
    exchanger = MagicMock()
    exchanger.exchange = MagicMock(
        side_effect=[credential_factory(n) for n in range(1, 20)]
    )
    return exchanger


@pytest.fixture
def mock_async_exchanger(credential_factory):
    """Async credential exchanger issuing access-1, access-2, ..."""
    exchanger = MagicMock()
    exchanger.exchange = AsyncMock(
        side_effect=[credential_factory(n) for n in range(1, 20)]
    )
    return exchanger


@pytest.fixture
def sample_token_response():
    """Sample OAuth token response."""
    return {
        "access_token": "00Dxx0000001gPL!AR8AQJXg5oj8jXSgxJfA0lBog",
        "refresh_token": "5Aep861TSESvWeug_xvFHRBTTbf_YrTWgEyjBJrQ",
        "instance_url": "https://na1.example.com",
        "id": "https://login.example.com/id/00Dxx0000001gPLEAY/005xx000001Sv6AAAS",
        "token_type": "Bearer",
        "issued_at": "1278448832702",
        "signature": "0CmxinZir53Yex7nE0TD+zMpvIWYGb/bdJh6XfOH6EQ=",
        "scope": "api refresh_token",
    }


# Rely on pytest-asyncio for async test handling; no custom hook needed.
