"""Integration tests for token refresh across the full client stack.

The data API and the token endpoint are both served by one httpx mock
transport. The data API only accepts the most recently issued access
token, so every request made with an older token comes back 401.
"""

from urllib.parse import parse_qs

import httpx
import pytest

from restforce import Restforce, RetryLimitExceeded, TokenExchangeError
from restforce.auth.credential_store import FileCredentialStore
from restforce.config.settings import Settings
from restforce.factory import create_async_rest_client, create_rest_client
from restforce.models import Credential
from restforce.utils.http.executor import AsyncHttpxRequestExecutor, HttpxRequestExecutor
from restforce.auth.providers.salesforce import AsyncSalesforceProvider, SalesforceProvider


class FakeSalesforce:
    """Serve the token endpoint and a minimal data API."""

    def __init__(self, valid_token="access-1", reject_refresh=False):
        self.valid_token = valid_token
        self.reject_refresh = reject_refresh
        self.issued = 0
        self.api_calls = []
        self.token_calls = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.url.path == "/services/oauth2/token":
            form = {k: v[0] for k, v in parse_qs(request.content.decode()).items()}
            self.token_calls.append(form)
            if self.reject_refresh:
                return httpx.Response(
                    400,
                    json={"error": "invalid_grant", "error_description": "expired access/refresh token"},
                )
            self.issued += 1
            return httpx.Response(
                200,
                json={
                    "access_token": f"access-{self.issued}",
                    "instance_url": "https://na1.example.com",
                    "id": "https://login.example.com/id/00D/005",
                    "token_type": "Bearer",
                    "issued_at": "1278448832702",
                },
            )

        auth = request.headers.get("authorization")
        self.api_calls.append((str(request.url), auth))
        if auth != f"Bearer {self.valid_token}":
            return httpx.Response(401, json=[{"errorCode": "INVALID_SESSION_ID"}])
        return httpx.Response(200, json={"totalSize": 0, "done": True, "records": []})


@pytest.fixture
def settings(tmp_path):
    return Settings(
        SALESFORCE_LOGIN_URL="https://login.example.com",
        SALESFORCE_MAX_RETRY_REQUESTS=3,
        SALESFORCE_TOKEN_STORE_PATH=str(tmp_path / "credential.json"),
    )


def build_sync(fake, settings, credential):
    transport = httpx.MockTransport(fake.handler)
    return create_rest_client(
        credential,
        settings,
        exchanger=SalesforceProvider.from_settings(settings, http_client=httpx.Client(transport=transport)),
        executor=HttpxRequestExecutor(client=httpx.Client(transport=transport)),
    )


@pytest.mark.integration
class TestSyncStack:
    def test_expired_token_refreshed_transparently(self, settings, credential):
        fake = FakeSalesforce(valid_token="access-1")
        client = build_sync(fake, settings, credential)

        response = Restforce(client).query("SELECT Id FROM Account")

        assert response.status_code == 200
        assert [auth for _, auth in fake.api_calls] == ["Bearer access-0", "Bearer access-1"]
        first_url = httpx.URL(fake.api_calls[0][0])
        assert first_url.path == "/services/data/v45.0/query"
        assert first_url.params["q"] == "SELECT Id FROM Account"
        assert fake.token_calls == [
            {
                "grant_type": "refresh_token",
                "client_id": "test-client-id",
                "client_secret": "test-client-secret",
                "refresh_token": "refresh-0",
            }
        ]
        assert client.credential.refresh_token == "refresh-0"
        stored = FileCredentialStore(settings.token_store_path).load()
        assert stored == client.credential

    def test_budget_exhausted(self, settings, credential):
        fake = FakeSalesforce(valid_token="never")
        client = build_sync(fake, settings, credential)

        with pytest.raises(RetryLimitExceeded) as exc_info:
            client.get("limits")

        assert exc_info.value.max_attempts == 3
        assert len(fake.api_calls) == 3
        assert len(fake.token_calls) == 2

    def test_rejected_refresh_aborts(self, settings, credential):
        fake = FakeSalesforce(reject_refresh=True)
        client = build_sync(fake, settings, credential)

        with pytest.raises(TokenExchangeError) as exc_info:
            client.get("limits")

        assert exc_info.value.error_code == "invalid_grant"
        assert len(fake.api_calls) == 1
        assert client.credential is credential

    def test_valid_token_needs_no_refresh(self, settings):
        fake = FakeSalesforce(valid_token="current")
        credential = Credential(
            access_token="current", refresh_token="r", instance_url="https://na1.example.com"
        )
        client = build_sync(fake, settings, credential)

        assert client.get("https://na1.example.com/services/apexrest/ping").status_code == 200
        assert fake.token_calls == []


@pytest.mark.integration
@pytest.mark.asyncio
async def test_async_stack_refreshes(settings, credential):
    fake = FakeSalesforce(valid_token="access-2")
    transport = httpx.MockTransport(fake.handler)
    client = create_async_rest_client(
        credential,
        settings,
        exchanger=AsyncSalesforceProvider.from_settings(
            settings, http_client=httpx.AsyncClient(transport=transport)
        ),
        executor=AsyncHttpxRequestExecutor(client=httpx.AsyncClient(transport=transport)),
    )

    response = await client.get("limits")

    assert response.status_code == 200
    assert [auth for _, auth in fake.api_calls] == [
        "Bearer access-0",
        "Bearer access-1",
        "Bearer access-2",
    ]
    assert len(fake.token_calls) == 2
