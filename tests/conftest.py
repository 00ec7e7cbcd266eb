"""
Shared test configuration and fixtures.
"""

import pytest
from fastapi.testclient import TestClient

from relay.core.domain import TokenResponse
from relay.core.exceptions import ProviderError
from relay.main import create_app
from relay.oauth.config import RelayConfig


LOGIN_URL = "https://login.example"
TOKEN_URL = f"{LOGIN_URL}/services/oauth2/token"


class StubTokenEndpoint:
    """
    In-memory TokenEndpoint.

    Returns `result` for every call and records the arguments.
    """

    def __init__(self, result: TokenResponse | ProviderError | None = None):
        self.result = result or TokenResponse(
            access_token="A", refresh_token="R", instance_url="https://inst"
        )
        self.calls: list[tuple[str, str, str]] = []

    async def exchange_code(self, login_url: str, code: str):
        self.calls.append(("exchange_code", login_url, code))
        return self.result

    async def refresh(self, login_url: str, refresh_token: str):
        self.calls.append(("refresh", login_url, refresh_token))
        return self.result


@pytest.fixture
def relay_config():
    """Relay config pointing at a fake provider."""
    return RelayConfig(
        client_id="test-client-id",
        client_secret="test-client-secret",
        login_url=LOGIN_URL,
        redirect_uri="http://testserver/callback",
        provider_timeout=5.0,
    )


@pytest.fixture
def stub_token_endpoint():
    """Token endpoint stub returning a successful token response."""
    return StubTokenEndpoint()


@pytest.fixture
def client(relay_config, stub_token_endpoint):
    """Test client wired to the stub token endpoint."""
    app = create_app(relay_config, token_client=stub_token_endpoint)
    return TestClient(app)


@pytest.fixture
def live_client(relay_config):
    """Test client using the real httpx token client (stub it with respx)."""
    app = create_app(relay_config)
    return TestClient(app)
