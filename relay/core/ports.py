"""
Port definitions (interfaces) for the core domain.

The router depends on this interface; infrastructure/token_client.py
provides the httpx implementation.
"""

from typing import Protocol

from relay.core.domain import TokenResponse
from relay.core.exceptions import ProviderError


TokenResult = TokenResponse | ProviderError


class TokenEndpoint(Protocol):
    """
    Port (interface) for the provider OAuth2 token endpoint.

    Implementations never raise for provider failures; they return a
    ProviderError value instead.
    """

    async def exchange_code(self, login_url: str, code: str) -> TokenResult:
        """Exchange an authorization code for tokens."""
        ...

    async def refresh(self, login_url: str, refresh_token: str) -> TokenResult:
        """Mint a new access token from a refresh token."""
        ...
