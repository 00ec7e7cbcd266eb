"""
Client for the provider OAuth2 token endpoint.
"""

import logging

import httpx
from pydantic import ValidationError

from relay.core.domain import TokenResponse
from relay.core.exceptions import ProviderError
from relay.core.ports import TokenResult
from relay.oauth.config import RelayConfig


logger = logging.getLogger(__name__)


class ProviderTokenClient:
    """
    Sends authorization_code and refresh_token grants to the provider.

    Every call is a single attempt bounded by the configured timeout.
    Failures come back as ProviderError values rather than exceptions.
    """

    def __init__(self, config: RelayConfig):
        self._config = config

    def _client_credentials(self) -> dict[str, str]:
        """client_id, plus client_secret when the relay is a confidential client."""
        credentials = {"client_id": self._config.client_id or ""}
        if self._config.client_secret:
            credentials["client_secret"] = self._config.client_secret
        return credentials

    async def exchange_code(self, login_url: str, code: str) -> TokenResult:
        """Exchange an authorization code for tokens."""
        form = {
            "grant_type": "authorization_code",
            "code": code,
            **self._client_credentials(),
            "redirect_uri": self._config.redirect_uri,
        }
        return await self.request_token(login_url, form)

    async def refresh(self, login_url: str, refresh_token: str) -> TokenResult:
        """Mint a new access token from a refresh token."""
        form = {
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
            **self._client_credentials(),
        }
        return await self.request_token(login_url, form)

    async def request_token(self, login_url: str, form: dict[str, str]) -> TokenResult:
        """
        POST a form-encoded grant to the provider token endpoint.

        Args:
            login_url: Provider base URL (already resolved against the allow-list)
            form: Grant parameters

        Returns:
            TokenResponse on success, ProviderError otherwise
        """
        url = self._config.token_url(login_url)
        grant_type = form.get("grant_type")

        try:
            async with httpx.AsyncClient(
                timeout=self._config.provider_timeout
            ) as client:
                response = await client.post(url, data=form)
        except httpx.TimeoutException as e:
            logger.error(
                f"Token request to {url} timed out: {e}",
                extra={"extra_fields": {"grant_type": grant_type}},
            )
            return ProviderError("Provider did not respond in time", timed_out=True)
        except httpx.RequestError as e:
            logger.error(
                f"Network error calling {url}: {e}",
                extra={"extra_fields": {"grant_type": grant_type}},
            )
            return ProviderError(f"Network error: {e}")

        if not response.is_success:
            logger.error(
                f"Token request rejected ({response.status_code}): {response.text}",
                extra={
                    "extra_fields": {
                        "grant_type": grant_type,
                        "provider_status": response.status_code,
                    }
                },
            )
            return ProviderError(
                "Token request rejected by provider",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            token = TokenResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.error(
                f"Invalid token response from {url}: {e}",
                extra={"extra_fields": {"grant_type": grant_type}},
            )
            return ProviderError("Invalid token response from provider")

        logger.info(
            f"Token request succeeded for grant {grant_type}",
            extra={"extra_fields": {"grant_type": grant_type}},
        )
        return token
