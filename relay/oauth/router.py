"""
OAuth2 relay endpoints.

- GET /connect - Redirect the browser to the provider login page
- GET /callback - Exchange the code and redirect to the caller with tokens
- POST /refresh - Mint a new access token from a refresh token

Handlers are built by create_router() around an explicit RelayConfig and
token endpoint; they keep no state between requests.
"""

import logging
from typing import Annotated

from authlib.common.urls import add_params_to_uri
from authlib.oauth2.rfc6749.parameters import prepare_grant_uri
from fastapi import APIRouter, Depends, Form, Query, status
from fastapi.responses import RedirectResponse

from relay.core.domain import RefreshResponse
from relay.core.exceptions import ProviderError
from relay.core.ports import TokenEndpoint
from relay.oauth.config import RelayConfig
from relay.oauth.dependencies import form_login_url, query_login_url
from relay.oauth.state import RelayState, decode_state, encode_state


logger = logging.getLogger(__name__)


def build_authorize_url(config: RelayConfig, state: RelayState) -> str:
    """Provider authorization URL carrying the encoded relay state."""
    return prepare_grant_uri(
        config.authorize_url(state.login_url),
        client_id=config.client_id,
        response_type="code",
        redirect_uri=config.redirect_uri,
        scope=config.scope,
        state=encode_state(state),
        response_mode="query",
    )


def create_router(config: RelayConfig, token_client: TokenEndpoint) -> APIRouter:
    """
    Build the relay router.

    Args:
        config: Relay configuration
        token_client: Provider token endpoint

    Returns:
        Router with the connect, callback and refresh endpoints
    """
    router = APIRouter(tags=["oauth"])

    QueryLoginUrl = Annotated[str, Depends(query_login_url(config))]
    FormLoginUrl = Annotated[str, Depends(form_login_url(config))]

    @router.get("/connect")
    async def connect(
        redirect_uri: Annotated[str, Query(min_length=1)],
        login_url: QueryLoginUrl,
    ):
        """
        Start the authorization flow.

        Redirects the browser to the provider's authorize endpoint. The
        provider base URL and the caller's redirect URI travel in `state`.
        """
        state = RelayState(login_url=login_url, redirect_uri=redirect_uri)

        logger.info(
            f"Starting OAuth flow against {login_url}",
            extra={"extra_fields": {"login_url": login_url}},
        )

        return RedirectResponse(
            url=build_authorize_url(config, state),
            status_code=status.HTTP_302_FOUND,
        )

    @router.get("/callback")
    async def callback(
        code: Annotated[str, Query(min_length=1)],
        state: Annotated[str, Query(min_length=1)],
    ):
        """
        Handle the provider redirect.

        Exchanges the authorization code at the provider named in `state`,
        then redirects to the caller's redirect URI with access_token,
        refresh_token and instance_url appended to its query string.
        """
        relay_state = decode_state(state, config.is_allowed_login_url)

        logger.info(
            f"OAuth callback received for {relay_state.login_url}",
            extra={"extra_fields": {"login_url": relay_state.login_url}},
        )

        result = await token_client.exchange_code(relay_state.login_url, code)
        if isinstance(result, ProviderError):
            raise result

        return RedirectResponse(
            url=add_params_to_uri(relay_state.redirect_uri, result.redirect_params()),
            status_code=status.HTTP_302_FOUND,
        )

    @router.post("/refresh", response_model=RefreshResponse)
    async def refresh(
        refresh_token: Annotated[str, Form(min_length=1)],
        login_url: FormLoginUrl,
    ) -> RefreshResponse:
        """Exchange a refresh token for a new access token."""
        result = await token_client.refresh(login_url, refresh_token)
        if isinstance(result, ProviderError):
            raise result

        return RefreshResponse(
            access_token=result.access_token,
            instance_url=result.instance_url,
        )

    return router
