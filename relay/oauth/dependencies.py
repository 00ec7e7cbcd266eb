"""
FastAPI dependencies for relay endpoints.

Resolves the optional `login_url` input against the configured allow-list.
"""

from typing import Annotated, Callable

from fastapi import Form, HTTPException, Query, status

from relay.oauth.config import RelayConfig


def _resolve_or_400(config: RelayConfig, login_url: str | None) -> str:
    try:
        return config.resolve_login_url(login_url)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )


def query_login_url(config: RelayConfig) -> Callable[..., str]:
    """Build a dependency reading `login_url` from the query string."""

    async def resolve_login_url(
        login_url: Annotated[str | None, Query()] = None,
    ) -> str:
        return _resolve_or_400(config, login_url)

    return resolve_login_url


def form_login_url(config: RelayConfig) -> Callable[..., str]:
    """Build a dependency reading `login_url` from a form body."""

    async def resolve_login_url(
        login_url: Annotated[str | None, Form()] = None,
    ) -> str:
        return _resolve_or_400(config, login_url)

    return resolve_login_url
