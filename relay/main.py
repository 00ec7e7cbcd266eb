"""
FastAPI application for the OAuth2 authorization-code relay.

This module wires dependencies and configures the application.
Token endpoint access is in relay/infrastructure, handlers in relay/oauth.
"""

import logging
import socket
import sys
from contextlib import asynccontextmanager

# Configure logging FIRST, before other local imports
from relay.logging_config import setup_global_logging

setup_global_logging()

# Now import other modules (they will use the configured logging)
import uvicorn  # noqa: E402
from fastapi import FastAPI, Request, status  # noqa: E402
from fastapi.exceptions import RequestValidationError  # noqa: E402
from fastapi.responses import JSONResponse  # noqa: E402

from relay.core.exceptions import (  # noqa: E402
    ConfigurationError,
    InvalidStateError,
    ProviderError,
    StartupError,
)
from relay.core.ports import TokenEndpoint  # noqa: E402
from relay.infrastructure.token_client import ProviderTokenClient  # noqa: E402
from relay.oauth.config import RelayConfig  # noqa: E402
from relay.oauth.router import create_router  # noqa: E402

logger = logging.getLogger(__name__)


# ============================================================================
# Centralized Exception Handlers
# ============================================================================


def provider_error_status(exc: ProviderError) -> int:
    """
    Map a provider failure to the status returned to our caller.

    - 400: the provider rejected the code or refresh token
    - 504: the provider did not answer within PROVIDER_TIMEOUT
    - 502: provider 5xx, network failure or unusable response body
    """
    if exc.is_client_error:
        return status.HTTP_400_BAD_REQUEST
    if exc.timed_out:
        return status.HTTP_504_GATEWAY_TIMEOUT
    return status.HTTP_502_BAD_GATEWAY


async def provider_error_handler(request: Request, exc: ProviderError):
    """
    Handle token endpoint failures.

    The raw provider body was already logged by the token client and is
    not repeated here.
    """
    status_code = provider_error_status(exc)
    logger.warning(
        f"Provider error on {request.url.path}: {exc.message}",
        extra={
            "extra_fields": {
                "path": request.url.path,
                "provider_status": exc.status_code,
                "status_code": status_code,
            }
        },
    )
    return JSONResponse(
        status_code=status_code,
        content={
            "status": "error",
            "message": exc.message,
            "provider_status": exc.status_code,
        },
    )


async def invalid_state_handler(request: Request, exc: InvalidStateError):
    """Handle a `state` value that does not decode to a known provider."""
    logger.warning(f"Rejected callback state: {exc}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"status": "error", "message": "Invalid state parameter"},
    )


async def validation_error_handler(request: Request, exc: RequestValidationError):
    """
    Handle missing or malformed request parameters.

    Returns 422 before any handler logic or provider call runs.
    """
    logger.info(
        f"Validation error on {request.url.path}",
        extra={"extra_fields": {"path": request.url.path}},
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "status": "error",
            "message": "Invalid request",
            "details": exc.errors(),
        },
    )


# ============================================================================
# Application Factory
# ============================================================================


def create_app(
    config: RelayConfig | None = None,
    token_client: TokenEndpoint | None = None,
) -> FastAPI:
    """
    Build the relay application.

    Usable as a uvicorn factory:
    `uvicorn --factory --no-access-log relay.main:create_app`.

    Args:
        config: Relay configuration (loaded from the environment if omitted)
        token_client: Provider token endpoint (httpx client if omitted)

    Returns:
        Configured FastAPI application

    Raises:
        ConfigurationError: If the configuration is invalid
    """
    if config is None:
        config = RelayConfig.from_env()
    config.validate()

    if token_client is None:
        token_client = ProviderTokenClient(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "Relay starting up",
            extra={
                "extra_fields": {
                    "login_url": config.login_url,
                    "redirect_uri": config.redirect_uri,
                }
            },
        )
        yield
        logger.info("Shutting down relay...")

    app = FastAPI(
        title="OAuth Relay",
        description="Relays the OAuth2 authorization code flow for browser clients",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_exception_handler(ProviderError, provider_error_handler)
    app.add_exception_handler(InvalidStateError, invalid_state_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    @app.get("/")
    async def root():
        """Liveness check."""
        return {"ok": True}

    @app.get("/health")
    async def health():
        """Health check endpoint for container platforms."""
        return {"status": "healthy"}

    app.include_router(create_router(config, token_client))

    return app


# ============================================================================
# Main Entry Point
# ============================================================================


def bind_socket(port: int) -> socket.socket:
    """
    Bind the listening socket on 0.0.0.0:PORT.

    Raises:
        StartupError: If the port cannot be bound
    """
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    try:
        sock.bind(("0.0.0.0", port))
    except OSError as e:
        sock.close()
        raise StartupError(f"Could not bind port {port}: {e}") from e
    return sock


def serve(config: RelayConfig) -> None:
    """
    Run the relay with uvicorn on 0.0.0.0:PORT.

    The socket is bound here so a busy port surfaces as StartupError.
    Access logging is off because request lines carry the authorization
    code in their query string.

    Raises:
        StartupError: If the port cannot be bound
    """
    app = create_app(config)
    sock = bind_socket(config.port)
    server_config = uvicorn.Config(
        app,
        host="0.0.0.0",
        port=config.port,
        log_config=None,
        access_log=False,
    )
    uvicorn.Server(server_config).run(sockets=[sock])


def main() -> None:
    """Process entry point. Exits with status 1 on startup failure."""
    try:
        config = RelayConfig.from_env()
        config.validate()
        serve(config)
    except (ConfigurationError, StartupError) as e:
        logger.error(f"Startup failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
