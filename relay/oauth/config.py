"""
Relay configuration and provider allow-list.

Settings are loaded from environment variables into an explicit
RelayConfig that is passed to the application factory.
"""

import os
import logging
from dataclasses import dataclass, field
from urllib.parse import urlparse

from relay.core.exceptions import ConfigurationError
from relay.oauth.state import STATE_DELIMITER, normalize_login_url


logger = logging.getLogger(__name__)


PRODUCTION_LOGIN_URL = "https://login.salesforce.com"
SANDBOX_LOGIN_URL = "https://test.salesforce.com"

# Provider environments accepted for `login_url` in addition to LOGIN_URL
KNOWN_LOGIN_URLS = (PRODUCTION_LOGIN_URL, SANDBOX_LOGIN_URL)

AUTHORIZE_PATH = "/services/oauth2/authorize"
TOKEN_PATH = "/services/oauth2/token"

DEFAULT_PORT = 3000
DEFAULT_REDIRECT_URI = "http://localhost:3000/callback"
DEFAULT_SCOPE = "api refresh_token offline_access"
DEFAULT_PROVIDER_TIMEOUT = 10.0


@dataclass
class RelayConfig:
    """
    Relay configuration settings.

    Loaded from environment variables. Call validate() at startup to fail fast.
    """

    client_id: str | None
    login_url: str = PRODUCTION_LOGIN_URL
    redirect_uri: str = DEFAULT_REDIRECT_URI
    scope: str = DEFAULT_SCOPE
    client_secret: str | None = None
    port: int = DEFAULT_PORT
    provider_timeout: float = DEFAULT_PROVIDER_TIMEOUT
    known_login_urls: tuple[str, ...] = field(default=KNOWN_LOGIN_URLS)

    def __post_init__(self):
        self.login_url = normalize_login_url(self.login_url)

    @classmethod
    def from_env(cls) -> "RelayConfig":
        """Load configuration from environment variables."""
        try:
            port = int(os.getenv("PORT", str(DEFAULT_PORT)))
            timeout = float(
                os.getenv("PROVIDER_TIMEOUT", str(DEFAULT_PROVIDER_TIMEOUT))
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid numeric setting: {e}") from e

        return cls(
            client_id=os.getenv("CLIENT_ID"),
            client_secret=os.getenv("CLIENT_SECRET"),
            login_url=os.getenv("LOGIN_URL", PRODUCTION_LOGIN_URL),
            redirect_uri=os.getenv("REDIRECT_URI", DEFAULT_REDIRECT_URI),
            scope=os.getenv("SCOPE", DEFAULT_SCOPE),
            port=port,
            provider_timeout=timeout,
        )

    @property
    def allowed_login_urls(self) -> list[str]:
        """Provider base URLs accepted from callers, default first."""
        urls = [self.login_url]
        for url in self.known_login_urls:
            url = normalize_login_url(url)
            if url not in urls:
                urls.append(url)
        return urls

    def is_allowed_login_url(self, login_url: str) -> bool:
        """Check a caller-supplied provider base URL against the allow-list."""
        return normalize_login_url(login_url) in self.allowed_login_urls

    def resolve_login_url(self, login_url: str | None) -> str:
        """
        Resolve the provider base URL for a request.

        Args:
            login_url: Caller-supplied base URL, or None for the default

        Returns:
            Normalized provider base URL

        Raises:
            ValueError: If the URL is not in the allow-list
        """
        if not login_url:
            return self.login_url
        if not self.is_allowed_login_url(login_url):
            raise ValueError(
                f"Unknown login_url: {login_url}. Allowed: {self.allowed_login_urls}"
            )
        return normalize_login_url(login_url)

    def authorize_url(self, login_url: str) -> str:
        """Provider authorization endpoint for a base URL."""
        return f"{login_url}{AUTHORIZE_PATH}"

    def token_url(self, login_url: str) -> str:
        """Provider token endpoint for a base URL."""
        return f"{login_url}{TOKEN_PATH}"

    def validate(self) -> None:
        """Validate required configuration. Call at startup to fail fast."""
        if not self.client_id:
            raise ConfigurationError("CLIENT_ID environment variable is required")
        if not self.redirect_uri:
            raise ConfigurationError("REDIRECT_URI must not be empty")
        if self.provider_timeout <= 0:
            raise ConfigurationError("PROVIDER_TIMEOUT must be greater than zero")
        for url in self.allowed_login_urls:
            if STATE_DELIMITER in url:
                raise ConfigurationError(
                    f"Login URL must not contain '{STATE_DELIMITER}': {url}"
                )
            parsed = urlparse(url)
            if parsed.scheme not in ("http", "https") or not parsed.netloc:
                raise ConfigurationError(f"Login URL is not an http(s) URL: {url}")
