"""
Tests for relay configuration and the provider allow-list.
"""

import os
from unittest.mock import patch

import pytest

from relay.core.exceptions import ConfigurationError
from relay.oauth.config import (
    DEFAULT_REDIRECT_URI,
    DEFAULT_SCOPE,
    PRODUCTION_LOGIN_URL,
    SANDBOX_LOGIN_URL,
    RelayConfig,
)


class TestRelayConfigFromEnv:
    """Tests for RelayConfig.from_env."""

    def test_from_env_loads_variables(self):
        """Test loading config from environment variables."""
        env = {
            "PORT": "8080",
            "LOGIN_URL": "https://login.example/",
            "CLIENT_ID": "client-id",
            "CLIENT_SECRET": "client-secret",
            "REDIRECT_URI": "https://relay.example/callback",
            "SCOPE": "api",
            "PROVIDER_TIMEOUT": "2.5",
        }

        with patch.dict(os.environ, env, clear=True):
            config = RelayConfig.from_env()

        assert config.port == 8080
        assert config.login_url == "https://login.example"
        assert config.client_id == "client-id"
        assert config.client_secret == "client-secret"
        assert config.redirect_uri == "https://relay.example/callback"
        assert config.scope == "api"
        assert config.provider_timeout == 2.5

    def test_from_env_defaults(self):
        """Test defaults when only CLIENT_ID is set."""
        with patch.dict(os.environ, {"CLIENT_ID": "client-id"}, clear=True):
            config = RelayConfig.from_env()

        assert config.port == 3000
        assert config.login_url == PRODUCTION_LOGIN_URL
        assert config.redirect_uri == DEFAULT_REDIRECT_URI
        assert config.scope == DEFAULT_SCOPE
        assert config.client_secret is None

    def test_from_env_invalid_port(self):
        """Test a non-numeric PORT is a configuration error."""
        with patch.dict(os.environ, {"PORT": "eighty"}, clear=True):
            with pytest.raises(ConfigurationError):
                RelayConfig.from_env()


class TestRelayConfigValidate:
    """Tests for fail-fast validation."""

    def test_missing_client_id(self):
        """Test CLIENT_ID is required."""
        with pytest.raises(ConfigurationError, match="CLIENT_ID"):
            RelayConfig(client_id=None).validate()

    def test_non_positive_timeout(self):
        """Test the provider timeout must be bounded and positive."""
        with pytest.raises(ConfigurationError, match="PROVIDER_TIMEOUT"):
            RelayConfig(client_id="id", provider_timeout=0).validate()

    def test_login_url_with_delimiter(self):
        """Test a login URL containing the state delimiter is rejected."""
        with pytest.raises(ConfigurationError):
            RelayConfig(client_id="id", login_url="https://a|b").validate()

    def test_login_url_not_http(self):
        """Test a login URL must be http(s)."""
        with pytest.raises(ConfigurationError):
            RelayConfig(client_id="id", login_url="ftp://login.example").validate()

    def test_valid_config(self):
        """Test a complete config validates."""
        RelayConfig(client_id="id").validate()


class TestLoginUrlResolution:
    """Tests for the login_url allow-list."""

    def test_allowed_login_urls_default_first(self):
        """Test the configured default leads the allow-list."""
        config = RelayConfig(client_id="id", login_url="https://login.example")

        assert config.allowed_login_urls == [
            "https://login.example",
            PRODUCTION_LOGIN_URL,
            SANDBOX_LOGIN_URL,
        ]

    def test_allowed_login_urls_no_duplicates(self):
        """Test the default is not listed twice."""
        config = RelayConfig(client_id="id", login_url=SANDBOX_LOGIN_URL)

        assert config.allowed_login_urls == [SANDBOX_LOGIN_URL, PRODUCTION_LOGIN_URL]

    def test_resolve_none_returns_default(self):
        """Test omitted login_url falls back to the default."""
        config = RelayConfig(client_id="id")

        assert config.resolve_login_url(None) == PRODUCTION_LOGIN_URL

    def test_resolve_sandbox(self):
        """Test the sandbox environment is accepted and normalized."""
        config = RelayConfig(client_id="id")

        assert config.resolve_login_url(SANDBOX_LOGIN_URL + "/") == SANDBOX_LOGIN_URL

    def test_resolve_unknown_raises(self):
        """Test URLs outside the allow-list are rejected."""
        config = RelayConfig(client_id="id")

        with pytest.raises(ValueError, match="Unknown login_url"):
            config.resolve_login_url("https://evil.example")

    def test_endpoint_urls(self):
        """Test authorize and token endpoint construction."""
        config = RelayConfig(client_id="id")

        assert (
            config.authorize_url(SANDBOX_LOGIN_URL)
            == "https://test.salesforce.com/services/oauth2/authorize"
        )
        assert (
            config.token_url(SANDBOX_LOGIN_URL)
            == "https://test.salesforce.com/services/oauth2/token"
        )
