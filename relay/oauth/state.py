"""
Relay state carried through the provider's `state` parameter.

The provider echoes `state` back on the callback redirect, so it is the
only place to keep per-request context without a session store. The
value is `<provider base URL>|<caller redirect URI>`. Decoding splits on
the first delimiter; provider base URLs never contain it (enforced by
RelayConfig.validate), so caller redirect URIs may.
"""

from typing import Callable, NamedTuple

from relay.core.exceptions import InvalidStateError


STATE_DELIMITER = "|"


def normalize_login_url(login_url: str) -> str:
    """Strip trailing slashes so 'https://x/' and 'https://x' compare equal."""
    return login_url.rstrip("/")


class RelayState(NamedTuple):
    """Provider choice and final destination for one authorization flow."""

    login_url: str
    redirect_uri: str


def encode_state(state: RelayState) -> str:
    """Encode a RelayState into the opaque `state` string."""
    if STATE_DELIMITER in state.login_url:
        raise ValueError(f"login_url must not contain '{STATE_DELIMITER}'")
    return f"{state.login_url}{STATE_DELIMITER}{state.redirect_uri}"


def decode_state(
    value: str,
    is_allowed_login_url: Callable[[str], bool] | None = None,
) -> RelayState:
    """
    Decode the `state` string echoed back by the provider.

    Args:
        value: Raw `state` query parameter
        is_allowed_login_url: Optional allow-list check for the decoded
            provider base URL

    Returns:
        The decoded RelayState

    Raises:
        InvalidStateError: If the value is malformed or names a provider
            outside the allow-list
    """
    login_url, delimiter, redirect_uri = value.partition(STATE_DELIMITER)
    if not delimiter:
        raise InvalidStateError("State is missing the delimiter")
    login_url = normalize_login_url(login_url)
    if not login_url or not redirect_uri:
        raise InvalidStateError("State has an empty component")
    if is_allowed_login_url is not None and not is_allowed_login_url(login_url):
        raise InvalidStateError(f"State names an unknown login_url: {login_url}")
    return RelayState(login_url=login_url, redirect_uri=redirect_uri)
