"""
Domain exceptions for the relay.

These exceptions are caught by centralized exception handlers in main.py
and mapped to HTTP responses there.
"""


class ConfigurationError(ValueError):
    """Raised when required settings are missing or invalid at startup."""

    pass


class StartupError(Exception):
    """Raised when the server cannot start (e.g., the port cannot be bound)."""

    pass


class InvalidStateError(Exception):
    """
    Raised when the `state` echoed back by the provider cannot be decoded.

    This is a client-side error and results in a 400 response.
    """

    pass


class ProviderError(Exception):
    """
    The provider token endpoint did not produce a usable token response.

    Returned (not raised) by the token client so callers decide how to
    propagate it. Handlers raise it and the application maps it to an
    HTTP status in one place.

    Attributes:
        message: Short description of the failure
        status_code: HTTP status returned by the provider, or None when
            no response was received or it could not be parsed
        body: Raw response text from the provider (may be empty)
        timed_out: True when the provider did not answer in time
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: str = "",
        timed_out: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.body = body
        self.timed_out = timed_out

    @property
    def is_client_error(self) -> bool:
        """True when the provider rejected the request itself (4xx)."""
        return self.status_code is not None and 400 <= self.status_code < 500
