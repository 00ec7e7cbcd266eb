"""
Core domain models for token responses.

These models describe what the provider token endpoint returns and what
the relay hands back to callers. Nothing here is persisted.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TokenResponse(BaseModel):
    """Token endpoint response from the provider."""

    access_token: str = Field(description="Short-lived API credential")
    instance_url: str = Field(description="Base URL of the API instance")
    refresh_token: Optional[str] = Field(
        default=None, description="Long-lived credential (authorization_code grant only)"
    )

    model_config = ConfigDict(extra="allow")

    def redirect_params(self) -> list[tuple[str, str]]:
        """Query parameters appended to the caller redirect on callback."""
        params = [("access_token", self.access_token)]
        if self.refresh_token is not None:
            params.append(("refresh_token", self.refresh_token))
        params.append(("instance_url", self.instance_url))
        return params


class RefreshResponse(BaseModel):
    """Response body for POST /refresh. The refresh token is not echoed."""

    access_token: str
    instance_url: str
