"""Type definitions for OIDC token operations."""

from pydantic import BaseModel


class TokenResponse(BaseModel):
    """OAuth token endpoint response."""

    access_token: str
    id_token: str
    token_type: str = "Bearer"
    expires_in: int
    scope: str | None = None


class TokenRequest(BaseModel):
    """Form fields accepted by the token endpoint."""

    grant_type: str | None = None
    code: str | None = None
    client_id: str | None = None
    redirect_uri: str | None = None
