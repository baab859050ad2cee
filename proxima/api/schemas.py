"""Pydantic schemas for the key and token management API (camelCase on the wire)."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, JsonValue

from proxima.crypto.types import SIGNING_ALGORITHM

DEFAULT_MINT_TTL = 3600


def _to_camel(name: str) -> str:
    """Convert snake_case to camelCase for JSON serialization."""
    parts = name.split("_")
    return parts[0] + "".join(p.capitalize() for p in parts[1:])


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=_to_camel,
        populate_by_name=True,
    )


class KeyRequest(_CamelModel):
    """Request body for POST /proxima/api/jwt/keys/rsa."""

    key_id: str | None = None


class KeyResponse(_CamelModel):
    """Public description of a signing key."""

    key_id: str
    algorithm: str
    public_key: str
    status: str = "success"


class KeyListResponse(_CamelModel):
    """Response for GET /proxima/api/jwt/keys."""

    rsa_keys: list[str]
    total_keys: int
    status: str = "success"


class ErrorResponse(BaseModel):
    """Error envelope used by the management API."""

    status: str = "error"
    message: str


class TokenMintRequest(_CamelModel):
    """Request body for POST /proxima/api/jwt/tokens."""

    subject: str | None = None
    algorithm: str = SIGNING_ALGORITHM
    key_id: str = "default"
    expiration_seconds: int = DEFAULT_MINT_TTL
    claims: dict[str, JsonValue] = Field(default_factory=dict)


class TokenMintResponse(_CamelModel):
    """A freshly signed JWT and the parameters it was minted with."""

    token: str
    subject: str
    algorithm: str
    key_id: str
    expires_in: int
    expires_at: datetime
    claims: dict[str, JsonValue]
