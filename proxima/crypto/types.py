"""Type definitions for signing keys and JWKS documents."""

from pydantic import BaseModel, ConfigDict

SIGNING_ALGORITHM = "RS256"


class SigningKey(BaseModel):
    """Public view of an RSA signing key. Private material is never included."""

    model_config = ConfigDict(frozen=True)

    kid: str
    algorithm: str = SIGNING_ALGORITHM
    public_key_pem: str


class JWKEntry(BaseModel):
    """Single JWK entry in a JWKS response."""

    kty: str = "RSA"
    use: str = "sig"
    alg: str = SIGNING_ALGORITHM
    kid: str
    n: str
    e: str


class JWKSResponse(BaseModel):
    """JSON Web Key Set response."""

    keys: list[JWKEntry]
