"""OpenID Connect Discovery document builder."""

from pydantic import BaseModel

from proxima.oidc.presets import PresetRegistry

CLAIMS_SUPPORTED = [
    "sub",
    "iss",
    "aud",
    "exp",
    "iat",
    "nonce",
    "email",
    "name",
    "preferred_username",
    "groups",
]


class DiscoveryDocument(BaseModel):
    """OIDC .well-known/openid-configuration response."""

    issuer: str
    authorization_endpoint: str
    token_endpoint: str
    jwks_uri: str
    response_types_supported: list[str]
    response_modes_supported: list[str]
    grant_types_supported: list[str]
    subject_types_supported: list[str]
    id_token_signing_alg_values_supported: list[str]
    scopes_supported: list[str]
    token_endpoint_auth_methods_supported: list[str]
    claims_supported: list[str]


def build_discovery(issuer: str, registry: PresetRegistry) -> DiscoveryDocument:
    """Build the OIDC discovery document for ``issuer``."""
    issuer = issuer.rstrip("/")
    return DiscoveryDocument(
        issuer=issuer,
        authorization_endpoint=f"{issuer}/oauth2/authorize",
        token_endpoint=f"{issuer}/oauth2/token",
        jwks_uri=f"{issuer}/.well-known/jwks.json",
        response_types_supported=["code"],
        response_modes_supported=["query"],
        grant_types_supported=["authorization_code"],
        subject_types_supported=["public"],
        id_token_signing_alg_values_supported=["RS256"],
        scopes_supported=registry.scopes_supported(),
        token_endpoint_auth_methods_supported=["none"],
        claims_supported=list(CLAIMS_SUPPORTED),
    )
