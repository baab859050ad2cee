"""OIDC discovery and JWKS endpoints."""

from fastapi import APIRouter, Response

from proxima.api.deps import EngineDep
from proxima.crypto.types import JWKSResponse
from proxima.oidc.discovery import DiscoveryDocument, build_discovery

router = APIRouter(tags=["discovery"])

METADATA_CACHE_CONTROL = "public, max-age=60"


@router.get("/.well-known/openid-configuration")
@router.get("/.well-known/openid_configuration", include_in_schema=False)
async def openid_configuration(
    response: Response,
    engine: EngineDep,
) -> DiscoveryDocument:
    """OpenID Connect Discovery 1.0."""
    response.headers["Cache-Control"] = METADATA_CACHE_CONTROL
    return build_discovery(engine.settings.issuer, engine.presets)


@router.get("/.well-known/jwks.json")
@router.get("/oauth/jwks", include_in_schema=False)
@router.get("/proxima/api/jwt/.well-known/jwks.json", include_in_schema=False)
async def jwks(
    response: Response,
    engine: EngineDep,
) -> JWKSResponse:
    """JSON Web Key Set endpoint."""
    response.headers["Cache-Control"] = METADATA_CACHE_CONTROL
    return JWKSResponse(keys=engine.keys.public_jwk_set())
