"""Signing key provisioning and ad-hoc token minting endpoints."""

import logging
from datetime import UTC, datetime, timedelta

from fastapi import APIRouter
from starlette.responses import JSONResponse

from proxima.api.deps import EngineDep
from proxima.api.schemas import (
    ErrorResponse,
    KeyListResponse,
    KeyRequest,
    KeyResponse,
    TokenMintRequest,
    TokenMintResponse,
)
from proxima.crypto.key_manager import DuplicateKeyIdError, UnknownKeyIdError
from proxima.crypto.keys import generate_key_id
from proxima.crypto.types import SIGNING_ALGORITHM, SigningKey
from proxima.oidc.claims import mint_claims

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/proxima/api/jwt", tags=["keys"])

HTTP_BAD_REQUEST = 400
HTTP_NOT_FOUND = 404


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(
        ErrorResponse(message=message).model_dump(), status_code=status_code
    )


def _key_to_response(key: SigningKey) -> KeyResponse:
    return KeyResponse(
        key_id=key.kid,
        algorithm=key.algorithm,
        public_key=key.public_key_pem,
    )


# plain def: FastAPI runs it in the threadpool, RSA generation is CPU-bound
@router.post("/keys/rsa", response_model=None)
def create_rsa_key(
    payload: KeyRequest,
    engine: EngineDep,
) -> KeyResponse | JSONResponse:
    """POST /proxima/api/jwt/keys/rsa -- provision a new RS256 signing key."""
    kid = payload.key_id if payload.key_id is not None else generate_key_id()
    if not kid.strip():
        return _error("Key ID is required", HTTP_BAD_REQUEST)
    try:
        key = engine.keys.create_key(kid)
    except DuplicateKeyIdError:
        logger.warning("Rejected duplicate key id %s", kid)
        return _error("Key ID already exists", HTTP_BAD_REQUEST)
    return _key_to_response(key)


@router.get("/keys")
async def list_keys(engine: EngineDep) -> KeyListResponse:
    """GET /proxima/api/jwt/keys -- list registered key ids."""
    kids = engine.keys.key_ids()
    return KeyListResponse(rsa_keys=kids, total_keys=len(kids))


@router.get("/keys/{key_id}/public", response_model=None)
async def get_public_key(
    key_id: str,
    engine: EngineDep,
) -> KeyResponse | JSONResponse:
    """GET /proxima/api/jwt/keys/{keyId}/public -- PEM public key."""
    try:
        key = engine.keys.get_key(key_id)
    except UnknownKeyIdError:
        return _error("Key not found", HTTP_NOT_FOUND)
    return _key_to_response(key)


@router.post("/tokens", response_model=None)
async def mint_token(
    payload: TokenMintRequest,
    engine: EngineDep,
) -> TokenMintResponse | JSONResponse:
    """POST /proxima/api/jwt/tokens -- sign arbitrary claims for a subject.

    Only RS256 keys exist, and the lifetime is bounded by the configured
    maximum token TTL.
    """
    if payload.subject is None or not payload.subject.strip():
        return _error("Subject is required", HTTP_BAD_REQUEST)
    if payload.algorithm.upper() != SIGNING_ALGORITHM:
        return _error("Unsupported algorithm", HTTP_BAD_REQUEST)
    max_ttl = engine.settings.max_token_ttl
    if not 0 < payload.expiration_seconds <= max_ttl:
        return _error(
            f"Expiration must be between 1 and {max_ttl} seconds", HTTP_BAD_REQUEST
        )

    issued_at = datetime.now(UTC)
    expires_at = issued_at + timedelta(seconds=payload.expiration_seconds)
    claims = mint_claims(payload.subject, payload.claims, issued_at, expires_at)
    try:
        token = engine.keys.sign(payload.key_id, claims)
    except UnknownKeyIdError:
        return _error("Key not found", HTTP_BAD_REQUEST)

    logger.info(
        "Minted token for subject %s with key %s", payload.subject, payload.key_id
    )
    return TokenMintResponse(
        token=token,
        subject=payload.subject,
        algorithm=SIGNING_ALGORITHM,
        key_id=payload.key_id,
        expires_in=payload.expiration_seconds,
        expires_at=expires_at,
        claims=payload.claims,
    )
