"""OIDC token endpoint."""

from typing import Annotated

from fastapi import APIRouter, Form
from starlette.responses import JSONResponse

from proxima.api.deps import EngineDep
from proxima.oidc.errors import OAuthError
from proxima.oidc.types import TokenRequest

router = APIRouter(tags=["oauth"])

HTTP_BAD_REQUEST = 400
NO_STORE_HEADERS = {"Cache-Control": "no-store", "Pragma": "no-cache"}


@router.post("/oauth2/token", response_model=None)
@router.post("/oauth/token", response_model=None, include_in_schema=False)
async def token_endpoint(
    engine: EngineDep,
    form: Annotated[TokenRequest, Form()],
) -> JSONResponse:
    """POST /oauth2/token -- exchange an authorization code for tokens."""
    try:
        tokens = engine.tokens.exchange(form)
    except OAuthError as exc:
        return JSONResponse(
            exc.to_dict(),
            status_code=HTTP_BAD_REQUEST,
            headers=NO_STORE_HEADERS,
        )
    return JSONResponse(tokens.model_dump(), headers=NO_STORE_HEADERS)
