"""OIDC authorization endpoint."""

from typing import Annotated

from fastapi import APIRouter, Query
from fastapi.responses import RedirectResponse
from pydantic import BaseModel
from starlette.responses import JSONResponse

from proxima.api.deps import EngineDep
from proxima.oidc.authorize import AuthorizeRequest, Redirect, authorize

router = APIRouter(tags=["oauth"])

HTTP_BAD_REQUEST = 400
HTTP_FOUND = 302


class _AuthQuery(BaseModel):
    """Bundle query params for the authorize endpoint."""

    response_type: str | None = None
    client_id: str | None = None
    redirect_uri: str | None = None
    scope: str | None = None
    state: str | None = None
    nonce: str | None = None


@router.get("/oauth2/authorize", response_model=None)
@router.get("/oauth/authorize", response_model=None, include_in_schema=False)
async def authorize_endpoint(
    engine: EngineDep,
    q: Annotated[_AuthQuery, Query()],
) -> RedirectResponse | JSONResponse:
    """GET /oauth2/authorize -- OIDC authorization endpoint."""
    outcome = authorize(
        engine.presets,
        engine.codes,
        AuthorizeRequest(**q.model_dump()),
    )
    if isinstance(outcome, Redirect):
        return RedirectResponse(url=outcome.location, status_code=HTTP_FOUND)
    return JSONResponse(outcome.error.to_dict(), status_code=HTTP_BAD_REQUEST)
