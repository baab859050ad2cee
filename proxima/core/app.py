"""FastAPI application factory for the Proxima OIDC mock server."""

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse

from proxima.api.router_keys import router as keys_router
from proxima.core.engine import build_engine, sweep_codes_forever
from proxima.core.settings import AuthSettings
from proxima.crypto.key_manager import KeyManagerError
from proxima.oidc.auth_code import CodeCollisionError
from proxima.oidc.presets import PresetRegistry
from proxima.oidc.routes_authorize import router as authorize_router
from proxima.oidc.routes_discovery import router as discovery_router
from proxima.oidc.routes_token import router as token_router

logger = logging.getLogger(__name__)

HTTP_SERVER_ERROR = 500


async def _internal_fault(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Internal fault on %s %s: %s",
        request.method,
        request.url.path,
        type(exc).__name__,
    )
    return JSONResponse({"error": "server_error"}, status_code=HTTP_SERVER_ERROR)


def create_app(
    settings: AuthSettings | None = None,
    presets: PresetRegistry | None = None,
) -> FastAPI:
    """Build and configure the FastAPI application."""
    settings = settings or AuthSettings()
    logging.getLogger("proxima").setLevel(settings.log_level.upper())
    engine = build_engine(settings, presets)

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        sweeper = asyncio.create_task(
            sweep_codes_forever(engine.codes, settings.code_sweep_interval)
        )
        yield
        sweeper.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sweeper

    app = FastAPI(
        title="Proxima OIDC Mock Server",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.engine = engine

    origins = settings.get_cors_origin_list()
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=["GET", "POST"],
            allow_headers=["Authorization", "Content-Type"],
        )

    app.add_exception_handler(KeyManagerError, _internal_fault)
    app.add_exception_handler(CodeCollisionError, _internal_fault)

    app.include_router(discovery_router)
    app.include_router(authorize_router)
    app.include_router(token_router)
    app.include_router(keys_router)

    return app
