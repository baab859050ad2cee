"""FastAPI dependencies exposing the shared engine."""

from typing import Annotated

from fastapi import Depends, Request

from proxima.core.engine import Engine


def get_engine(request: Request) -> Engine:
    """Return the engine attached to the running application."""
    engine: Engine = request.app.state.engine
    return engine


EngineDep = Annotated[Engine, Depends(get_engine)]
