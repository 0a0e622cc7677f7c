"""Centralized FastAPI dependencies for use with Depends()."""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncEngine


def get_engine(request: Request) -> AsyncEngine:
    """Return the connection pool attached to the running application.

    Raises:
        RuntimeError: If the application was built without an engine and its
            lifespan has not initialized one.
    """
    engine = getattr(request.app.state, "engine", None)
    if engine is None:
        msg = "Database engine not initialized. Call start_database() first."
        raise RuntimeError(msg)
    return engine


DBEngine = Annotated[AsyncEngine, Depends(get_engine)]

__all__ = ["DBEngine", "get_engine"]
