"""FastAPI application factory, middleware pipeline and process entry point."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncEngine

from app.config import Settings, settings
from app.db.engine import dispose_engine
from app.logging_config import configure_logging
from app.middleware.access_log import AccessLogMiddleware
from app.routers import health, root
from app.startup import StartupError, start_database

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Own the engine for the application's lifetime.

    When the app was created without an engine (``uvicorn app.main:app``),
    run the startup sequence here; a ``StartupError`` aborts uvicorn before
    it binds the listener.
    """
    if app.state.engine is None:
        config: Settings = app.state.settings
        configure_logging(json_logs=not config.debug, log_level=config.log_level)
        app.state.engine = await start_database(config)

    yield

    await dispose_engine(app.state.engine)
    app.state.engine = None


def middleware_pipeline(config: Settings) -> list[tuple[type, dict]]:
    """Return the middleware stack, outermost first."""
    return [
        (AccessLogMiddleware, {}),
        (
            CORSMiddleware,
            {
                "allow_origins": ["*"],
                "allow_methods": ["*"],
                "allow_headers": ["*"],
                "max_age": config.cors_max_age,
            },
        ),
    ]


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return a JSON 500 response for any unhandled exception."""
    logger.exception("unhandled_exception", path=request.url.path, method=request.method)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def create_app(engine: AsyncEngine | None = None, config: Settings = settings) -> FastAPI:
    """Build the application around an (optionally pre-built) connection pool."""
    app = FastAPI(title=config.app_name, lifespan=lifespan)
    app.state.settings = config
    app.state.engine = engine

    # add_middleware wraps the existing stack, so install innermost first
    for middleware_class, options in reversed(middleware_pipeline(config)):
        app.add_middleware(middleware_class, **options)

    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(root.router)
    app.include_router(health.router)
    return app


async def serve(config: Settings) -> int:
    """Start the database, then serve HTTP until shutdown.

    Returns:
        Process exit status: 1 if startup failed, 0 after a clean shutdown.
    """
    try:
        engine = await start_database(config)
    except StartupError as exc:
        logger.critical("startup_failed", error=str(exc))
        return 1

    server = uvicorn.Server(
        uvicorn.Config(
            create_app(engine, config),
            host=config.host,
            port=config.port,
            log_config=None,
            access_log=False,
        )
    )
    logger.info("server_starting", app=config.app_name, host=config.host, port=config.port)
    await server.serve()
    return 0


def main() -> int:
    """Console entry point."""
    configure_logging(json_logs=not settings.debug, log_level=settings.log_level)
    return asyncio.run(serve(settings))


app = create_app()
