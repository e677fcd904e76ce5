"""FastAPI application factory.

App factory pattern — create_app() returns a configured FastAPI instance.
The channel registry is created here and lives on app.state for the whole
process; lifespan shutdown closes every live connection and the DB pool.
"""

import logging
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from complimentbox import __version__
from complimentbox.api import api_router
from complimentbox.config import settings
from complimentbox.realtime.registry import ChannelRegistry

logger = structlog.get_logger()


def configure_logging(level: str, fmt: str) -> None:
    """Configure structlog with the specified level and format."""
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if fmt == "json":
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper())
        ),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle."""
    logger.info(
        "compliments.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    yield

    logger.info("compliments.shutdown")

    # Forcibly close every live WebSocket
    await app.state.registry.close()

    from complimentbox.db.engine import engine
    await engine.dispose()


async def _validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies are a bad request, same as blank fields."""
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    configure_logging(settings.log_level, settings.log_format)

    app = FastAPI(
        title="complimentbox",
        description="Anonymous compliments, delivered live to whoever holds the code",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.registry = ChannelRegistry()

    # ── Middleware stack ──────────────────────────────────────
    # Starlette middleware executes in reverse order of registration.
    # Request flow: CORS → Security → RequestId → handler

    from complimentbox.middleware.request_id import RequestIdMiddleware
    from complimentbox.middleware.security import SecurityHeadersMiddleware

    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, _validation_error_handler)

    app.include_router(api_router)

    from complimentbox.realtime.gateway import router as ws_router
    app.include_router(ws_router)

    return app


# Default app instance (used by uvicorn: complimentbox.main:app)
app = create_app()
