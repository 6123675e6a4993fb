"""
FastAPI application for the Arena ledger.

Ledger errors are mapped onto HTTP statuses here so routes can simply let
them propagate:

- AuthenticationError   -> 401
- ValidationError       -> 400
- NotFoundError         -> 404
- StateError            -> 409 (body carries the match status)
- ConfigurationError    -> 503
- ExternalServiceError  -> 502
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from arena import __version__
from arena.api.routes import admin_router, agents_router, bets_router
from arena.config import Settings, get_settings
from arena.container import Container, build_container
from arena.errors import (
    AuthenticationError,
    ConfigurationError,
    ExternalServiceError,
    NotFoundError,
    StateError,
    ValidationError,
)
from arena.observability import initialize_logfire

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


def _error(status_code: int, exc: Exception, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": str(exc), **extra})


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AuthenticationError)
    async def handle_auth(request: Request, exc: AuthenticationError):
        return _error(401, exc)

    @app.exception_handler(ValidationError)
    async def handle_validation(request: Request, exc: ValidationError):
        limit = str(exc.limit) if exc.limit is not None else None
        return _error(400, exc, code=exc.code, limit=limit)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error(404, exc)

    @app.exception_handler(StateError)
    async def handle_state(request: Request, exc: StateError):
        return _error(409, exc, status=exc.status)

    @app.exception_handler(ConfigurationError)
    async def handle_configuration(request: Request, exc: ConfigurationError):
        logger.error(f"Configuration error: {exc}")
        return _error(503, exc)

    @app.exception_handler(ExternalServiceError)
    async def handle_external(request: Request, exc: ExternalServiceError):
        logger.error(f"External service error: {exc}")
        return _error(502, exc)


def create_app(
    settings: Settings | None = None,
    container: Container | None = None,
) -> FastAPI:
    """
    Build the app. Without a container one is built from settings here and
    disposed on shutdown.
    """
    settings = settings or (container.settings if container else get_settings())
    owned = container is None
    if owned:
        container = build_container(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Arena API starting ({settings.environment})")

        yield

        logger.info("Arena API shutting down")
        if owned:
            await app.state.container.close()

    app = FastAPI(
        title="Arena Ledger API",
        description="Pari-mutuel wagering ledger for football prediction agents",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000", "http://localhost:3001"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(bets_router, prefix=API_PREFIX)
    app.include_router(agents_router, prefix=API_PREFIX)
    app.include_router(admin_router, prefix=API_PREFIX)

    if owned:
        initialize_logfire(settings, app=app, engine=container.engine)

    @app.get("/health")
    async def health():
        return {"status": "ok", "version": __version__}

    return app
