"""Logfire cloud observability initialization and instrumentation."""

import logging

import logfire

from arena import __version__
from arena.config import Settings

logger = logging.getLogger(__name__)


def initialize_logfire(settings: Settings, app=None, engine=None) -> None:
    """
    Initialize Logfire and instrument the moving parts.

    Call once at process startup. Instruments:
    - HTTPX clients (football-data.org)
    - SQLAlchemy: the given engine, or every engine created afterwards
      (CLI and scheduler runs build a fresh engine per run)
    - FastAPI app, when one is passed
    - Python logging (bridges to Logfire)

    Without a token this only logs a warning; observability never stops the
    ledger from running.
    """
    if not settings.logfire_token:
        logger.warning("Logfire token not set - observability disabled")
        return

    try:
        logfire.configure(
            token=settings.logfire_token,
            service_name="arena",
            service_version=__version__,
            environment=settings.environment,
        )

        logfire.instrument_httpx()

        if engine is not None:
            logfire.instrument_sqlalchemy(engine=engine.sync_engine)
        else:
            logfire.instrument_sqlalchemy()

        if app is not None:
            logfire.instrument_fastapi(app)

        logging.getLogger().addHandler(logfire.LogfireLoggingHandler())

        logger.info("✓ Logfire cloud tracking initialized")

    except Exception as e:
        logger.warning(f"Failed to initialize Logfire: {e}")
