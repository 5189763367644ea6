"""Keys server FastAPI application factory + lifespan lifecycle.

This module implements:
  - create_app(): testable application factory
  - lifespan: @asynccontextmanager startup/shutdown sequence
  - serve(): catch-all route handing every request to the dispatcher
  - app = create_app(): module-level instance for uvicorn

Startup sequence:
  1. load_settings()          → Settings from the environment (SystemExit on bad env)
  2. configure_logging()      → from LOG_LEVEL / JSON_LOGS
  3. load_keys_config()       → validated YAML key config (SystemExit on error)
  4. load_pgp_directory()     → optional, only when PGP_KEYS_PATH is set
  5. KeyRegistry.from_config  → app.state.context
  6. app.state.ready = True

All disk I/O happens here, before the first request; request handling only
reads the frozen registry.

Uvicorn entry point: ``keys-server`` (see keyserver/run.py), or
  uvicorn keyserver.main:app --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from starlette.responses import Response

from keyserver import __version__
from keyserver.config import Settings, load_settings
from keyserver.middleware import RequestLogMiddleware
from keyserver.registry import KeyRegistry, load_keys_config, load_pgp_directory
from keyserver.router import DEFAULT_RENDERERS, Renderers, ServerContext, handle_request
from keyserver.utils.logger import configure_logging, get_logger, log_duration

# ─── Logging Setup ────────────────────────────────────────────────────────────
# Configure logging at module import time (before any other imports that may log).
DEBUG = os.getenv("DEBUG", "false").lower() == "true"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO" if not DEBUG else "DEBUG")
JSON_LOGS = os.getenv("JSON_LOGS", "true").lower() == "true"

configure_logging(log_level=LOG_LEVEL, json_output=JSON_LOGS)
logger = get_logger(__name__)

# Every method reaches the dispatcher so that non-GET requests get its 404
# rather than FastAPI's 405.
_ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


# ─── Startup ──────────────────────────────────────────────────────────────────


def build_context(settings: Settings) -> ServerContext:
    """Load every key source named by ``settings`` into a ServerContext.

    Raises:
        SystemExit(1): Propagated from load_keys_config() on any config error.
    """
    with log_duration("Key registry load", logger, config_path=settings.config_path):
        config = load_keys_config(settings.config_path)
        extra_pgp_keys = (
            load_pgp_directory(settings.pgp_keys_path) if settings.pgp_keys_path else []
        )
        registry = KeyRegistry.from_config(config, extra_pgp_keys)

    logger.info(
        "Key registry ready",
        ssh_keys=len(registry.ssh_keys),
        pgp_keys=len(registry.pgp_keys),
        known_hosts=len(registry.known_hosts),
    )
    return ServerContext(
        version=settings.version,
        instance_name=settings.instance_name,
        registry=registry,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: load settings and keys, then mark ready.

    A context injected through create_app(context=...) is kept as-is and no
    files are read.
    """
    logger.info("Keys server starting up...")

    if app.state.context is None:
        settings = load_settings()
        configure_logging(log_level=settings.log_level, json_output=settings.json_logs)
        app.state.context = build_context(settings)

    app.state.ready = True
    logger.info(
        "Keys server ready",
        version=app.state.context.version,
        instance_name=app.state.context.instance_name,
    )

    yield

    app.state.ready = False
    logger.info("Keys server shutdown complete")


# ─── Application Factory ──────────────────────────────────────────────────────


def create_app(
    context: Optional[ServerContext] = None,
    renderers: Renderers = DEFAULT_RENDERERS,
) -> FastAPI:
    """Create and configure the keys server FastAPI application.

    Call this function directly in tests with a prepared context:
        app = create_app(context=ServerContext(version="test", instance_name="t"))

    Without a context, the lifespan loads one from the environment at startup.

    Returns:
        Configured FastAPI application with lifespan, middleware and the
        catch-all route.
    """
    _debug = os.getenv("DEBUG", "false").lower() == "true"

    application = FastAPI(
        title="Keys Server",
        description="SSH keys, PGP keys and known hosts over HTTP",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if _debug else None,
        redoc_url="/redoc" if _debug else None,
        openapi_url="/openapi.json" if _debug else None,
    )

    application.state.context = context
    application.state.renderers = renderers
    application.state.ready = context is not None

    application.add_middleware(RequestLogMiddleware)

    @application.api_route("/{path:path}", methods=_ALL_METHODS, include_in_schema=False)
    async def serve(request: Request) -> Response:
        """Hand the request to the dispatcher; it owns routing and error handling."""
        server_context: Optional[ServerContext] = request.app.state.context
        if server_context is None or not request.app.state.ready:
            logger.warning("Request received before startup completed", path=request.url.path)
            return Response(status_code=503)

        return handle_request(
            request.method,
            request.url,
            request.headers,
            server_context,
            request.app.state.renderers,
        )

    return application


# ─── Module-Level App (for uvicorn) ───────────────────────────────────────────

app = create_app()
