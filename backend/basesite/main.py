"""
Base Example Site — FastAPI Application Factory
=================================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes middleware registration, route mounting, template
       setup and the Base API client lifecycle in one place.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn (uvicorn basesite.main:app) or the `basesite`
       console script.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌─────────┐ ┌────────┐ ┌─────────┐ ┌──────┐        │
    │  │ Session │→│ Req ID │→│ Logging │→│ GZip │        │
    │  └─────────┘ └────────┘ └─────────┘ └──────┘        │
    │                                                     │
    │  Routes:                                            │
    │  ┌────────────────────────────┐ ┌─────────────────┐ │
    │  │ Dispatcher(ROUTE_TABLE)    │ │ GET /health     │ │
    │  │ HTML pages, 303 redirects  │ │ JSON            │ │
    │  └────────────────────────────┘ └─────────────────┘ │
    │                                                     │
    │  Exception Handler:                                 │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ anything unexpected → error.html, 500        │   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Validate configuration (logged, not fatal)
    3. Create the upload directory
    4. Open the Base API client (unless one was injected)

    Shutdown:
    1. Close the Base API client's connection pool (if we opened it)
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.templating import Jinja2Templates
from starlette.middleware.sessions import SessionMiddleware

from basesite import __version__
from basesite.config import settings
from basesite.dispatcher import Dispatcher, build_router
from basesite.messages import GENERIC_MESSAGE
from basesite.middleware.logging import RequestLoggingMiddleware
from basesite.middleware.request_id import (
    RequestIDLogFilter,
    RequestIDMiddleware,
    request_id_var,
)
from basesite.routes import ROUTE_TABLE, health
from basesite.services.base_client import BaseClient

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s [%(request_id)s] %(message)s
    Called once from the lifespan, before anything else logs. The filter
    sits on the handler so records from every logger get a request_id.
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestIDLogFilter())
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s [%(request_id)s] %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[handler],
        force=True,
    )

    # Our access log replaces uvicorn's; httpx logs every API call at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("python_multipart").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

def _create_client() -> BaseClient:
    return BaseClient(
        access_token=settings.base_access_token,
        url=settings.base_api_url,
        timeout=settings.base_api_timeout,
        per_page=settings.per_page,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup before the yield, shutdown after.

    A client injected through create_app(client=...) belongs to the caller
    and is left open on shutdown.
    """
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("Base example site %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Not fatal: the development defaults work against a local sandbox
        logger.error("Configuration error: %s", str(e))

    upload_dir = Path(settings.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Upload directory: %s", upload_dir.resolve())

    owns_client = getattr(app.state, "base_client", None) is None
    if owns_client:
        app.state.base_client = _create_client()

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Base example site shutting down...")
    if owns_client:
        await app.state.base_client.aclose()
        app.state.base_client = None
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI, templates: Jinja2Templates) -> None:
    """
    Last line of defence.

    Route operations never raise (results.invoke wraps them), so anything
    reaching this handler is a bug in a transform or a template. The page
    shows the generic message; the stack trace goes to the log only.
    """

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return templates.TemplateResponse(
            request,
            "error.html",
            {
                "logged_in": False,
                "current_user_id": None,
                "error": GENERIC_MESSAGE,
                "request_id": rid,
            },
            status_code=500,
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(client: Optional[BaseClient] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        client: Base API client to use instead of one built from settings.
                Tests pass a mock here.
    """
    app = FastAPI(
        title="Base Example Site",
        description="Example website built on the Base API.",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        lifespan=lifespan,
    )
    app.state.base_client = client

    templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition (last added = outermost)

    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret_key,
        session_cookie=settings.session_cookie,
        https_only=settings.session_https_only,
        same_site="lax",
    )

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app, templates)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(build_router(Dispatcher(templates), ROUTE_TABLE))
    app.include_router(health.router)

    return app


def run() -> None:
    """Console script entry point."""
    import uvicorn

    uvicorn.run(
        "basesite.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower(),
    )


# ── Application Instance ─────────────────────────────────────────────────
# uvicorn expects `basesite.main:app` to be importable
app = create_app()
