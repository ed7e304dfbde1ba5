"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Lifespan manages startup/shutdown (database engine).
Middleware, CORS, and routers all registered here.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from storefront import __version__
from storefront.api import api_router
from storefront.config import settings

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle."""
    logger.info(
        "storefront.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    yield

    logger.info("storefront.shutdown")

    # Close database engine
    from storefront.db.engine import engine
    await engine.dispose()


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    app = FastAPI(
        title="Storefront",
        description="Customer and seller accounts for the storefront backend",
        version=__version__,
        lifespan=lifespan,
    )

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: CORS → Security → RequestId → handler

    from storefront.middleware.request_id import RequestIdMiddleware
    from storefront.middleware.security import SecurityHeadersMiddleware

    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)

    return app


# Default app instance (used by uvicorn: storefront.main:app)
app = create_app()
