"""Application factory for the FastAPI app.

Centralizes app construction (metadata, middleware, handlers, routers) so
tests can build isolated instances.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.routes import health_router, indices_router, meta_router
from app.core.config import settings
from app.core.dependencies import close_dependencies
from app.core.exception_handlers import setup_exception_handlers
from app.core.logging import configure_logging
from app.core.middleware import request_id_middleware


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield
    close_dependencies()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance.

    Returns:
        Configured FastAPI app with middleware, handlers and routers.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="Market Index API",
        description=(
            "Current prices and 30-day history for the tracked market index ETFs. "
            "Upstream Twelve Data calls are cached and guarded by a per-minute "
            "sliding window and a monthly request budget; /api/meta/limits "
            "reports current usage."
        ),
        version="0.1.0",
        debug=settings.app.debug,
        lifespan=lifespan,
    )

    # Middleware
    app.middleware("http")(request_id_middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.app.cors_origin_list,
        allow_methods=["GET"],
        allow_headers=["*"],
        expose_headers=[settings.log.request_id_header, "Retry-After"],
    )

    # Exception handlers
    setup_exception_handlers(app)

    # Routers
    app.include_router(indices_router)
    app.include_router(meta_router)
    app.include_router(health_router)

    return app
