from __future__ import annotations

from app.api.routes.health import router as health_router
from app.api.routes.indices import router as indices_router
from app.api.routes.meta import router as meta_router

__all__ = ["health_router", "indices_router", "meta_router"]
