from __future__ import annotations

from fastapi import APIRouter

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check() -> dict:
    """Liveness probe.

    Does not touch Redis or the upstream API, so load balancers can poll it
    freely.

    Returns:
        dict: ``{"status": "ok"}``.
    """

    return {"status": "ok"}
