from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from app.core.dependencies import get_usage_reporter
from app.schemas.usage import UsageSnapshot
from app.services.usage_reporter import UsageReporter

router = APIRouter(prefix="/api/meta", tags=["Meta"])


@router.get("/limits", response_model=UsageSnapshot)
def get_limits(
    reporter: Annotated[UsageReporter, Depends(get_usage_reporter)],
) -> UsageSnapshot:
    """Current minute-window and monthly usage.

    Reads the in-process window and the stored counter only; polling it does
    not consume quota, and store failures yield the fallback snapshot.
    """
    return reporter.snapshot()
