"""Pydantic schema for API usage snapshots."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class UsageSnapshot(BaseModel):
    """Point-in-time view of the minute window and the monthly budget.

    Serialized with camelCase field names (``monthlyUsed``, ``warningLevel``...).
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    monthly_used: int = Field(..., description="Upstream calls counted this month.")
    monthly_limit: int = Field(..., description="Upstream calls allowed per month.")
    monthly_remaining: int = Field(..., description="Calls left this month (negative if overrun).")
    monthly_percentage: float = Field(..., description="Share of the monthly budget used, 0-100+.")
    minute_used: int = Field(..., description="Calls admitted in the current sliding window.")
    minute_limit: int = Field(..., description="Calls allowed per sliding window.")
    minute_remaining: int = Field(..., description="Calls still admissible in the current window.")
    warning_level: bool = Field(
        ...,
        description="True once monthly usage is strictly above the warning threshold.",
    )
