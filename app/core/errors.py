"""Application-level exception types.

Domain errors raised by services/adapters. Each carries a stable code so the
HTTP layer and the logs can report failures consistently.

Guard denials (rate limited, budget exhausted) are not raised by the access
gate itself; the service layer converts a denied admission into one of the
errors below once it has decided not to call upstream.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients."""

    hint: str
    retry_after_seconds: int
    used: int
    limit: int
    symbol: str
    endpoint: str
    status_code: int
    cause: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when input/config validation fails."""


class RateLimitedAppError(AppError):
    """The minute window is full; recoverable by waiting."""

    @classmethod
    def for_retry_after(cls, retry_after_seconds: int) -> "RateLimitedAppError":
        return cls(
            code="rate_limited",
            message=f"Rate limit exceeded. Try again in {retry_after_seconds} seconds.",
            details={"retry_after_seconds": retry_after_seconds},
        )


class BudgetExhaustedAppError(AppError):
    """The monthly budget is spent; not recoverable until the next month."""

    @classmethod
    def for_usage(cls, used: int, limit: int) -> "BudgetExhaustedAppError":
        return cls(
            code="budget_exhausted",
            message=f"Monthly API budget exhausted ({used}/{limit})",
            details={"used": used, "limit": limit},
        )


class UpstreamAppError(AppError):
    """Raised when the upstream market data API call fails."""


class StoreUnavailableAppError(AppError):
    """Raised when the usage store cannot be read before an upstream call."""
