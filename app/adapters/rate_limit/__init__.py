"""Rate limiting adapters.

The access gate depends on the abstract limiter so the in-process sliding
window can later be replaced by a shared implementation without touching the
services.
"""

from app.adapters.rate_limit.base import AbstractRateLimiter
from app.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter

__all__ = ["AbstractRateLimiter", "InMemorySlidingWindowRateLimiter"]
