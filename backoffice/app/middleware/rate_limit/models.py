"""Rate limit models."""
from dataclasses import dataclass
from typing import Optional


@dataclass
class RateLimitResult:
    """Result of a rate limit check."""
    allowed: bool
    limit: int
    remaining: int
    reset_time: int
    retry_after: Optional[int] = None


@dataclass
class RateWindow:
    """Fixed-window counter for one client identifier."""
    count: int
    reset_at: float

    def is_expired(self, now: float) -> bool:
        return now > self.reset_at
