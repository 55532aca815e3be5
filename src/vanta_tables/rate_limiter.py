"""
Client-side request throttling for the Vanta REST API.

Vanta limits management endpoints to 50 requests per minute per
application. A query that walks many pages, or a table whose column
hydrate issues one request per row, can easily exceed that budget, so
each REST client owns a token bucket and takes a token before every
request.

Usage:
    from vanta_tables.rate_limiter import RateLimitConfig, TokenBucketRateLimiter

    limiter = TokenBucketRateLimiter(RateLimitConfig(requests_per_minute=50))
    if not limiter.acquire(timeout=60.0):
        raise VantaApiError("Rate limit acquisition timeout", retryable=True)
"""

import threading
import time
from dataclasses import dataclass

from vanta_tables.logging_config import get_logger, log_with_context

logger = get_logger(__name__)


@dataclass(frozen=True)
class RateLimitConfig:
    """
    Configuration for rate limiting.

    Attributes:
        requests_per_minute: Sustained request budget
        burst_size: Requests that may be made back to back before the
            sustained rate applies
    """

    requests_per_minute: int
    burst_size: int = 10


class TokenBucketRateLimiter:
    """
    Token bucket rate limiter.

    Tokens are added continuously at ``requests_per_minute / 60`` per second
    up to ``burst_size``. Each request consumes one token; callers block in
    ``acquire`` until one is available.

    Thread-safe.

    Attributes:
        rate: Tokens added per second
        capacity: Maximum tokens in the bucket
        tokens: Current token count
    """

    def __init__(self, config: RateLimitConfig) -> None:
        if config.requests_per_minute <= 0:
            raise ValueError("requests_per_minute must be positive")
        self.rate: float = config.requests_per_minute / 60.0
        self.capacity: float = float(max(config.burst_size, 1))
        self.tokens: float = self.capacity
        self.last_update: float = time.monotonic()
        self._lock: threading.Lock = threading.Lock()

    @classmethod
    def for_budget(cls, requests_per_minute: int | None) -> "TokenBucketRateLimiter | None":
        """
        Build a limiter for a per-minute budget.

        The burst size is a fifth of the budget, clamped to 1..10, which
        matches Vanta's documented management (50/min) and integration
        (20/min) limits.

        Args:
            requests_per_minute: Budget, or None/0 to disable throttling

        Returns:
            Configured limiter, or None when throttling is disabled
        """
        if not requests_per_minute:
            return None
        burst = min(10, max(1, requests_per_minute // 5))
        return cls(RateLimitConfig(requests_per_minute=requests_per_minute, burst_size=burst))

    def acquire(self, timeout: float = 60.0) -> bool:
        """
        Take a token, blocking until one is available.

        Args:
            timeout: Maximum seconds to wait. 0 means do not wait.

        Returns:
            True if a token was taken, False if the timeout would be exceeded
        """
        deadline = time.monotonic() + timeout

        while True:
            with self._lock:
                self._refill()
                if self.tokens >= 1.0:
                    self.tokens -= 1.0
                    return True
                wait_time = (1.0 - self.tokens) / self.rate

            if time.monotonic() + wait_time > deadline:
                log_with_context(
                    logger,
                    "warning",
                    "Rate limit acquire timeout",
                    timeout=timeout,
                    wait_time=wait_time,
                )
                return False

            time.sleep(min(wait_time, 0.1))

    def try_acquire(self) -> bool:
        """
        Take a token if one is available right now.

        Returns:
            True if a token was taken
        """
        with self._lock:
            self._refill()
            if self.tokens >= 1.0:
                self.tokens -= 1.0
                return True
            return False

    def _refill(self) -> None:
        # Caller holds the lock
        now = time.monotonic()
        self.tokens = min(self.capacity, self.tokens + (now - self.last_update) * self.rate)
        self.last_update = now

    def get_available_tokens(self) -> float:
        """Return the number of tokens currently available (may be fractional)."""
        with self._lock:
            self._refill()
            return self.tokens

    def get_wait_time(self) -> float:
        """Return the estimated seconds until a token is available."""
        with self._lock:
            self._refill()
            if self.tokens >= 1.0:
                return 0.0
            return (1.0 - self.tokens) / self.rate
