"""
Rate Limiter Service

In-memory, per-client sliding window limit on proof creation. Each proof
counts once, so a batch of N images consumes N slots.
"""

import logging
import math
from collections import defaultdict
from datetime import datetime, timedelta
from typing import List

from fastapi import File, HTTPException, Request, UploadFile, status

from app.config import settings

logger = logging.getLogger(__name__)


class RateLimiter:
    """Sliding window limiter keyed by client IP address."""

    def __init__(self, max_requests: int, window_seconds: int):
        """
        Args:
            max_requests: Proofs allowed per client within the window
            window_seconds: Window length in seconds
        """
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.requests: dict[str, list[datetime]] = defaultdict(list)

    def _prune(self, ip: str, now: datetime) -> list[datetime]:
        cutoff = now - timedelta(seconds=self.window_seconds)
        recent = [t for t in self.requests[ip] if t > cutoff]
        self.requests[ip] = recent
        return recent

    def remaining(self, ip: str) -> int:
        """Slots left for ``ip`` in the current window."""
        return max(0, self.max_requests - len(self._prune(ip, datetime.now())))

    def retry_after(self, ip: str) -> int:
        """Seconds until the oldest recorded request leaves the window."""
        recent = self._prune(ip, datetime.now())
        if not recent:
            return 0
        expires = min(recent) + timedelta(seconds=self.window_seconds)
        return max(1, math.ceil((expires - datetime.now()).total_seconds()))

    def check_rate_limit(self, ip: str, cost: int = 1) -> None:
        """
        Record ``cost`` requests for ``ip`` unless that would exceed the limit.

        Rejected requests are not recorded.

        Raises:
            HTTPException: 429 with a Retry-After header if the limit is exceeded
        """
        now = datetime.now()
        recent = self._prune(ip, now)

        if len(recent) + cost > self.max_requests:
            logger.warning(
                f"Rate limit exceeded for IP {ip}: {len(recent)} proofs in window, "
                f"{cost} requested"
            )
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail=(
                    f"Rate limit exceeded. Max {self.max_requests} proofs "
                    f"per {self.window_seconds} seconds."
                ),
                headers={"Retry-After": str(self.retry_after(ip))},
            )

        recent.extend([now] * cost)


proof_rate_limiter = RateLimiter(
    max_requests=settings.RATE_LIMIT_REQUESTS,
    window_seconds=settings.RATE_LIMIT_WINDOW,
)


def _client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


async def check_proof_rate_limit(request: Request) -> None:
    """FastAPI dependency charging one proof to the client."""
    proof_rate_limiter.check_rate_limit(_client_ip(request))


async def check_batch_rate_limit(
    request: Request, images: List[UploadFile] = File(...)
) -> None:
    """FastAPI dependency charging one proof per uploaded image."""
    proof_rate_limiter.check_rate_limit(_client_ip(request), cost=max(1, len(images)))
