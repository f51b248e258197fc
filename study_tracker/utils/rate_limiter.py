"""
Rate limiting for API endpoints
"""
import time
from collections import defaultdict, deque
from fastapi import Request, HTTPException
from typing import Callable, Deque, Dict, Tuple
import logging

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    In-memory sliding-window limiter keyed by client address

    One limiter lives on ``app.state`` per application; limits are per
    process.
    """

    def __init__(
        self,
        requests_per_minute: int = 120,
        requests_per_hour: int = 3000,
        clock: Callable[[], float] = time.monotonic
    ):
        # (window seconds, limit, label)
        self.windows: Tuple[Tuple[int, int, str], ...] = (
            (60, requests_per_minute, "minute"),
            (3600, requests_per_hour, "hour"),
        )
        self.clock = clock
        self.history: Dict[str, Deque[float]] = defaultdict(deque)

    def _get_client_id(self, request: Request) -> str:
        """Extract client identifier from request"""
        return request.client.host if request.client else "unknown"

    def _cleanup_old_entries(self, now: float) -> None:
        """Forget requests older than the widest window and drop idle clients"""
        cutoff = now - self.windows[-1][0]

        for client_id in list(self.history.keys()):
            timestamps = self.history[client_id]
            while timestamps and timestamps[0] <= cutoff:
                timestamps.popleft()

            # Remove empty entries
            if not timestamps:
                del self.history[client_id]

    def hit(self, client_id: str) -> None:
        """
        Record one request for a client

        Raises:
            HTTPException: 429 if any window is full
        """
        now = self.clock()
        self._cleanup_old_entries(now)
        timestamps = self.history[client_id]

        for window, limit, label in self.windows:
            in_window = sum(1 for ts in timestamps if ts > now - window)
            if in_window >= limit:
                logger.warning(f"Rate limit exceeded ({label}): {client_id}")
                raise HTTPException(
                    status_code=429,
                    detail={
                        "error": "rate_limit_exceeded",
                        "message": f"Too many requests. Limit: {limit} requests per {label}",
                        "retry_after": window
                    }
                )

        timestamps.append(now)

    async def check_rate_limit(self, request: Request) -> None:
        self.hit(self._get_client_id(request))
