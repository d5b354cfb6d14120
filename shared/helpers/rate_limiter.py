import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, Optional

from starlette.requests import Request

DEFAULT_LIMIT = 100
DEFAULT_WINDOW_SECONDS = 60


@dataclass
class RateLimitResult:
    success: bool
    remaining: int
    limit: int
    reset_time: Optional[float] = None


@dataclass
class _Window:
    count: int
    reset_time: float


class RateLimiter:
    """Fixed-window request counter keyed by client identifier.

    State is per process. Running several instances behind a load balancer
    needs a shared counter store instead.
    """

    def __init__(self, max_entries: int = 10000, clock: Callable[[], float] = time.time):
        self.max_entries = max_entries
        self._clock = clock
        self._windows: Dict[str, _Window] = {}
        self._lock = threading.Lock()

    def __len__(self):
        return len(self._windows)

    def check(self, identifier: str, limit: int = DEFAULT_LIMIT,
              window_seconds: float = DEFAULT_WINDOW_SECONDS) -> RateLimitResult:
        now = self._clock()
        with self._lock:
            record = self._windows.get(identifier)

            if record is None or now > record.reset_time:
                if record is None and len(self._windows) >= self.max_entries:
                    self._evict(now)
                reset_time = now + window_seconds
                self._windows[identifier] = _Window(count=1, reset_time=reset_time)
                return RateLimitResult(True, limit - 1, limit, reset_time)

            if record.count >= limit:
                return RateLimitResult(False, 0, limit, record.reset_time)

            record.count += 1
            return RateLimitResult(True, limit - record.count, limit, record.reset_time)

    def reset(self):
        with self._lock:
            self._windows.clear()

    def _evict(self, now: float):
        expired = [key for key, window in self._windows.items()
                   if now > window.reset_time]
        for key in expired:
            del self._windows[key]

        if len(self._windows) >= self.max_entries:
            oldest = min(self._windows, key=lambda k: self._windows[k].reset_time)
            del self._windows[oldest]


def get_client_identifier(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    ip = None
    if forwarded:
        ip = forwarded.split(",")[0].strip() or None
    if not ip:
        ip = request.headers.get("x-real-ip")
    if not ip and request.client:
        ip = request.client.host
    ip = ip or "127.0.0.1"
    return f"{ip}:{request.headers.get('user-agent') or 'unknown'}"


def get_rate_limit_headers(result: RateLimitResult) -> Dict[str, str]:
    reset = result.reset_time if result.reset_time is not None else time.time()
    return {
        "X-RateLimit-Limit": str(result.limit),
        "X-RateLimit-Remaining": str(result.remaining),
        "X-RateLimit-Reset": datetime.fromtimestamp(reset, tz=timezone.utc).isoformat(),
    }
