import logging
from typing import Callable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from fastapi import Request
from fastapi.responses import JSONResponse

from shared.core.config import settings
from shared.helpers.json_response_helper import error_result
from shared.helpers.rate_limiter import (
    RateLimiter, get_client_identifier, get_rate_limit_headers)
from shared.utils.app_status_code import AppStatusCode

logger = logging.getLogger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, limiter: Optional[RateLimiter] = None,
                 limit: Optional[int] = None, window_seconds: Optional[int] = None):
        super().__init__(app)
        self.limiter = limiter or RateLimiter(
            max_entries=settings.RATE_LIMIT_MAX_ENTRIES)
        self.limit = limit or settings.RATE_LIMIT_REQUESTS
        self.window_seconds = window_seconds or settings.RATE_LIMIT_WINDOW_SECONDS

    async def dispatch(self, request: Request, call_next: Callable):
        if not request.url.path.startswith("/api/"):
            return await call_next(request)

        identifier = get_client_identifier(request)
        result = self.limiter.check(identifier, self.limit, self.window_seconds)
        headers = get_rate_limit_headers(result)

        if not result.success:
            logger.warning("Rate limit exceeded for %s", identifier)
            return JSONResponse(
                content=error_result(
                    "Too many requests. Please try again later.", AppStatusCode.RATE_LIMIT_EXCEEDED),
                status_code=429,
                headers=headers)

        response = await call_next(request)
        response.headers.update(headers)
        return response
