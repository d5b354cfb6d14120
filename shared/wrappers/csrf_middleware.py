import logging
from typing import Callable, Iterable

from starlette.middleware.base import BaseHTTPMiddleware
from fastapi import Request
from fastapi.responses import JSONResponse

from shared.helpers.csrf_helper import CSRF_HEADER_NAME, validate_csrf_token
from shared.helpers.json_response_helper import error_result
from shared.utils.app_status_code import AppStatusCode

logger = logging.getLogger(__name__)

PROTECTED_METHODS = {"POST", "PUT", "PATCH", "DELETE"}


class CSRFMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, exempt_paths: Iterable[str] = ()):
        super().__init__(app)
        self.exempt_paths = set(exempt_paths)

    async def dispatch(self, request: Request, call_next: Callable):
        path = request.url.path
        if (request.method in PROTECTED_METHODS
                and path.startswith("/api/")
                and path not in self.exempt_paths):
            if not validate_csrf_token(request.headers.get(CSRF_HEADER_NAME)):
                logger.warning("Rejected %s %s: invalid CSRF token",
                               request.method, path)
                return JSONResponse(
                    content=error_result("Invalid CSRF token",
                                         AppStatusCode.CSRF_TOKEN_INVALID),
                    status_code=403)

        return await call_next(request)
