import json
import logging
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from fastapi.responses import JSONResponse
from fastapi import Request

from shared.core.schemas import JsonOutResult
from shared.helpers.exception_handler import GENERIC_ERROR_MESSAGE
from shared.utils.app_status_code import AppStatusCode

logger = logging.getLogger(__name__)

WRAPPED_KEYS = {"status", "status_code", "message"}


def _passthrough_headers(response) -> dict:
    return {k: v for k, v in response.headers.items() if k.lower() != "content-length"}


class JsonResponseMiddleware(BaseHTTPMiddleware):
    """Wraps every JSON API response into the {data, status, status_code, message} envelope."""

    async def dispatch(self, request: Request, call_next: Callable):
        # Skip docs/openapi endpoints
        if request.url.path.startswith(("/openapi", "/docs", "/redoc")):
            return await call_next(request)

        try:
            response = await call_next(request)
        except Exception:
            logger.exception("Unhandled error on %s %s",
                             request.method, request.url.path)
            wrapped_error = JsonOutResult(
                data=None,
                status="Failure",
                status_code=AppStatusCode.INTERNAL_SERVER_ERROR,
                message=GENERIC_ERROR_MESSAGE,
            ).model_dump()
            return JSONResponse(content=wrapped_error, status_code=500)

        # File downloads are sent as-is
        if "attachment" in response.headers.get("content-disposition", ""):
            return response

        content_type = response.headers.get("content-type", "")
        if "application/json" not in content_type:
            return response

        body_bytes = b""
        async for chunk in response.body_iterator:
            body_bytes += chunk

        try:
            data = json.loads(body_bytes.decode("utf-8")) if body_bytes else None
        except ValueError:
            data = None

        # Skip wrapping if already wrapped
        if isinstance(data, dict) and WRAPPED_KEYS.issubset(data.keys()):
            return JSONResponse(
                content=data,
                status_code=response.status_code,
                headers=_passthrough_headers(response),
            )

        if not (200 <= response.status_code < 400):
            message = "An unexpected error occurred"
            if isinstance(data, dict):
                message = str(data.get("detail") or data.get("message") or message)
            elif isinstance(data, str):
                message = data

            wrapped = JsonOutResult(
                data=None,
                status="Failure",
                status_code=str(response.status_code),
                message=message,
            ).model_dump()
        else:
            wrapped = JsonOutResult(
                data=data,
                status="Success",
                status_code=str(response.status_code),
                message="Data retrieved successfully" if request.method == "GET" else "Operation completed successfully",
            ).model_dump()

        return JSONResponse(
            content=wrapped,
            status_code=response.status_code,
            headers=_passthrough_headers(response),
        )
