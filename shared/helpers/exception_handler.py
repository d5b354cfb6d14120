import logging
import re
from typing import Optional

from fastapi import FastAPI, Request, HTTPException
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import IntegrityError

from shared.helpers.json_response_helper import error_result
from shared.utils.app_status_code import AppStatusCode
from shared.utils.exceptions import AppError

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "An unexpected error occurred. Please try again."

DB_ERROR_MESSAGES = {
    "23505": "A record with this information already exists",
    "23503": "Referenced record does not exist",
    "23502": "Required field is missing or invalid",
    "42501": "Insufficient permissions for this operation",
}

# sqlite reports constraint failures as plain text
SQLITE_ERROR_PATTERNS = [
    (re.compile(r"UNIQUE constraint failed", re.I), "23505"),
    (re.compile(r"FOREIGN KEY constraint failed", re.I), "23503"),
    (re.compile(r"NOT NULL constraint failed", re.I), "23502"),
]


def get_db_error_code(exc: Exception) -> Optional[str]:
    orig = getattr(exc, "orig", None)
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if code:
        return code

    text = str(orig if orig is not None else exc)
    for pattern, mapped in SQLITE_ERROR_PATTERNS:
        if pattern.search(text):
            return mapped
    return None


def format_validation_errors(exc: RequestValidationError) -> list:
    details = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part != "body"]
        details.append({
            "field": ".".join(loc),
            "message": err.get("msg", "Invalid value"),
        })
    return details


def setup_exception_handlers(app: FastAPI):

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method,
                         request.url.path, exc.message)
        return JSONResponse(
            content=error_result(exc.message, exc.app_status_code, exc.details),
            status_code=exc.status_code)

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        if isinstance(exc.detail, dict) and {"status", "status_code", "message"}.issubset(exc.detail.keys()):
            content = exc.detail
        else:
            content = error_result(str(exc.detail), str(exc.status_code))
        return JSONResponse(content=content, status_code=exc.status_code or 400, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            content=error_result(
                "Validation failed", AppStatusCode.INVALID_INPUT, format_validation_errors(exc)),
            status_code=400)

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError):
        code = get_db_error_code(exc)
        logger.warning("Store error on %s %s: code=%s %s",
                       request.method, request.url.path, code, exc.orig)
        if code in DB_ERROR_MESSAGES:
            return JSONResponse(
                content=error_result(
                    DB_ERROR_MESSAGES[code], AppStatusCode.DUPLICATE_ENTRY if code == "23505" else AppStatusCode.INVALID_INPUT),
                status_code=400)

        return JSONResponse(
            content=error_result(GENERIC_ERROR_MESSAGE,
                                 AppStatusCode.INTERNAL_SERVER_ERROR),
            status_code=500)
