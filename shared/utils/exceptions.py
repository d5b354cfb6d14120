from typing import Any, Optional

from shared.utils.app_status_code import AppStatusCode


class AppError(Exception):
    """Base error carrying the HTTP status and an optional details payload."""

    status_code: int = 500
    app_status_code: str = AppStatusCode.OPERATION_FAILED

    def __init__(self, message: str, status_code: Optional[int] = None, details: Any = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details


class UnauthorizedError(AppError):
    status_code = 401
    app_status_code = AppStatusCode.AUTHENTICATION_UNAUTHORIZED_ACCESS

    def __init__(self, message: str = "Unauthorized", details: Any = None):
        super().__init__(message, details=details)


class ForbiddenError(AppError):
    status_code = 403
    app_status_code = AppStatusCode.AUTHENTICATION_UNAUTHORIZED_ACCESS


class LimitReachedError(ForbiddenError):
    app_status_code = AppStatusCode.SUBSCRIPTION_LIMIT_REACHED


class NotFoundError(AppError):
    status_code = 404
    app_status_code = AppStatusCode.RESOURCE_NOT_FOUND


class ValidationError(AppError):
    status_code = 400
    app_status_code = AppStatusCode.INVALID_INPUT


class ConflictError(AppError):
    status_code = 409
    app_status_code = AppStatusCode.CONFLICT


class SubscriptionNotFoundError(ValidationError):
    app_status_code = AppStatusCode.SUBSCRIPTION_NOT_FOUND

    def __init__(self, message: str = "No subscription found"):
        super().__init__(message)
