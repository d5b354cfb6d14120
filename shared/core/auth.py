from datetime import datetime, timedelta, timezone
from typing import Optional
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from shared.core.config import settings
from shared.core.database import get_db
from shared.core.schemas import UserToken
from shared.models.user_login_session import UserLoginSession
from shared.models.users import Users
from shared.utils.enums import UserRole, UserStatus
from shared.utils.exceptions import ForbiddenError, UnauthorizedError

security = HTTPBearer(auto_error=False)


def create_access_token(data: dict) -> str:
    payload = data.copy()
    expires = datetime.now(timezone.utc) + \
        timedelta(minutes=settings.JWT_EXPIRE_MINUTES)
    payload["exp"] = expires
    return jwt.encode(payload, settings.JWT_SECRET,
                      algorithm=settings.JWT_ALGORITHM)


def build_token_payload(user: Users, session: UserLoginSession) -> dict:
    return {
        "user_id": str(user.id),
        "session_id": str(session.id),
        "org_id": str(user.org_id) if user.org_id else None,
        "email": user.email,
        "name": user.full_name,
        "role": user.role,
    }


def get_token_from_request(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    """Bearer header first, then the session cookie."""
    if credentials and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(settings.SESSION_COOKIE_NAME)


def verify_token(db: Session, token: str) -> UserToken:
    """Decode a session token and check its login session is still open."""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET,
                             algorithms=[settings.JWT_ALGORITHM])
        user = UserToken(**payload)
    except (JWTError, PydanticValidationError):
        raise UnauthorizedError("Invalid or expired token")

    session = db.query(UserLoginSession).filter(
        UserLoginSession.id == user.session_id,
        UserLoginSession.user_id == user.user_id
    ).first()

    if not session or not session.is_active:
        raise UnauthorizedError("Session has been logged out or is inactive")

    return user


def validate_current_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> UserToken:
    token = get_token_from_request(request, credentials)
    if not token:
        raise UnauthorizedError("Unauthorized")

    user_data = verify_token(db, token)

    user = db.query(Users).filter(Users.id == user_data.user_id).first()
    if not user:
        raise UnauthorizedError("User not found")

    if user.status != UserStatus.ACTIVE.value:
        raise UnauthorizedError("User is not active. Access denied")

    if not user.org_id:
        raise UnauthorizedError("No organization associated with user")

    # role and org may have changed since the token was issued
    user_data.org_id = user.org_id
    user_data.role = user.role
    user_data.status = user.status
    return user_data


def allow_admin(current_user: UserToken = Depends(validate_current_token)) -> UserToken:
    if current_user.role not in (UserRole.OWNER.value, UserRole.ADMIN.value):
        raise ForbiddenError("Access forbidden: Admins only")
    return current_user


def allow_owner(current_user: UserToken = Depends(validate_current_token)) -> UserToken:
    if current_user.role != UserRole.OWNER.value:
        raise ForbiddenError("Access forbidden: Owners only")
    return current_user
