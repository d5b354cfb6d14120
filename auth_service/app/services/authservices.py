import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import requests
from fastapi import Request, Response
from sqlalchemy import func
from sqlalchemy.orm import Session

from shared.core import auth
from shared.core.config import settings
from shared.core.schemas import UserToken
from shared.helpers.audit_helper import log_action
from shared.models.organizations import Organization
from shared.models.subscriptions import Subscription, SubscriptionPlan
from shared.models.user_login_session import UserLoginSession
from shared.models.users import Users
from shared.utils.enums import AuditAction, AuditResourceType, SubscriptionStatus, UserRole, UserStatus
from shared.utils.exceptions import AppError, UnauthorizedError, ValidationError
from ..schemas import authschema

logger = logging.getLogger(__name__)

GOOGLE_TIMEOUT_SECONDS = 10


def get_user_by_email(db: Session, email: str) -> Optional[Users]:
    return db.query(Users).filter(func.lower(Users.email) == email.lower()).first()


def set_session_cookie(response: Response, token: str):
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
        max_age=settings.JWT_EXPIRE_MINUTES * 60,
        path="/",
    )


def clear_session_cookie(response: Response):
    response.delete_cookie(key=settings.SESSION_COOKIE_NAME, path="/")


def create_organization(db: Session, owner: Users, name: Optional[str]) -> Organization:
    """Create the owner's organization and start its trial on the default plan."""
    org_name = name or f"{owner.full_name or owner.email.split('@')[0]}'s Organization"
    organization = Organization(name=org_name)
    db.add(organization)
    db.flush()

    owner.org_id = organization.id
    owner.role = UserRole.OWNER.value
    db.flush()
    organization.owner_id = owner.id
    log_action(db, organization.id, owner.id, AuditAction.ORGANIZATION_CREATED,
               AuditResourceType.ORGANIZATION, organization.id, new_value={"name": organization.name})

    plan = db.query(SubscriptionPlan).filter(
        SubscriptionPlan.name == settings.DEFAULT_PLAN_NAME).first()
    if plan:
        db.add(Subscription(
            org_id=organization.id,
            plan_id=plan.id,
            status=SubscriptionStatus.TRIAL.value,
            trial_end_date=datetime.now(timezone.utc) + timedelta(days=settings.TRIAL_DAYS),
        ))
    else:
        # without a subscription every limited write is refused
        logger.warning("Default plan %s missing, org %s has no subscription",
                       settings.DEFAULT_PLAN_NAME, organization.id)
    return organization


def get_user_token(request: Request, response: Response, db: Session, user: Users) -> authschema.AuthenticationResponse:
    ip = request.client.host if request.client else None
    ua = request.headers.get("user-agent")

    session = UserLoginSession(
        user_id=user.id,
        ip_address=ip,
        user_agent=ua[:255] if ua else None,
    )
    db.add(session)
    log_action(db, user.org_id, user.id, AuditAction.USER_LOGIN, AuditResourceType.USER, user.id,
               ip_address=ip, user_agent=ua)
    db.commit()
    db.refresh(session)
    db.refresh(user)

    token = auth.create_access_token(auth.build_token_payload(user, session))
    set_session_cookie(response, token)

    return authschema.AuthenticationResponse(
        access_token=token,
        token_type="bearer",
        user=authschema.UserOut.model_validate(user),
        organization=authschema.OrganizationOut.model_validate(
            user.organization) if user.organization else None,
    )


#### EMAIL & PASSWORD ###

def signup(request: Request, response: Response, db: Session, req: authschema.SignupRequest):
    if get_user_by_email(db, req.email):
        raise ValidationError("Email already registered")

    user = Users(
        email=req.email.lower(),
        full_name=req.full_name,
        status=UserStatus.ACTIVE.value,
    )
    user.set_password(req.password)
    db.add(user)
    db.flush()

    create_organization(db, user, req.organization_name)
    db.commit()

    logger.info("User %s signed up with org %s", user.id, user.org_id)
    return get_user_token(request, response, db, user)


def login(request: Request, response: Response, db: Session, req: authschema.LoginRequest):
    user = get_user_by_email(db, req.email)
    if not user or not user.verify_password(req.password):
        logger.info("Failed sign-in for %s", req.email)
        raise UnauthorizedError("Invalid credentials")

    if user.status != UserStatus.ACTIVE.value or not user.org_id:
        logger.info("Sign-in refused for inactive user %s", user.id)
        raise UnauthorizedError("User is not active. Access denied")

    logger.info("User %s signed in", user.id)
    return get_user_token(request, response, db, user)


#### GOOGLE AUTHENTICATION ###

def fetch_google_profile(access_token: str) -> dict:
    try:
        google_response = requests.get(
            settings.GOOGLE_USERINFO_URL,
            params={"alt": "json", "access_token": access_token},
            timeout=GOOGLE_TIMEOUT_SECONDS,
        )
    except requests.RequestException as exc:
        logger.error("Google userinfo request failed: %s", exc)
        raise AppError("Could not reach Google. Please try again.", status_code=502)

    if google_response.status_code != 200:
        raise UnauthorizedError("Invalid access token")

    return google_response.json()


def google_login(request: Request, response: Response, db: Session, req: authschema.GoogleAuthRequest):
    id_info = fetch_google_profile(req.access_token)

    email = id_info.get("email")
    if not email or id_info.get("verified_email") not in (True, "true", "True", "1", 1):
        raise ValidationError("Google email not verified")

    google_id = str(id_info.get("id")) if id_info.get("id") else None

    user = None
    if google_id:
        user = db.query(Users).filter(Users.google_id == google_id).first()
    if not user:
        user = get_user_by_email(db, email)

    if user:
        if user.status == UserStatus.DISABLED.value or not user.org_id:
            raise UnauthorizedError("User is not active. Access denied")
        user.google_id = user.google_id or google_id
        user.email_verified = True
        # invited members become active on their first Google sign-in
        if user.status == UserStatus.INVITED.value:
            user.status = UserStatus.ACTIVE.value
        db.commit()
    else:
        user = Users(
            email=email.lower(),
            full_name=id_info.get("name"),
            google_id=google_id,
            email_verified=True,
            status=UserStatus.ACTIVE.value,
        )
        db.add(user)
        db.flush()
        create_organization(db, user, req.organization_name)
        db.commit()
        logger.info("User %s signed up with Google", user.id)

    logger.info("User %s signed in with Google", user.id)
    return get_user_token(request, response, db, user)


def logout_user(response: Response, db: Session, current_user: UserToken):
    session = db.query(UserLoginSession).filter(
        UserLoginSession.id == current_user.session_id,
        UserLoginSession.user_id == current_user.user_id
    ).first()

    if session:
        session.is_active = False
        log_action(db, current_user.org_id, current_user.user_id, AuditAction.USER_LOGOUT,
                   AuditResourceType.USER, current_user.user_id)
        db.commit()

    clear_session_cookie(response)
    logger.info("User %s logged out", current_user.user_id)
    return {"message": "Logged out successfully"}


def get_me(db: Session, current_user: UserToken) -> authschema.MeResponse:
    user = db.query(Users).filter(Users.id == current_user.user_id).first()
    if not user:
        raise UnauthorizedError("User not found")
    return authschema.MeResponse(
        user=authschema.UserOut.model_validate(user),
        organization=authschema.OrganizationOut.model_validate(
            user.organization) if user.organization else None,
    )
