import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from shared.core.schemas import UserToken
from shared.helpers.audit_helper import log_action
from shared.helpers.subscription_helper import ensure_within_limit
from shared.models.user_login_session import UserLoginSession
from shared.models.users import Users
from shared.utils.enums import AuditAction, AuditResourceType, LimitType, UserRole, UserStatus
from shared.utils.exceptions import ForbiddenError, NotFoundError, ValidationError
from ..schemas.team_schemas import (
    TeamInviteRequest, TeamListResponse, TeamMemberOut, TeamMemberResponse, TeamRoleUpdate)

logger = logging.getLogger(__name__)


def count_team_members(db: Session, org_id: UUID) -> int:
    return db.query(func.count(Users.id)).filter(
        Users.org_id == org_id,
        Users.status != UserStatus.DISABLED.value
    ).scalar() or 0


def _get_member(db: Session, org_id: UUID, member_id: UUID) -> Optional[Users]:
    return db.query(Users).filter(
        Users.id == member_id,
        Users.org_id == org_id
    ).first()


def get_team(db: Session, org_id: UUID) -> TeamListResponse:
    members = (
        db.query(Users)
        .filter(Users.org_id == org_id)
        .order_by(Users.created_at.asc())
        .all()
    )
    return TeamListResponse(members=[TeamMemberOut.model_validate(m) for m in members])


def invite_member(db: Session, current_user: UserToken, request: TeamInviteRequest) -> TeamMemberResponse:
    org_id = current_user.org_id
    if request.role == UserRole.OWNER:
        raise ValidationError("An organization has a single owner")
    if request.role == UserRole.ADMIN and current_user.role != UserRole.OWNER.value:
        raise ForbiddenError("Only the owner can add admins")

    ensure_within_limit(db, org_id, LimitType.TEAM_MEMBERS, count_team_members(db, org_id))

    email = request.email.lower()
    if db.query(Users.id).filter(func.lower(Users.email) == email).first():
        raise ValidationError("User already exists")

    member = Users(
        org_id=org_id,
        email=email,
        full_name=request.full_name,
        role=request.role.value,
        status=UserStatus.ACTIVE.value if request.password else UserStatus.INVITED.value,
    )
    if request.password:
        member.set_password(request.password)

    db.add(member)
    db.flush()
    log_action(db, org_id, current_user.user_id, AuditAction.USER_INVITED, AuditResourceType.USER, member.id,
               new_value={"email": member.email, "role": member.role, "status": member.status})
    db.commit()
    db.refresh(member)
    logger.info("User %s added to org %s as %s by %s",
                member.id, org_id, member.role, current_user.user_id)
    return TeamMemberResponse(member=TeamMemberOut.model_validate(member))


def update_member_role(db: Session, current_user: UserToken, member_id: UUID, request: TeamRoleUpdate) -> TeamMemberResponse:
    member = _get_member(db, current_user.org_id, member_id)
    if not member:
        raise NotFoundError("Team member not found")
    if member.role == UserRole.OWNER.value:
        raise ValidationError("Cannot change owner role")
    if request.role == UserRole.OWNER:
        raise ValidationError("An organization has a single owner")
    if request.role == UserRole.ADMIN and current_user.role != UserRole.OWNER.value:
        raise ForbiddenError("Only the owner can assign the admin role")

    log_action(db, current_user.org_id, current_user.user_id, AuditAction.USER_ROLE_CHANGED,
               AuditResourceType.USER, member.id,
               old_value={"role": member.role}, new_value={"role": request.role.value})
    member.role = request.role.value
    db.commit()
    db.refresh(member)
    return TeamMemberResponse(member=TeamMemberOut.model_validate(member))


def remove_member(db: Session, current_user: UserToken, member_id: UUID):
    member = _get_member(db, current_user.org_id, member_id)
    if not member:
        raise NotFoundError("Team member not found")
    if member.id == current_user.user_id:
        raise ValidationError("You cannot remove yourself from the organization")
    if member.role == UserRole.OWNER.value:
        raise ValidationError("Transfer ownership before removing")

    log_action(db, current_user.org_id, current_user.user_id, AuditAction.USER_REMOVED, AuditResourceType.USER,
               member.id, old_value={"email": member.email, "role": member.role})
    # the account is kept, it just loses access
    member.org_id = None
    member.status = UserStatus.DISABLED.value
    db.query(UserLoginSession).filter(
        UserLoginSession.user_id == member.id,
        UserLoginSession.is_active == True
    ).update({UserLoginSession.is_active: False}, synchronize_session=False)
    db.commit()

    logger.info("User %s removed from org %s by %s",
                member.id, current_user.org_id, current_user.user_id)
    return {"message": "Team member removed successfully"}
