from uuid import UUID
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.auth import allow_admin, validate_current_token
from shared.core.database import get_db
from shared.core.schemas import UserToken
from ..crud import team_crud as crud
from ..schemas.team_schemas import (
    TeamInviteRequest, TeamListResponse, TeamMemberResponse, TeamRoleUpdate)

router = APIRouter(prefix="/api/team", tags=["team"],
                   dependencies=[Depends(validate_current_token)])


@router.get("", response_model=TeamListResponse)
def get_team(
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.get_team(db, current_user.org_id)


@router.post("", response_model=TeamMemberResponse, status_code=201)
def invite_member(
    request: TeamInviteRequest,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(allow_admin)
):
    return crud.invite_member(db, current_user, request)


@router.patch("/{member_id}", response_model=TeamMemberResponse)
def update_member_role(
    member_id: UUID,
    request: TeamRoleUpdate,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(allow_admin)
):
    return crud.update_member_role(db, current_user, member_id, request)


@router.delete("/{member_id}")
def remove_member(
    member_id: UUID,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(allow_admin)
):
    return crud.remove_member(db, current_user, member_id)
