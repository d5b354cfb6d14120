from datetime import datetime
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, EmailStr, Field

from shared.utils.enums import UserRole


class TeamMemberOut(BaseModel):
    id: UUID
    email: str
    full_name: Optional[str] = None
    role: str
    status: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TeamListResponse(BaseModel):
    members: List[TeamMemberOut]


class TeamMemberResponse(BaseModel):
    member: TeamMemberOut


class TeamInviteRequest(BaseModel):
    email: EmailStr
    full_name: Optional[str] = None
    role: UserRole = UserRole.MEMBER
    # without a password the member stays invited until they sign in with Google
    password: Optional[str] = Field(default=None, min_length=8)


class TeamRoleUpdate(BaseModel):
    role: UserRole
