from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, EmailStr, Field


# -------- Email & Password --------

class SignupRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8)
    full_name: Optional[str] = None
    organization_name: Optional[str] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


# -------- Google --------

class GoogleAuthRequest(BaseModel):
    access_token: str = Field(min_length=1)
    organization_name: Optional[str] = None


# -------Common----------

class UserOut(BaseModel):
    id: UUID
    org_id: Optional[UUID] = None
    email: str
    full_name: Optional[str] = None
    role: str
    status: str
    email_verified: bool = False
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class OrganizationOut(BaseModel):
    id: UUID
    name: str
    owner_id: Optional[UUID] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AuthenticationResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserOut
    organization: Optional[OrganizationOut] = None


class MeResponse(BaseModel):
    user: UserOut
    organization: Optional[OrganizationOut] = None
