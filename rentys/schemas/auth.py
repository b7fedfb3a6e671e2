from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional

from rentys.models.profile import ProfileRole
from rentys.schemas.profile import ProfileOut


class SignupRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    role: ProfileRole
    name: str = Field(..., min_length=1, max_length=255)
    phone: Optional[str] = Field(None, max_length=20)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    role: Optional[ProfileRole] = None
    dashboard: Optional[str] = None


class MeResponse(BaseModel):
    profile: ProfileOut
    dashboard: str
