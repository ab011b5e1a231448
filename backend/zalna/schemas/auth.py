import uuid
from datetime import datetime

from pydantic import BaseModel, EmailStr


class EmailLoginRequest(BaseModel):
    email: EmailStr
    password: str
    avatar_url: str | None = None


class UserResponse(BaseModel):
    id: uuid.UUID
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    phone_number: str | None = None
    role: str
    is_active: bool
    avatar_url: str | None = None
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class SessionResponse(BaseModel):
    access_token: str
    refresh_token: str | None = None
    expires_in: int | None = None
    expires_at: int | None = None
    token_type: str = "bearer"


class LoginResponse(BaseModel):
    session: SessionResponse
    user: UserResponse
