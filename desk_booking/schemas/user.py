from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, field_validator
from desk_booking.schemas.common import CamelModel, as_utc


class UserRegister(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None


class UserLogin(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None


class UserCreate(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None
    password: Optional[str] = None


class UserUpdate(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None
    password: Optional[str] = None


class UserResponse(CamelModel):
    id: str
    email: str
    name: Optional[str] = None
    phone_number: Optional[str] = None
    is_admin: bool
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def attach_utc(cls, value):
        return as_utc(value)


class UserEnvelope(CamelModel):
    message: str
    user: UserResponse
    temporary_password: Optional[str] = None


class UserListEnvelope(CamelModel):
    message: str
    users: List[UserResponse]


class MessageResponse(CamelModel):
    message: str


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
