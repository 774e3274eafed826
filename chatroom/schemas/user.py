"""
User Pydantic schemas
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from chatroom.utils import new_id, utcnow

USERNAME_MAX_LENGTH = 50


class User(BaseModel):
    """Chat user - one record per distinct username, never deleted"""
    id: str = Field(default_factory=new_id)
    username: str
    is_online: bool = True
    last_seen: datetime = Field(default_factory=utcnow)

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class UserCreate(BaseModel):
    """Schema for creating user"""
    username: str


class LoginRequest(BaseModel):
    """
    Login request body
    {
        "username": "alice",
        "password": "456"
    }
    """
    username: str
    password: str

    @field_validator("username")
    @classmethod
    def check_username(cls, v: str) -> str:
        if len(v) < 1:
            raise PydanticCustomError("username_required", "Username is required")
        if len(v) > USERNAME_MAX_LENGTH:
            raise PydanticCustomError("username_too_long", "Username too long")
        return v

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        if len(v) < 1:
            raise PydanticCustomError("password_required", "Password is required")
        return v


class LoginResponse(BaseModel):
    user: User


class LogoutRequest(BaseModel):
    """Logout request body - `username` is taken as given by the caller"""
    user_id: Optional[str] = None
    username: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class LogoutResponse(BaseModel):
    success: bool = True


class OnlineUsersResponse(BaseModel):
    """Presence snapshot"""
    count: int
    users: List[User]
