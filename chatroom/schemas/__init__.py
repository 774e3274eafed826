"""
Pydantic schemas
"""
from .user import (
    USERNAME_MAX_LENGTH,
    User,
    UserCreate,
    LoginRequest,
    LoginResponse,
    LogoutRequest,
    LogoutResponse,
    OnlineUsersResponse,
)
from .message import MessageType, Message, MessageCreate

__all__ = [
    "USERNAME_MAX_LENGTH",
    "User",
    "UserCreate",
    "LoginRequest",
    "LoginResponse",
    "LogoutRequest",
    "LogoutResponse",
    "OnlineUsersResponse",
    "MessageType",
    "Message",
    "MessageCreate",
]
