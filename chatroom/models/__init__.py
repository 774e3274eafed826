"""
Database models for the SQL store
"""
from .base import Base
from .user import UserRecord
from .message import MessageRecord

__all__ = ["Base", "UserRecord", "MessageRecord"]
