"""
User table
"""
from sqlalchemy import Column, String, DateTime, Boolean
from .base import Base


class UserRecord(Base):
    """User row - last_seen is stored as naive UTC"""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True)
    username = Column(String(50), unique=True, nullable=False, index=True)
    is_online = Column(Boolean, default=True, nullable=False, index=True)
    last_seen = Column(DateTime, nullable=False)

    def __repr__(self):
        return f"<UserRecord(id={self.id}, username='{self.username}', online={self.is_online})>"
