"""
Business logic services
"""
from .session_service import SessionService
from .message_service import MessageService

__all__ = ["SessionService", "MessageService"]
