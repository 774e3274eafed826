"""
API routers
"""
from . import auth, messages, users, health

__all__ = ["auth", "messages", "users", "health"]
