"""
Entity store implementations
"""
from chatroom.core.config import Settings
from .base import ChatStore
from .memory import MemoryStore
from .sql import SQLStore


def create_store(settings: Settings) -> ChatStore:
    """Build the store selected by STORE_BACKEND"""
    if settings.STORE_BACKEND == "sql":
        return SQLStore(settings.DATABASE_URL)
    return MemoryStore()


__all__ = ["ChatStore", "MemoryStore", "SQLStore", "create_store"]
