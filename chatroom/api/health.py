"""
Health check endpoint
"""
from fastapi import APIRouter, Depends

from chatroom.core.config import Settings
from chatroom.core.dependencies import get_app_settings, get_store
from chatroom.store import ChatStore

router = APIRouter(tags=["health"])


@router.get("/health")
def health_check(
    store: ChatStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
):
    """Health check with store statistics"""
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "store": {
            "backend": store.backend,
            "users": store.count_users(),
            "messages": store.count_messages(),
        },
    }
