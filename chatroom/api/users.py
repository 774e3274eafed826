"""
User presence endpoints
"""
from fastapi import APIRouter, Depends

from chatroom.core.dependencies import get_session_service
from chatroom.schemas import OnlineUsersResponse
from chatroom.services import SessionService

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/online", response_model=OnlineUsersResponse)
def get_online_users(sessions: SessionService = Depends(get_session_service)):
    """Get online users and their count"""
    return sessions.online_users()
