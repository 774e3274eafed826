"""
Login / logout endpoints
"""
from fastapi import APIRouter, Body, Depends

from chatroom.core.dependencies import get_session_service
from chatroom.schemas import LoginRequest, LoginResponse, LogoutRequest, LogoutResponse
from chatroom.services import SessionService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=LoginResponse)
def login(
    credentials: LoginRequest = Body(...),
    sessions: SessionService = Depends(get_session_service),
):
    """
    Join the room

    Request body:
    {
        "username": "alice",
        "password": "456"
    }

    401 on a wrong password, 409 when the username is online elsewhere.
    """
    user = sessions.login(credentials)
    return LoginResponse(user=user)


@router.post("/logout", response_model=LogoutResponse)
def logout(
    payload: LogoutRequest = Body(...),
    sessions: SessionService = Depends(get_session_service),
):
    """Leave the room"""
    sessions.logout(payload.user_id, payload.username)
    return LogoutResponse(success=True)
