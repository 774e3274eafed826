"""
FastAPI Dependencies
"""
from fastapi import Depends, Request

from chatroom.core.config import Settings
from chatroom.services import SessionService, MessageService
from chatroom.store import ChatStore


def get_app_settings(request: Request) -> Settings:
    """Settings the running app was built with"""
    return request.app.state.settings


def get_store(request: Request) -> ChatStore:
    """The app's entity store"""
    return request.app.state.store


def get_session_service(
    store: ChatStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
) -> SessionService:
    return SessionService(store, settings)


def get_message_service(
    store: ChatStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
) -> MessageService:
    return MessageService(store, settings)
