"""
Room message endpoints
"""
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Query

from chatroom.core.dependencies import get_message_service
from chatroom.schemas import Message, MessageCreate
from chatroom.services import MessageService

router = APIRouter(prefix="/messages", tags=["messages"])


@router.get("", response_model=List[Message])
def get_messages(
    after: Optional[datetime] = None,
    limit: Optional[int] = Query(default=None, ge=1),
    messages: MessageService = Depends(get_message_service),
):
    """
    Get room messages, oldest first

    Args:
        after: ISO-8601 timestamp; only messages strictly newer are returned
        limit: Size of the latest-messages window when `after` is not given
    """
    return messages.fetch(after=after, limit=limit)


@router.post("", response_model=Message)
def send_message(
    message: MessageCreate = Body(...),
    messages: MessageService = Depends(get_message_service),
):
    """
    Post a message to the room

    Request body:
    {
        "content": "hi",
        "senderId": "<user id>",
        "senderUsername": "alice",
        "type": "message"
    }
    """
    return messages.send(message)
