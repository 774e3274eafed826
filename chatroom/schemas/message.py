"""
Message Pydantic schemas
"""
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, field_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError


class MessageType(str, Enum):
    """Kind of room message"""
    MESSAGE = "message"
    JOIN = "join"
    LEAVE = "leave"


class Message(BaseModel):
    """
    Room message - immutable once created.

    `sender_username` is the sender's name at send time and is never
    re-derived from the user record.
    """
    id: str
    content: str
    sender_id: str
    sender_username: str
    type: MessageType = MessageType.MESSAGE
    timestamp: datetime

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        use_enum_values = True
        frozen = True


_REQUIRED_MESSAGES = {
    "content": ("content_required", "Content is required"),
    "sender_id": ("sender_id_required", "Sender id is required"),
    "sender_username": ("sender_username_required", "Sender username is required"),
}


class MessageCreate(BaseModel):
    """
    Schema for creating message
    {
        "content": "hi",
        "senderId": "<user id>",
        "senderUsername": "alice",
        "type": "message"
    }
    """
    content: str
    sender_id: str
    sender_username: str
    type: MessageType = MessageType.MESSAGE

    @field_validator("content", "sender_id", "sender_username")
    @classmethod
    def check_not_empty(cls, v: str, info) -> str:
        if not v:
            error_type, message = _REQUIRED_MESSAGES[info.field_name]
            raise PydanticCustomError(error_type, message)
        return v

    @field_validator("type", mode="before")
    @classmethod
    def default_type(cls, v):
        if v is None or v == "":
            return MessageType.MESSAGE
        return v

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        use_enum_values = True
