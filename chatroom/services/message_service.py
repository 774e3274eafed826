"""
Message service - posting and polling room messages
"""
import logging
from datetime import datetime
from typing import List, Optional

from chatroom.core.config import Settings
from chatroom.schemas import Message, MessageCreate
from chatroom.store import ChatStore

logger = logging.getLogger(__name__)


class MessageService:
    """Service for room message operations"""

    def __init__(self, store: ChatStore, settings: Settings):
        self.store = store
        self.settings = settings

    def send(self, message_data: MessageCreate) -> Message:
        message = self.store.create_message(message_data)
        logger.info(
            "Message stored",
            extra={"message_id": message.id, "user_id": message.sender_id},
        )
        return message

    def fetch(self, after: Optional[datetime] = None, limit: Optional[int] = None) -> List[Message]:
        """
        Get room messages, oldest first

        Args:
            after: Only messages strictly newer than this (incremental poll)
            limit: Size of the full-history window, ignored with `after`

        Returns:
            List of messages
        """
        if after is not None:
            return self.store.get_messages_after(after)

        if limit is None:
            limit = self.settings.DEFAULT_MESSAGE_LIMIT
        if limit > self.settings.MAX_MESSAGE_LIMIT:
            limit = self.settings.MAX_MESSAGE_LIMIT

        return self.store.get_messages(limit)
