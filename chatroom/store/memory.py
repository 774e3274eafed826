"""
In-memory store - lives for the life of the process
"""
import logging
import threading
from datetime import datetime
from typing import Callable, Dict, List, Optional

from chatroom.core.exceptions import UsernameTakenError
from chatroom.schemas import User, UserCreate, Message, MessageCreate, MessageType
from chatroom.store.base import ChatStore
from chatroom.utils import as_utc, new_id

logger = logging.getLogger(__name__)


class MemoryStore(ChatStore):
    """
    Dict-backed store guarded by a single re-entrant lock.

    Messages are kept in a list in insertion order. Because timestamps are
    clamped to be non-decreasing, list order is also (timestamp, insertion)
    order, so reads never need to sort.
    """

    backend = "memory"

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        super().__init__(clock)
        self._users: Dict[str, User] = {}
        self._user_ids_by_username: Dict[str, str] = {}
        self._messages: List[Message] = []
        self._lock = threading.RLock()

    def get_user(self, user_id: str) -> Optional[User]:
        with self._lock:
            user = self._users.get(user_id)
            return user.model_copy() if user else None

    def get_user_by_username(self, username: str) -> Optional[User]:
        with self._lock:
            user_id = self._user_ids_by_username.get(username)
            if user_id is None:
                return None
            return self._users[user_id].model_copy()

    def create_user(self, user_data: UserCreate) -> User:
        with self._lock:
            if user_data.username in self._user_ids_by_username:
                raise UsernameTakenError()

            user = User(
                id=new_id(),
                username=user_data.username,
                is_online=True,
                last_seen=self._now(),
            )
            self._users[user.id] = user
            self._user_ids_by_username[user.username] = user.id

        logger.info("User created", extra={"user_id": user.id, "username": user.username})
        return user.model_copy()

    def update_user_online_status(self, user_id: str, is_online: bool) -> None:
        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                logger.debug(f"Status update for unknown user {user_id} ignored")
                return
            user.is_online = is_online
            user.last_seen = self._now()

    def get_online_users(self) -> List[User]:
        with self._lock:
            return [u.model_copy() for u in self._users.values() if u.is_online]

    def count_users(self) -> int:
        with self._lock:
            return len(self._users)

    def create_message(self, message_data: MessageCreate) -> Message:
        with self._lock:
            message = Message(
                id=new_id(),
                content=message_data.content,
                sender_id=message_data.sender_id,
                sender_username=message_data.sender_username,
                type=MessageType(message_data.type or MessageType.MESSAGE).value,
                timestamp=self._next_timestamp(),
            )
            self._messages.append(message)
        return message

    def get_messages(self, limit: int = 50) -> List[Message]:
        if limit <= 0:
            return []
        with self._lock:
            return self._messages[-limit:]

    def get_messages_after(self, timestamp: datetime) -> List[Message]:
        after = as_utc(timestamp)
        with self._lock:
            return [m for m in self._messages if m.timestamp > after]

    def count_messages(self) -> int:
        with self._lock:
            return len(self._messages)
