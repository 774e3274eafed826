"""
Entity store contract.

A store holds every User and Message of the single chat room. Each
operation is atomic with respect to the others; there are no
cross-operation transactions. Implementations must behave identically,
so callers never need to know which backend they talk to.
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Callable, List, Optional

from chatroom.schemas import User, UserCreate, Message, MessageCreate
from chatroom.utils import as_utc, utcnow


class ChatStore(ABC):
    """Repository of users and messages"""

    backend: str = "abstract"

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self._clock = clock or utcnow
        self._last_timestamp: Optional[datetime] = None

    def _now(self) -> datetime:
        return as_utc(self._clock())

    def _next_timestamp(self) -> datetime:
        """
        Timestamp for a new message.

        Never earlier than the previous one, so insertion order and
        timestamp order agree. Equal timestamps are allowed.
        Must be called with the store's write lock held.
        """
        now = self._now()
        if self._last_timestamp is not None and now < self._last_timestamp:
            now = self._last_timestamp
        self._last_timestamp = now
        return now

    # User operations

    @abstractmethod
    def get_user(self, user_id: str) -> Optional[User]:
        """Point lookup, None when unknown"""

    @abstractmethod
    def get_user_by_username(self, username: str) -> Optional[User]:
        """Exact, case-sensitive lookup"""

    @abstractmethod
    def create_user(self, user_data: UserCreate) -> User:
        """
        Create an online user

        Raises:
            UsernameTakenError: If a user with that username already exists
        """

    @abstractmethod
    def update_user_online_status(self, user_id: str, is_online: bool) -> None:
        """Set online flag and refresh last_seen; unknown ids are ignored"""

    @abstractmethod
    def get_online_users(self) -> List[User]:
        """All users currently online"""

    @abstractmethod
    def count_users(self) -> int:
        ...

    # Message operations

    @abstractmethod
    def create_message(self, message_data: MessageCreate) -> Message:
        """Append a message stamped with the store's clock"""

    @abstractmethod
    def get_messages(self, limit: int = 50) -> List[Message]:
        """Most recent `limit` messages, oldest first"""

    @abstractmethod
    def get_messages_after(self, timestamp: datetime) -> List[Message]:
        """All messages strictly newer than `timestamp`, oldest first"""

    @abstractmethod
    def count_messages(self) -> int:
        ...

    def close(self) -> None:
        """Release backend resources"""
