"""
Session service - login/logout and presence
"""
import logging
from typing import List, Optional

from chatroom.core.config import Settings
from chatroom.core.exceptions import InvalidCredentialsError, UsernameTakenError
from chatroom.schemas import (
    User,
    UserCreate,
    LoginRequest,
    MessageCreate,
    MessageType,
    OnlineUsersResponse,
)
from chatroom.store import ChatStore

logger = logging.getLogger(__name__)


class SessionService:
    """Turns login/logout intents into store updates plus system messages"""

    def __init__(self, store: ChatStore, settings: Settings):
        self.store = store
        self.settings = settings

    def login(self, credentials: LoginRequest) -> User:
        """
        Log a user into the room

        Args:
            credentials: Validated username and password

        Returns:
            The online user record

        Raises:
            InvalidCredentialsError: If the password is not the shared secret
            UsernameTakenError: If the username already has an online session
        """
        username = credentials.username

        if credentials.password != self.settings.CHAT_PASSWORD:
            logger.warning("Login rejected: invalid password", extra={"username": username})
            raise InvalidCredentialsError()

        existing = self.store.get_user_by_username(username)
        if existing and existing.is_online:
            logger.warning("Login rejected: username online", extra={"username": username})
            raise UsernameTakenError()

        if existing is None:
            user = self.store.create_user(UserCreate(username=username))
            content = f"{username} joined the chat"
        else:
            self.store.update_user_online_status(existing.id, True)
            user = self.store.get_user(existing.id) or existing
            content = f"{username} rejoined the chat"

        self._announce(user.id, username, content, MessageType.JOIN)
        logger.info("User logged in", extra={"user_id": user.id, "username": username})
        return user

    def logout(self, user_id: Optional[str], username: Optional[str] = None) -> None:
        """
        Mark a user offline and announce it

        The caller-supplied username is used for the leave message as given.
        Unknown ids still get a leave message.
        """
        if not user_id:
            return

        stored = self.store.get_user(user_id)
        if username and username.strip():
            name = username
            if stored and stored.username != username:
                logger.warning(
                    f"Logout username '{username}' does not match stored '{stored.username}'",
                    extra={"user_id": user_id},
                )
        else:
            name = stored.username if stored else user_id

        self.store.update_user_online_status(user_id, False)
        self._announce(user_id, name, f"{name} left the chat", MessageType.LEAVE)
        logger.info("User logged out", extra={"user_id": user_id, "username": name})

    def online_users(self) -> OnlineUsersResponse:
        users: List[User] = self.store.get_online_users()
        return OnlineUsersResponse(count=len(users), users=users)

    def _announce(self, user_id: str, username: str, content: str, message_type: MessageType):
        self.store.create_message(MessageCreate(
            content=content,
            sender_id=user_id,
            sender_username=username,
            type=message_type,
        ))
