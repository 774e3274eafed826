"""
Async HTTP client for the chat API
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import httpx

from chatroom.core.exceptions import (
    ChatError,
    ValidationError,
    InvalidCredentialsError,
    UsernameTakenError,
)
from chatroom.schemas import (
    User,
    Message,
    LoginResponse,
    OnlineUsersResponse,
)

logger = logging.getLogger(__name__)

ERRORS_BY_STATUS = {
    400: ValidationError,
    401: InvalidCredentialsError,
    409: UsernameTakenError,
}


class ChatClient:
    """
    Thin wrapper over ``httpx.AsyncClient``.

    Error responses are raised as the same exception types the server
    maps them from.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        api_prefix: str = "/api",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_prefix = api_prefix.rstrip("/")
        self._http = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

    async def __aenter__(self) -> "ChatClient":
        return self

    async def __aexit__(self, *exc_info):
        await self.close()

    async def close(self):
        await self._http.aclose()

    async def login(self, username: str, password: str) -> User:
        data = await self._request("POST", "/auth/login", json={"username": username, "password": password})
        return LoginResponse.model_validate(data).user

    async def logout(self, user: User) -> None:
        await self._request("POST", "/auth/logout", json={"userId": user.id, "username": user.username})

    async def send_message(self, user: User, content: str) -> Message:
        body = {"content": content, "senderId": user.id, "senderUsername": user.username, "type": "message"}
        data = await self._request("POST", "/messages", json=body)
        return Message.model_validate(data)

    async def fetch_messages(self, after: Optional[datetime] = None, limit: Optional[int] = None) -> List[Message]:
        """Full history window, or only messages newer than `after`"""
        params: Dict[str, Any] = {}
        if after is not None:
            params["after"] = after.isoformat()
        elif limit is not None:
            params["limit"] = limit
        data = await self._request("GET", "/messages", params=params)
        return [Message.model_validate(item) for item in data]

    async def online_users(self) -> OnlineUsersResponse:
        data = await self._request("GET", "/users/online")
        return OnlineUsersResponse.model_validate(data)

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        response = await self._http.request(method, f"{self.api_prefix}{path}", **kwargs)
        if response.is_success:
            return response.json()

        try:
            detail = response.json()
        except ValueError:
            detail = {}
        message = detail.get("message") if isinstance(detail, dict) else None

        error_class = ERRORS_BY_STATUS.get(response.status_code)
        logger.debug(f"{method} {path} failed with {response.status_code}: {message}")
        if error_class is ValidationError:
            raise ValidationError(message, field=detail.get("field"))
        if error_class is not None:
            raise error_class(message)
        raise ChatError(message)
