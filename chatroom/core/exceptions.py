"""
Error taxonomy shared by the server and the polling client.

Every business-rule failure is a ``ChatError`` subclass carrying the HTTP
status it maps to at the API boundary. Anything that is not a ``ChatError``
is reported as a generic internal error.
"""
from typing import Any, Dict, Optional


class ChatError(Exception):
    """Base error - unexpected failure, surfaced as HTTP 500"""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message}


class ValidationError(ChatError):
    """Malformed or missing field"""

    status_code = 400
    default_message = "Invalid request"

    def __init__(self, message: Optional[str] = None, field: Optional[str] = None):
        super().__init__(message)
        self.field = field

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        if self.field:
            data["field"] = self.field
        return data


class AuthorizationError(ChatError):
    status_code = 401
    default_message = "Unauthorized"


class InvalidCredentialsError(AuthorizationError):
    """Password does not match the shared secret"""

    default_message = "Invalid password"


class ConflictError(ChatError):
    status_code = 409
    default_message = "Conflict"


class UsernameTakenError(ConflictError):
    """Username already belongs to an online user"""

    default_message = "Username already taken by an online user"
