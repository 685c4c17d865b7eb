"""HTTP exceptions raised by the authentication and authorization layers."""
from typing import Optional

from fastapi import HTTPException, status


class InvalidToken(Exception):
    """Raised by the token decoder when a bearer token cannot be trusted."""


class Unauthenticated(HTTPException):
    def __init__(self, detail: str = "Could not validate credentials"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class Forbidden(HTTPException):
    """Authenticated but not allowed.

    ``reason`` is a short machine-readable code (``no_role``,
    ``permission_mismatch``, ...) kept next to the human readable detail so
    callers and tests can tell denials apart without parsing messages.
    """

    def __init__(self, detail: str, reason: Optional[str] = None):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
        self.reason = reason


class ServiceUnavailable(HTTPException):
    def __init__(self, detail: str = "Authorization store unavailable"):
        super().__init__(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=detail)


class NotFound(HTTPException):
    def __init__(self, detail: str = "Not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class Conflict(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class BadRequest(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)
