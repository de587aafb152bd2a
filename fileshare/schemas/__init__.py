"""Pydantic request/response schemas."""

from fileshare.schemas.auth import (
    CurrentUser,
    LoginRequest,
    RegisterRequest,
    RegisterResponse,
    TokenResponse,
    UserOut,
)
from fileshare.schemas.files import (
    FileListItem,
    FileOut,
    MessageResponse,
    ShareRequest,
    ShareResponse,
    UploadResponse,
)
from fileshare.schemas.health import HealthResponse

__all__ = [
    "CurrentUser",
    "FileListItem",
    "FileOut",
    "HealthResponse",
    "LoginRequest",
    "MessageResponse",
    "RegisterRequest",
    "RegisterResponse",
    "ShareRequest",
    "ShareResponse",
    "TokenResponse",
    "UploadResponse",
    "UserOut",
]
