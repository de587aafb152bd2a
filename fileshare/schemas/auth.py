"""Request/response schemas for registration, login and the current user."""

from pydantic import BaseModel, ConfigDict, Field, field_validator, validate_email

from fileshare.models.user import UserRole


class RegisterRequest(BaseModel):
    """New account details."""

    username: str = Field(..., min_length=1, max_length=255, description="Username")
    email: str = Field(..., max_length=320, description="Email address")
    password: str = Field(..., min_length=1, max_length=128, description="Password")

    @field_validator("email")
    @classmethod
    def email_must_be_valid(cls, v: str) -> str:
        """Reject malformed addresses but keep the address exactly as sent (no case folding)."""
        _, normalized = validate_email(v)
        if normalized.lower() != v.lower():
            raise ValueError("value is not a valid email address")
        return v


class LoginRequest(BaseModel):
    """Credentials for login."""

    username: str = Field(..., min_length=1, max_length=255, description="Username")
    password: str = Field(..., min_length=1, max_length=128, description="Password")


class UserOut(BaseModel):
    """Public view of a user (never includes the password hash)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    role: UserRole


class RegisterResponse(BaseModel):
    message: str = "User created successfully"
    user: UserOut


class TokenResponse(BaseModel):
    """JWT returned after successful login, with the authenticated user."""

    token: str = Field(..., description="JWT access token; send as Authorization: Bearer <token>")
    user: UserOut


class CurrentUser(BaseModel):
    """Verified token claim (id, username, role) for dependency injection."""

    model_config = ConfigDict(frozen=True)

    id: int
    username: str
    role: UserRole
