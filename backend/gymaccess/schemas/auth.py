"""Authentication schemas."""

from pydantic import BaseModel, EmailStr, Field

USERNAME_PATTERN = r"^[a-zA-Z0-9_]+$"


class LoginRequest(BaseModel):
    """Login request body, shared by staff and members."""

    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)


class MemberRegisterRequest(BaseModel):
    """Member self-registration."""

    username: str = Field(..., min_length=3, max_length=20, pattern=USERNAME_PATTERN)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    phone_number: str | None = Field(None, max_length=30)


class Token(BaseModel):
    """JWT token response."""

    access_token: str
    token_type: str = "bearer"


class AuthResponse(Token):
    """Token plus the signed-in principal."""

    user: dict
