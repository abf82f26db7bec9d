"""Member schemas."""

from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from gymaccess.schemas.auth import USERNAME_PATTERN


class MemberCreate(BaseModel):
    """Front-desk registration. No password; the member can sign up later."""

    model_config = {"str_strip_whitespace": True}

    username: str = Field(..., min_length=3, max_length=20, pattern=USERNAME_PATTERN)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone_number: Optional[str] = Field(None, max_length=30)


class MemberUpdate(BaseModel):
    model_config = {"str_strip_whitespace": True}

    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone_number: Optional[str] = Field(None, max_length=30)
