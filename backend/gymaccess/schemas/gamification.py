"""Gamification schemas."""

from typing import Annotated, Optional

from pydantic import BaseModel, Field, HttpUrl, UrlConstraints, field_validator

from gymaccess.core.sanitize import sanitize_text

AvatarUrl = Annotated[HttpUrl, UrlConstraints(max_length=500, allowed_schemes=["http", "https"])]


class ProfileUpdate(BaseModel):
    bio: Optional[str] = Field(None, max_length=500)
    avatar_url: Optional[AvatarUrl] = None

    @field_validator("bio", mode="before")
    @classmethod
    def _sanitize(cls, v):
        return sanitize_text(v)

    @field_validator("avatar_url", mode="before")
    @classmethod
    def _blank_url(cls, v):
        # Empty string leaves the stored avatar untouched
        if isinstance(v, str) and not v.strip():
            return None
        return v


class BadgeAward(BaseModel):
    member_id: int = Field(..., gt=0)
    badge_id: int = Field(..., gt=0)
