"""Access validation schemas."""

from pydantic import BaseModel, Field


class ValidateAccessRequest(BaseModel):
    qr_code: str = Field(..., min_length=1, max_length=64)
