"""Staff administration schemas."""

from pydantic import BaseModel, EmailStr, Field

from gymaccess.models.staff import StaffRole


class StaffCreate(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    role: StaffRole = StaffRole.STAFF


class StaffStatusUpdate(BaseModel):
    is_active: bool
