"""Membership schemas."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from gymaccess.core.clock import to_local
from gymaccess.models.membership import MembershipType


class MembershipCreate(BaseModel):
    member_id: int = Field(..., gt=0)
    membership_type: MembershipType
    purchase_date: datetime
    expiration_date: datetime

    @field_validator("purchase_date", "expiration_date")
    @classmethod
    def normalize_to_gym_time(cls, v: datetime) -> datetime:
        # Offsets from the client are converted to gym wall-clock time
        return to_local(v)
