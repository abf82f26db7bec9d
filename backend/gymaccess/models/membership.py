"""Membership model."""

from __future__ import annotations

import enum
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Enum, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gymaccess.core.clock import local_now
from gymaccess.db.base import Base

if TYPE_CHECKING:
    from gymaccess.models.member import Member


class MembershipType(str, enum.Enum):
    DAILY = "DAILY"
    MONTHLY = "MONTHLY"
    YEARLY = "YEARLY"
    CUSTOM = "CUSTOM"


class MembershipStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    EXPIRED = "EXPIRED"


class Membership(Base):
    """A purchased membership period.

    ``status`` is a cached value; whether a membership currently grants
    access is decided by ``membership_service.active_membership``, which
    also requires the expiration date to lie after "now".
    """

    __tablename__ = "memberships"

    id: Mapped[int] = mapped_column(primary_key=True)
    member_id: Mapped[int] = mapped_column(ForeignKey("members.id"), index=True, nullable=False)
    membership_type: Mapped[MembershipType] = mapped_column(Enum(MembershipType), nullable=False)
    purchase_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    expiration_date: Mapped[datetime] = mapped_column(DateTime, index=True, nullable=False)
    status: Mapped[MembershipStatus] = mapped_column(
        Enum(MembershipStatus),
        default=MembershipStatus.ACTIVE,
        index=True,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=local_now, nullable=False)

    member: Mapped["Member"] = relationship(back_populates="memberships")
