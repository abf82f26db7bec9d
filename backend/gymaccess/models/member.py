"""Member model."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gymaccess.core.clock import local_now
from gymaccess.db.base import Base, TimestampMixin

if TYPE_CHECKING:
    from gymaccess.models.access_log import AccessLog
    from gymaccess.models.gamification import DailyPoints, MemberBadge, Notification
    from gymaccess.models.membership import Membership


class Member(Base, TimestampMixin):
    """Gym member: identity, QR credential and gamification state."""

    __tablename__ = "members"

    id: Mapped[int] = mapped_column(primary_key=True)
    username: Mapped[str] = mapped_column(String(20), unique=True, index=True, nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    phone_number: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    # Members registered at the front desk have no portal password yet
    password_hash: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    qr_code: Mapped[str] = mapped_column(String(64), unique=True, index=True, nullable=False)

    total_points: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    current_streak: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    longest_streak: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    level: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    experience: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_visit_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True, index=True)

    bio: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    avatar_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    member_since: Mapped[datetime] = mapped_column(DateTime, default=local_now, nullable=False)

    memberships: Mapped[List["Membership"]] = relationship(
        back_populates="member", cascade="all, delete-orphan"
    )
    access_logs: Mapped[List["AccessLog"]] = relationship(back_populates="member")
    daily_points: Mapped[List["DailyPoints"]] = relationship(back_populates="member")
    member_badges: Mapped[List["MemberBadge"]] = relationship(back_populates="member")
    notifications: Mapped[List["Notification"]] = relationship(back_populates="member")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
