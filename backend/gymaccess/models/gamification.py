"""Gamification models: daily points, badges, notifications."""

from __future__ import annotations

import enum
from datetime import date as calendar_date, datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import (
    Boolean, Date, DateTime, Enum, Float, ForeignKey, Integer, String, Text, UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gymaccess.core.clock import local_now
from gymaccess.db.base import Base

if TYPE_CHECKING:
    from gymaccess.models.member import Member


class BadgeRarity(str, enum.Enum):
    COMMON = "COMMON"
    RARE = "RARE"
    EPIC = "EPIC"
    LEGENDARY = "LEGENDARY"


class NotificationType(str, enum.Enum):
    ACHIEVEMENT = "ACHIEVEMENT"
    SUCCESS = "SUCCESS"
    WARNING = "WARNING"
    PROMOTION = "PROMOTION"


class DailyPoints(Base):
    """Points earned by a member on one calendar day."""

    __tablename__ = "daily_points"
    __table_args__ = (
        UniqueConstraint("member_id", "date", name="uq_daily_points_member_date"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    member_id: Mapped[int] = mapped_column(ForeignKey("members.id"), index=True, nullable=False)
    date: Mapped[calendar_date] = mapped_column(Date, nullable=False)
    base_points: Mapped[int] = mapped_column(Integer, nullable=False)
    streak_multiplier: Mapped[float] = mapped_column(Float, nullable=False)
    total_points: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=local_now, nullable=False)

    member: Mapped["Member"] = relationship(back_populates="daily_points")


class Badge(Base):
    """Badge catalog entry."""

    __tablename__ = "badges"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    icon_url: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    rarity: Mapped[BadgeRarity] = mapped_column(Enum(BadgeRarity), default=BadgeRarity.COMMON, nullable=False)
    point_value: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=local_now, nullable=False)

    member_badges: Mapped[List["MemberBadge"]] = relationship(back_populates="badge")


class MemberBadge(Base):
    """A badge earned by a member."""

    __tablename__ = "member_badges"
    __table_args__ = (
        UniqueConstraint("member_id", "badge_id", name="uq_member_badges_member_badge"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    member_id: Mapped[int] = mapped_column(ForeignKey("members.id"), index=True, nullable=False)
    badge_id: Mapped[int] = mapped_column(ForeignKey("badges.id"), nullable=False)
    earned_date: Mapped[datetime] = mapped_column(DateTime, default=local_now, nullable=False)

    member: Mapped["Member"] = relationship(back_populates="member_badges")
    badge: Mapped["Badge"] = relationship(back_populates="member_badges")


class Notification(Base):
    """In-app notification for a member."""

    __tablename__ = "notifications"

    id: Mapped[int] = mapped_column(primary_key=True)
    member_id: Mapped[int] = mapped_column(ForeignKey("members.id"), index=True, nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[NotificationType] = mapped_column(Enum(NotificationType), nullable=False)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=local_now, index=True, nullable=False)

    member: Mapped["Member"] = relationship(back_populates="notifications")
