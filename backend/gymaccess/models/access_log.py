"""Access log model (append-only)."""

from __future__ import annotations

import enum
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, Enum, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gymaccess.core.clock import local_now
from gymaccess.db.base import Base

if TYPE_CHECKING:
    from gymaccess.models.member import Member
    from gymaccess.models.staff import Staff


class AccessResult(str, enum.Enum):
    GRANTED = "GRANTED"
    DENIED = "DENIED"


class AccessLog(Base):
    """One QR scan attempt. ``member_id`` is NULL when the token matched nobody."""

    __tablename__ = "access_logs"

    id: Mapped[int] = mapped_column(primary_key=True)
    member_id: Mapped[Optional[int]] = mapped_column(ForeignKey("members.id"), index=True, nullable=True)
    scanned_by: Mapped[int] = mapped_column(ForeignKey("staff.id"), nullable=False)
    result: Mapped[AccessResult] = mapped_column(Enum(AccessResult), nullable=False)
    reason: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    scan_time: Mapped[datetime] = mapped_column(DateTime, default=local_now, index=True, nullable=False)

    member: Mapped[Optional["Member"]] = relationship(back_populates="access_logs")
    staff: Mapped["Staff"] = relationship()
