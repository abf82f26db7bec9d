"""SQLAlchemy declarative base and common utilities."""

from datetime import datetime

from sqlalchemy import DateTime
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from gymaccess.core.clock import local_now


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class TimestampMixin:
    """Mixin for created_at and updated_at timestamps (gym wall clock)."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=local_now,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=local_now,
        onupdate=local_now,
        nullable=False,
    )
