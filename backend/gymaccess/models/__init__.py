"""SQLAlchemy models."""

from gymaccess.models.member import Member
from gymaccess.models.staff import Staff
from gymaccess.models.membership import Membership, MembershipStatus, MembershipType
from gymaccess.models.access_log import AccessLog, AccessResult
from gymaccess.models.gamification import (
    Badge,
    BadgeRarity,
    DailyPoints,
    MemberBadge,
    Notification,
    NotificationType,
)

__all__ = [
    "Member",
    "Staff",
    "Membership",
    "MembershipStatus",
    "MembershipType",
    "AccessLog",
    "AccessResult",
    "Badge",
    "BadgeRarity",
    "DailyPoints",
    "MemberBadge",
    "Notification",
    "NotificationType",
]
