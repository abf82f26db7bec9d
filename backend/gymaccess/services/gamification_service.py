"""
Gamification Service
Points and levels, badges, leaderboard, member profile/stats and notifications.
"""
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from dateutil.relativedelta import relativedelta
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from gymaccess.core.clock import local_now
from gymaccess.core.errors import conflict, not_found
from gymaccess.core.responses import isoformat
from gymaccess.models.access_log import AccessLog, AccessResult
from gymaccess.models.gamification import (
    Badge, DailyPoints, MemberBadge, Notification, NotificationType,
)
from gymaccess.models.member import Member
from gymaccess.services.scoring import experience_to_next_level, level_for_experience

logger = logging.getLogger(__name__)

LEADERBOARD_TYPES = ("all", "weekly", "monthly")


def apply_points(member: Member, points: int) -> bool:
    """Add points and experience, recompute level. Returns True on level-up."""
    previous_level = member.level
    member.total_points += points
    member.experience += points
    member.level = level_for_experience(member.experience)
    return member.level > previous_level


def notify(
    db: Session,
    member_id: int,
    title: str,
    message: str,
    type: NotificationType = NotificationType.SUCCESS,
) -> Notification:
    """Queue a notification in the current transaction. Caller commits."""
    notification = Notification(member_id=member_id, title=title, message=message, type=type)
    db.add(notification)
    return notification


def level_up_notification(db: Session, member: Member) -> Notification:
    return notify(
        db,
        member.id,
        "Level Up! 🎉",
        f"Congratulations! You've reached level {member.level}!",
        NotificationType.ACHIEVEMENT,
    )


def badge_to_dict(badge: Badge) -> Dict[str, Any]:
    return {
        "id": badge.id,
        "name": badge.name,
        "description": badge.description,
        "icon_url": badge.icon_url,
        "rarity": badge.rarity.value,
        "point_value": badge.point_value,
    }


def notification_to_dict(notification: Notification) -> Dict[str, Any]:
    return {
        "id": notification.id,
        "member_id": notification.member_id,
        "title": notification.title,
        "message": notification.message,
        "type": notification.type.value,
        "is_read": notification.is_read,
        "created_at": isoformat(notification.created_at),
    }


class GamificationService:
    """Read and write side of the gamification layer."""

    def __init__(self, db: Session):
        self.db = db

    def _get_member(self, member_id: int) -> Member:
        member = self.db.get(Member, member_id)
        if member is None:
            raise not_found("Member")
        return member

    def _has_badge(self, member_id: int, badge_id: int) -> bool:
        return self.db.query(MemberBadge.id).filter(
            MemberBadge.member_id == member_id,
            MemberBadge.badge_id == badge_id,
        ).first() is not None

    # === Leaderboard ===

    def leaderboard(
        self,
        board_type: str = "all",
        limit: int = 50,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """Rank members by all-time points.

        Weekly and monthly boards only admit members whose last visit falls
        inside the window; ranking is still by all-time total_points.
        """
        now = now or local_now()
        query = self.db.query(Member)

        if board_type == "weekly":
            query = query.filter(Member.last_visit_date >= now - timedelta(days=7))
        elif board_type == "monthly":
            query = query.filter(Member.last_visit_date >= now - relativedelta(months=1))

        members = (
            query.order_by(Member.total_points.desc(), Member.id.asc())
            .limit(limit)
            .all()
        )

        entries = []
        for index, m in enumerate(members):
            entries.append({
                "rank": index + 1,
                "member_id": m.id,
                "username": m.username,
                "first_name": m.first_name,
                "last_name": m.last_name,
                "display_name": m.username or m.full_name,
                "total_points": m.total_points,
                "current_streak": m.current_streak,
                "level": m.level,
                "avatar_url": m.avatar_url,
            })

        return {"leaderboard": entries, "type": board_type, "limit": limit}

    # === Profile ===

    def profile(self, member_id: int) -> Dict[str, Any]:
        member = self._get_member(member_id)

        rank = self.db.query(func.count(Member.id)).filter(
            Member.total_points > member.total_points
        ).scalar() + 1

        member_badges = (
            self.db.query(MemberBadge)
            .filter(MemberBadge.member_id == member_id)
            .order_by(MemberBadge.earned_date.desc())
            .all()
        )
        recent_points = (
            self.db.query(DailyPoints)
            .filter(DailyPoints.member_id == member_id)
            .order_by(DailyPoints.date.desc())
            .limit(30)
            .all()
        )

        return {
            "member": {
                "member_id": member.id,
                "username": member.username,
                "first_name": member.first_name,
                "last_name": member.last_name,
                "email": member.email,
                "avatar_url": member.avatar_url,
                "bio": member.bio,
                "total_points": member.total_points,
                "current_streak": member.current_streak,
                "longest_streak": member.longest_streak,
                "level": member.level,
                "experience": member.experience,
                "exp_to_next_level": experience_to_next_level(member.level, member.experience),
                "rank": rank,
                "member_since": isoformat(member.member_since),
            },
            "badges": [
                {**badge_to_dict(mb.badge), "earned_date": isoformat(mb.earned_date)}
                for mb in member_badges
            ],
            "recent_points": [
                {
                    "date": isoformat(dp.date),
                    "base_points": dp.base_points,
                    "streak_multiplier": dp.streak_multiplier,
                    "total_points": dp.total_points,
                }
                for dp in recent_points
            ],
        }

    def update_profile(
        self,
        member_id: int,
        bio: Optional[str] = None,
        avatar_url: Optional[str] = None,
    ) -> Dict[str, Any]:
        member = self._get_member(member_id)
        # Empty values leave the stored field untouched
        if bio:
            member.bio = bio
        if avatar_url:
            member.avatar_url = avatar_url
        self.db.commit()
        self.db.refresh(member)
        return {
            "member_id": member.id,
            "username": member.username,
            "first_name": member.first_name,
            "last_name": member.last_name,
            "bio": member.bio,
            "avatar_url": member.avatar_url,
        }

    # === Stats ===

    def stats(self, member_id: int, now: Optional[datetime] = None) -> Dict[str, Any]:
        now = now or local_now()
        member = self._get_member(member_id)

        granted = self.db.query(AccessLog).filter(
            AccessLog.member_id == member_id,
            AccessLog.result == AccessResult.GRANTED,
        )
        total_visits = granted.count()
        weekly_visits = granted.filter(AccessLog.scan_time >= now - timedelta(days=7)).count()
        monthly_visits = granted.filter(AccessLog.scan_time >= now - relativedelta(months=1)).count()
        total_days_with_points = self.db.query(func.count(DailyPoints.id)).filter(
            DailyPoints.member_id == member_id
        ).scalar()

        avg_points = member.total_points / total_visits if total_visits > 0 else 0

        return {
            "total_visits": total_visits,
            "total_days_with_points": total_days_with_points,
            "weekly_visits": weekly_visits,
            "monthly_visits": monthly_visits,
            "total_points": member.total_points,
            "current_streak": member.current_streak,
            "longest_streak": member.longest_streak,
            "level": member.level,
            "experience": member.experience,
            "avg_points_per_visit": round(avg_points, 2),
        }

    # === Notifications ===

    def notifications(self, member_id: int, unread_only: bool = False, limit: int = 50) -> List[Dict[str, Any]]:
        query = self.db.query(Notification).filter(Notification.member_id == member_id)
        if unread_only:
            query = query.filter(Notification.is_read.is_(False))
        rows = query.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit).all()
        return [notification_to_dict(n) for n in rows]

    def mark_notification_read(self, notification_id: int, member_id: Optional[int] = None) -> Notification:
        """Mark read. When ``member_id`` is given the notification must belong to it."""
        query = self.db.query(Notification).filter(Notification.id == notification_id)
        if member_id is not None:
            query = query.filter(Notification.member_id == member_id)
        notification = query.first()
        if notification is None:
            raise not_found("Notification")
        notification.is_read = True
        self.db.commit()
        return notification

    # === Badges ===

    def list_badges(self) -> List[Dict[str, Any]]:
        badges = self.db.query(Badge).order_by(Badge.point_value.asc(), Badge.name.asc()).all()
        return [badge_to_dict(b) for b in badges]

    def award_badge(self, member_id: int, badge_id: int) -> Dict[str, Any]:
        """Award a badge once, credit its points and notify the member."""
        member = self._get_member(member_id)
        badge = self.db.get(Badge, badge_id)
        if badge is None:
            raise not_found("Badge")

        if self._has_badge(member_id, badge_id):
            raise conflict("Member already has this badge")

        member_badge = MemberBadge(member_id=member_id, badge_id=badge_id, earned_date=local_now())
        self.db.add(member_badge)
        leveled_up = apply_points(member, badge.point_value)
        notify(
            self.db,
            member_id,
            "New Badge Earned! 🏆",
            f'Congratulations! You\'ve earned the "{badge.name}" badge '
            f"and received {badge.point_value} points!",
            NotificationType.ACHIEVEMENT,
        )
        if leveled_up:
            level_up_notification(self.db, member)

        try:
            self.db.commit()
        except IntegrityError:
            # A concurrent award won the unique (member, badge) race
            self.db.rollback()
            raise conflict("Member already has this badge")

        self.db.refresh(member_badge)
        logger.info(f"Badge '{badge.name}' awarded to member {member_id} (+{badge.point_value} points)")

        return {
            "member_badge": {
                "id": member_badge.id,
                "member_id": member_id,
                "badge": badge_to_dict(badge),
                "earned_date": isoformat(member_badge.earned_date),
            },
            "points_awarded": badge.point_value,
            "total_points": member.total_points,
            "level": member.level,
        }
