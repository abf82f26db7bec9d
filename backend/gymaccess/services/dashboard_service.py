"""Member portal: dashboard summary and activity calendar."""

import calendar
import math
from collections import Counter
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, Optional

from sqlalchemy.orm import Session

from gymaccess.core.clock import local_now
from gymaccess.core.errors import bad_request, not_found
from gymaccess.core.responses import isoformat
from gymaccess.models.access_log import AccessLog, AccessResult
from gymaccess.models.gamification import MemberBadge, Notification
from gymaccess.models.member import Member
from gymaccess.services.gamification_service import notification_to_dict
from gymaccess.services.membership_service import active_membership

# 30 visits in a month counts as 100% activity
FULL_ACTIVITY_VISITS = 30


def visit_streak(visit_days: Iterable[date], today: date) -> int:
    """Consecutive days with a granted visit, counting back from today."""
    days = set(visit_days)
    streak = 0
    current = today
    while current in days:
        streak += 1
        current -= timedelta(days=1)
    return streak


def _month_start(day: date) -> datetime:
    return datetime(day.year, day.month, 1)


def _previous_month_start(day: date) -> datetime:
    if day.month == 1:
        return datetime(day.year - 1, 12, 1)
    return datetime(day.year, day.month - 1, 1)


def member_dashboard(db: Session, member_id: int, now: Optional[datetime] = None) -> Dict[str, Any]:
    now = now or local_now()
    member = db.get(Member, member_id)
    if member is None:
        raise not_found("Member")

    scan_times = [
        row.scan_time
        for row in db.query(AccessLog.scan_time).filter(
            AccessLog.member_id == member_id,
            AccessLog.result == AccessResult.GRANTED,
        )
    ]
    this_month = _month_start(now.date())
    last_month = _previous_month_start(now.date())
    this_month_visits = sum(1 for t in scan_times if t >= this_month)
    last_month_visits = sum(1 for t in scan_times if last_month <= t < this_month)

    membership = active_membership(db, member_id, now)
    membership_block = None
    if membership is not None:
        seconds_left = (membership.expiration_date - now).total_seconds()
        membership_block = {
            "type": membership.membership_type.value,
            "purchase_date": isoformat(membership.purchase_date),
            "expiration_date": isoformat(membership.expiration_date),
            "days_until_expiration": math.ceil(seconds_left / 86400),
        }

    badges = (
        db.query(MemberBadge)
        .filter(MemberBadge.member_id == member_id)
        .order_by(MemberBadge.earned_date.desc())
        .all()
    )
    notifications = (
        db.query(Notification)
        .filter(Notification.member_id == member_id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .limit(10)
        .all()
    )

    return {
        "member": {
            "id": member.id,
            "first_name": member.first_name,
            "last_name": member.last_name,
            "email": member.email,
            "phone_number": member.phone_number,
            "member_since": isoformat(member.member_since),
            "qr_code": member.qr_code,
        },
        "membership": membership_block,
        "stats": {
            "total_visits": len(scan_times),
            "this_month_visits": this_month_visits,
            "last_month_visits": last_month_visits,
            "current_streak": visit_streak((t.date() for t in scan_times), now.date()),
            "activity_percentage": min(100.0, this_month_visits / FULL_ACTIVITY_VISITS * 100),
        },
        "gamification": {
            "total_points": member.total_points,
            "level": member.level,
            "experience": member.experience,
            "longest_streak": member.longest_streak,
        },
        "badges": [
            {
                "name": mb.badge.name,
                "description": mb.badge.description,
                "icon_url": mb.badge.icon_url,
                "rarity": mb.badge.rarity.value,
                "earned_date": isoformat(mb.earned_date),
            }
            for mb in badges
        ],
        "notifications": [notification_to_dict(n) for n in notifications],
    }


def activity_calendar(
    db: Session,
    member_id: int,
    year: Optional[int] = None,
    month: Optional[int] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Granted visits per day for one calendar month."""
    now = now or local_now()
    year = year or now.year
    month = month or now.month
    if not 1 <= month <= 12:
        raise bad_request("month must be between 1 and 12")

    _, last_day = calendar.monthrange(year, month)
    start = datetime(year, month, 1)
    end = datetime(year, month, last_day) + timedelta(days=1)

    scan_times = [
        row.scan_time
        for row in db.query(AccessLog.scan_time).filter(
            AccessLog.member_id == member_id,
            AccessLog.result == AccessResult.GRANTED,
            AccessLog.scan_time >= start,
            AccessLog.scan_time < end,
        )
    ]
    per_day = Counter(t.date().isoformat() for t in scan_times)

    return {
        "year": year,
        "month": month,
        "activity": dict(sorted(per_day.items())),
    }
