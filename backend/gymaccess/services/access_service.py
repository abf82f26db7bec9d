"""
Access Validation Service
Handles QR scans at the front desk: membership checks, access logging and
daily points scoring.
"""
import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from gymaccess.core.clock import local_now
from gymaccess.core.config import settings
from gymaccess.core.responses import isoformat
from gymaccess.models.access_log import AccessLog, AccessResult
from gymaccess.models.gamification import DailyPoints
from gymaccess.models.member import Member
from gymaccess.models.membership import Membership
from gymaccess.services.gamification_service import apply_points, level_up_notification
from gymaccess.services.membership_service import active_membership, expire_lapsed_for_member
from gymaccess.services.scoring import next_streak, points_for_streak

logger = logging.getLogger(__name__)

ACCESS_GRANTED = "Access Granted"
ACCESS_DENIED = "Access Denied"
REASON_MEMBER_NOT_FOUND = "Member not found"
REASON_NO_ACTIVE_MEMBERSHIP = "No active membership"


class AccessValidationService:
    """Validate a scanned QR token and score the visit.

    Each scan appends exactly one AccessLog row. Points are awarded at most
    once per member per calendar day; the unique (member_id, date) constraint
    on daily_points backs the lookup so concurrent scans cannot double-award.
    """

    def __init__(self, db: Session):
        self.db = db

    def validate(self, qr_code: str, staff_id: int, now: Optional[datetime] = None) -> Dict[str, Any]:
        now = now or local_now()

        member = self.db.query(Member).filter(Member.qr_code == qr_code).first()
        if member is None:
            self._log(None, staff_id, AccessResult.DENIED, REASON_MEMBER_NOT_FOUND, now)
            self.db.commit()
            logger.info(f"Access denied by staff {staff_id}: unknown QR token")
            return {
                "access": False,
                "message": ACCESS_DENIED,
                "reason": REASON_MEMBER_NOT_FOUND,
            }

        expire_lapsed_for_member(self.db, member.id, now)
        membership = active_membership(self.db, member.id, now)

        if membership is None:
            self._log(member.id, staff_id, AccessResult.DENIED, REASON_NO_ACTIVE_MEMBERSHIP, now)
            self.db.commit()
            logger.info(f"Access denied for member {member.id}: no active membership")
            return {
                "access": False,
                "message": ACCESS_DENIED,
                "reason": REASON_NO_ACTIVE_MEMBERSHIP,
                "member": {
                    "id": member.id,
                    "first_name": member.first_name,
                    "last_name": member.last_name,
                    "email": member.email,
                },
            }

        self._log(member.id, staff_id, AccessResult.GRANTED, None, now)
        self.db.commit()

        points = self._award_daily_points(member.id, now)
        member = self.db.get(Member, member.id)
        logger.info(
            f"Access granted for member {member.id} by staff {staff_id}: "
            f"+{points['earned']} points, streak {points['streak']}"
        )

        return {
            "access": True,
            "message": ACCESS_GRANTED,
            "member": {
                "id": member.id,
                "first_name": member.first_name,
                "last_name": member.last_name,
                "email": member.email,
                "phone_number": member.phone_number,
            },
            "membership": self._membership_block(membership),
            "points": points,
        }

    def _log(
        self,
        member_id: Optional[int],
        staff_id: int,
        result: AccessResult,
        reason: Optional[str],
        now: datetime,
    ) -> None:
        self.db.add(AccessLog(
            member_id=member_id,
            scanned_by=staff_id,
            result=result,
            reason=reason,
            scan_time=now,
        ))

    @staticmethod
    def _membership_block(membership: Membership) -> Dict[str, Any]:
        return {
            "id": membership.id,
            "membership_type": membership.membership_type.value,
            "purchase_date": isoformat(membership.purchase_date),
            "expiration_date": isoformat(membership.expiration_date),
            "status": membership.status.value,
        }

    def _award_daily_points(self, member_id: int, now: datetime) -> Dict[str, Any]:
        """Score today's first visit; later visits the same day earn nothing.

        Points row, member update and level-up notification commit together.
        """
        today = now.date()
        member = (
            self.db.query(Member)
            .filter(Member.id == member_id)
            .with_for_update()
            .one()
        )

        if self._points_recorded(member_id, today):
            return self._no_points(member)

        streak = next_streak(member.current_streak, member.last_visit_date, today)
        multiplier, earned = points_for_streak(streak)

        try:
            self.db.add(DailyPoints(
                member_id=member_id,
                date=today,
                base_points=settings.base_points,
                streak_multiplier=multiplier,
                total_points=earned,
            ))
            leveled_up = apply_points(member, earned)
            member.longest_streak = max(member.longest_streak, streak)
            member.current_streak = streak
            member.last_visit_date = now
            if leveled_up:
                level_up_notification(self.db, member)
            self.db.commit()
        except IntegrityError:
            # Another scan for this member committed today's row first
            self.db.rollback()
            logger.info(f"Daily points for member {member_id} on {today} already awarded by a concurrent scan")
            return self._no_points(self.db.get(Member, member_id))

        if leveled_up:
            logger.info(f"Member {member_id} reached level {member.level}")

        return {
            "earned": earned,
            "streak": streak,
            "multiplier": multiplier,
            "total": member.total_points,
        }

    def _points_recorded(self, member_id: int, day: date) -> bool:
        return self.db.query(DailyPoints.id).filter(
            DailyPoints.member_id == member_id,
            DailyPoints.date == day,
        ).first() is not None

    @staticmethod
    def _no_points(member: Member) -> Dict[str, Any]:
        return {
            "earned": 0,
            "streak": member.current_streak,
            "multiplier": 1.0,
            "total": member.total_points,
        }


def access_log_to_dict(log: AccessLog) -> Dict[str, Any]:
    return {
        "id": log.id,
        "member_id": log.member_id,
        "scanned_by": log.scanned_by,
        "result": log.result.value,
        "reason": log.reason,
        "scan_time": isoformat(log.scan_time),
        "member": {
            "first_name": log.member.first_name,
            "last_name": log.member.last_name,
            "email": log.member.email,
        } if log.member is not None else None,
        "staff": {
            "first_name": log.staff.first_name,
            "last_name": log.staff.last_name,
            "email": log.staff.email,
        },
    }


def list_access_logs(db: Session, page: int = 1, limit: int = 50) -> Tuple[List[AccessLog], int]:
    """One page of access logs, newest first, plus the total count."""
    total = db.query(func.count(AccessLog.id)).scalar()
    logs = (
        db.query(AccessLog)
        .options(joinedload(AccessLog.member), joinedload(AccessLog.staff))
        .order_by(AccessLog.scan_time.desc(), AccessLog.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return logs, total
