"""Member portal routes: dashboard, QR code, calendar, profile, stats, notifications."""

from typing import Optional

from fastapi import APIRouter, Query, Request

from gymaccess.core.rate_limit import limiter
from gymaccess.core.rbac import CurrentPrincipal, RequireMember, ensure_self_or_staff
from gymaccess.db.session import DbSession
from gymaccess.schemas.gamification import ProfileUpdate
from gymaccess.services.dashboard_service import activity_calendar, member_dashboard
from gymaccess.services.gamification_service import GamificationService, notification_to_dict
from gymaccess.services.member_service import get_member
from gymaccess.services.qr_service import qr_data_url

router = APIRouter()


# ===================== Self-service =====================

@router.get("/dashboard")
@limiter.limit("60/minute")
def get_dashboard(request: Request, db: DbSession, current: RequireMember):
    return member_dashboard(db, current.id)


@router.get("/qr-code")
@limiter.limit("60/minute")
def get_own_qr_code(request: Request, db: DbSession, current: RequireMember):
    member = get_member(db, current.id)
    return {
        "qr_code": member.qr_code,
        "qr_code_image": qr_data_url(member.qr_code),
    }


@router.get("/activity-calendar")
@limiter.limit("60/minute")
def get_activity_calendar(
    request: Request,
    db: DbSession,
    current: RequireMember,
    year: Optional[int] = Query(None, ge=2000, le=2100),
    month: Optional[int] = Query(None, ge=1, le=12),
):
    """Granted visits per ISO date for one month (defaults to the current one)."""
    return activity_calendar(db, current.id, year=year, month=month)


# ===================== Profile & stats =====================

@router.get("/profile/{member_id}")
@limiter.limit("60/minute")
def get_profile(request: Request, member_id: int, db: DbSession, current: CurrentPrincipal):
    return GamificationService(db).profile(member_id)


@router.patch("/profile/{member_id}")
@limiter.limit("30/minute")
def update_profile(
    request: Request,
    member_id: int,
    data: ProfileUpdate,
    db: DbSession,
    current: CurrentPrincipal,
):
    ensure_self_or_staff(current, member_id)
    avatar_url = str(data.avatar_url) if data.avatar_url else None
    member = GamificationService(db).update_profile(member_id, bio=data.bio, avatar_url=avatar_url)
    return {"message": "Profile updated successfully", "member": member}


@router.get("/stats/{member_id}")
@limiter.limit("60/minute")
def get_stats(request: Request, member_id: int, db: DbSession, current: CurrentPrincipal):
    return GamificationService(db).stats(member_id)


# ===================== Notifications =====================

@router.get("/notifications/{member_id}")
@limiter.limit("60/minute")
def get_notifications(
    request: Request,
    member_id: int,
    db: DbSession,
    current: CurrentPrincipal,
    unread_only: bool = False,
):
    ensure_self_or_staff(current, member_id)
    return GamificationService(db).notifications(member_id, unread_only=unread_only)


@router.patch("/notifications/{notification_id}/read")
@limiter.limit("60/minute")
def mark_notification_read(request: Request, notification_id: int, db: DbSession, current: RequireMember):
    notification = GamificationService(db).mark_notification_read(notification_id, member_id=current.id)
    return {"message": "Notification marked as read", "notification": notification_to_dict(notification)}
