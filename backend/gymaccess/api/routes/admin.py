"""Admin routes: staff accounts, users overview and badge awards."""

from fastapi import APIRouter, Request, status

from gymaccess.core.rate_limit import limiter
from gymaccess.core.rbac import RequireAdmin
from gymaccess.db.session import DbSession
from gymaccess.schemas.gamification import BadgeAward
from gymaccess.schemas.staff import StaffCreate, StaffStatusUpdate
from gymaccess.services.gamification_service import GamificationService
from gymaccess.services.staff_service import (
    create_staff, list_staff, set_staff_active, staff_to_dict, users_overview,
)

router = APIRouter()


# ===================== Staff =====================

@router.post("/staff/register", status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def register_staff(request: Request, data: StaffCreate, db: DbSession, current: RequireAdmin):
    """Create a staff or admin account."""
    staff = create_staff(
        db,
        first_name=data.first_name,
        last_name=data.last_name,
        email=data.email,
        password=data.password,
        role=data.role,
        created_by=current.id,
    )
    return {"message": "Staff registered successfully", "staff": staff_to_dict(staff)}


@router.get("/staff")
@limiter.limit("60/minute")
def get_staff(request: Request, db: DbSession, current: RequireAdmin):
    """All staff accounts, newest first."""
    return [staff_to_dict(s) for s in list_staff(db)]


@router.patch("/staff/{staff_id}/status")
@limiter.limit("30/minute")
def update_staff_status(
    request: Request,
    staff_id: int,
    data: StaffStatusUpdate,
    db: DbSession,
    current: RequireAdmin,
):
    staff = set_staff_active(db, staff_id, data.is_active, acting_staff_id=current.id)
    return {
        "message": f"Staff {'activated' if data.is_active else 'deactivated'} successfully",
        "staff": staff_to_dict(staff),
    }


@router.get("/users")
@limiter.limit("60/minute")
def get_users(request: Request, db: DbSession, current: RequireAdmin):
    return users_overview(db)


# ===================== Badges =====================

@router.get("/badges")
@limiter.limit("60/minute")
def get_badges(request: Request, db: DbSession, current: RequireAdmin):
    """Badge catalog."""
    return GamificationService(db).list_badges()


@router.post("/badges/award")
@limiter.limit("30/minute")
def award_badge(request: Request, data: BadgeAward, db: DbSession, current: RequireAdmin):
    """Award a badge to a member, credit its points and notify them."""
    result = GamificationService(db).award_badge(data.member_id, data.badge_id)
    return {"message": "Badge awarded successfully", **result}
