"""Member management routes for front-desk staff."""

from fastapi import APIRouter, Query, Request, status

from gymaccess.core.errors import bad_request
from gymaccess.core.rate_limit import limiter
from gymaccess.core.rbac import RequireStaff
from gymaccess.db.session import DbSession
from gymaccess.schemas.member import MemberCreate, MemberUpdate
from gymaccess.services.member_service import (
    create_member, get_member, list_members, member_to_dict, rotate_qr_token,
    search_members, update_member,
)
from gymaccess.services.qr_service import qr_data_url

router = APIRouter()


def _qr_payload(member) -> dict:
    return {
        "qr_code": member.qr_code,
        "qr_code_image": qr_data_url(member.qr_code),
        "member": {
            "first_name": member.first_name,
            "last_name": member.last_name,
            "email": member.email,
        },
    }


@router.get("")
@limiter.limit("60/minute")
def get_members(request: Request, db: DbSession, current: RequireStaff):
    """All members with their membership history."""
    return [member_to_dict(m, include_memberships=True) for m in list_members(db)]


@router.get("/search")
@limiter.limit("60/minute")
def search(request: Request, db: DbSession, current: RequireStaff, query: str = Query("", max_length=100)):
    """Case-insensitive search on name, email and QR token."""
    query = query.strip()
    if not query:
        raise bad_request("Search query is required")
    return [member_to_dict(m, include_memberships=True) for m in search_members(db, query)]


@router.post("", status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def register_member(request: Request, data: MemberCreate, db: DbSession, current: RequireStaff):
    member = create_member(
        db,
        username=data.username,
        first_name=data.first_name,
        last_name=data.last_name,
        email=data.email,
        phone_number=data.phone_number,
    )
    return member_to_dict(member)


@router.put("/{member_id}")
@limiter.limit("30/minute")
def edit_member(request: Request, member_id: int, data: MemberUpdate, db: DbSession, current: RequireStaff):
    changes = data.model_dump(exclude_unset=True)
    # Only phone_number may be cleared
    changes = {k: v for k, v in changes.items() if v is not None or k == "phone_number"}
    member = update_member(db, member_id, changes)
    return member_to_dict(member, include_memberships=True)


@router.get("/{member_id}/qr-code")
@limiter.limit("60/minute")
def get_member_qr_code(request: Request, member_id: int, db: DbSession, current: RequireStaff):
    return _qr_payload(get_member(db, member_id))


@router.post("/{member_id}/qr-code/rotate")
@limiter.limit("10/minute")
def rotate_member_qr_code(request: Request, member_id: int, db: DbSession, current: RequireStaff):
    """Issue a new QR token. The old card stops working immediately."""
    return _qr_payload(rotate_qr_token(db, member_id))
