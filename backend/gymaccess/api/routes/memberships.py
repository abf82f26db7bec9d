"""Membership assignment routes."""

from fastapi import APIRouter, Request, status

from gymaccess.core.rate_limit import limiter
from gymaccess.core.rbac import RequireStaff
from gymaccess.db.session import DbSession
from gymaccess.schemas.membership import MembershipCreate
from gymaccess.services.membership_service import (
    create_membership, delete_membership, membership_to_dict,
)

router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def assign_membership(request: Request, data: MembershipCreate, db: DbSession, current: RequireStaff):
    membership = create_membership(
        db,
        member_id=data.member_id,
        membership_type=data.membership_type,
        purchase_date=data.purchase_date,
        expiration_date=data.expiration_date,
    )
    return membership_to_dict(membership)


@router.delete("/{membership_id}")
@limiter.limit("30/minute")
def remove_membership(request: Request, membership_id: int, db: DbSession, current: RequireStaff):
    deleted = delete_membership(db, membership_id)
    return {"message": "Membership deleted successfully", "membership": deleted}
