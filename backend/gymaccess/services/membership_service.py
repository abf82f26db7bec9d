"""Membership lifecycle: assignment, deletion, validity and expiry sweeps."""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from gymaccess.core.clock import local_now
from gymaccess.core.errors import bad_request, not_found
from gymaccess.core.responses import isoformat
from gymaccess.models.member import Member
from gymaccess.models.membership import Membership, MembershipStatus, MembershipType

logger = logging.getLogger(__name__)


def status_for(expiration_date: datetime, now: datetime) -> MembershipStatus:
    return MembershipStatus.ACTIVE if expiration_date > now else MembershipStatus.EXPIRED


def active_membership(db: Session, member_id: int, now: Optional[datetime] = None) -> Optional[Membership]:
    """The authoritative membership: still valid, latest expiration first."""
    now = now or local_now()
    return (
        db.query(Membership)
        .filter(
            Membership.member_id == member_id,
            Membership.status == MembershipStatus.ACTIVE,
            Membership.expiration_date > now,
        )
        .order_by(Membership.expiration_date.desc())
        .first()
    )


def expire_lapsed_for_member(db: Session, member_id: int, now: Optional[datetime] = None) -> int:
    """Flip one member's lapsed ACTIVE rows to EXPIRED. Caller commits."""
    now = now or local_now()
    result = db.execute(
        update(Membership)
        .where(
            Membership.member_id == member_id,
            Membership.status == MembershipStatus.ACTIVE,
            Membership.expiration_date <= now,
        )
        .values(status=MembershipStatus.EXPIRED)
        .execution_options(synchronize_session="fetch")
    )
    return result.rowcount or 0


def expire_lapsed_memberships(db: Session, now: Optional[datetime] = None) -> int:
    """Blanket sweep across all members, run periodically from the lifespan task."""
    now = now or local_now()
    result = db.execute(
        update(Membership)
        .where(
            Membership.status == MembershipStatus.ACTIVE,
            Membership.expiration_date <= now,
        )
        .values(status=MembershipStatus.EXPIRED)
        .execution_options(synchronize_session=False)
    )
    db.commit()
    expired = result.rowcount or 0
    if expired:
        logger.info(f"Membership sweep: {expired} memberships marked EXPIRED")
    return expired


def membership_to_dict(membership: Membership) -> Dict[str, Any]:
    return {
        "id": membership.id,
        "member_id": membership.member_id,
        "membership_type": membership.membership_type.value,
        "purchase_date": isoformat(membership.purchase_date),
        "expiration_date": isoformat(membership.expiration_date),
        "status": membership.status.value,
        "created_at": isoformat(membership.created_at),
    }


def create_membership(
    db: Session,
    member_id: int,
    membership_type: MembershipType,
    purchase_date: datetime,
    expiration_date: datetime,
    now: Optional[datetime] = None,
) -> Membership:
    """Assign a membership; status is derived from the expiration date."""
    now = now or local_now()
    if expiration_date <= purchase_date:
        raise bad_request("expiration_date must be after purchase_date")

    member = db.get(Member, member_id)
    if member is None:
        raise not_found("Member")

    membership = Membership(
        member_id=member_id,
        membership_type=membership_type,
        purchase_date=purchase_date,
        expiration_date=expiration_date,
        status=status_for(expiration_date, now),
    )
    db.add(membership)
    db.commit()
    db.refresh(membership)
    logger.info(
        f"Membership {membership.id} ({membership_type.value}) assigned to member {member_id}, "
        f"expires {expiration_date.isoformat()}"
    )
    return membership


def delete_membership(db: Session, membership_id: int) -> Dict[str, Any]:
    membership = db.get(Membership, membership_id)
    if membership is None:
        raise not_found("Membership")

    summary = {
        "id": membership.id,
        "member_name": membership.member.full_name,
        "membership_type": membership.membership_type.value,
    }
    db.delete(membership)
    db.commit()
    logger.info(f"Membership {membership_id} deleted")
    return summary
