"""Staff accounts: registration, listing, activation and the users overview."""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from gymaccess.core.errors import bad_request, conflict, not_found
from gymaccess.core.responses import isoformat
from gymaccess.core.security import get_password_hash
from gymaccess.models.member import Member
from gymaccess.models.staff import Staff, StaffRole

logger = logging.getLogger(__name__)


def staff_to_dict(staff: Staff) -> Dict[str, Any]:
    return {
        "id": staff.id,
        "first_name": staff.first_name,
        "last_name": staff.last_name,
        "email": staff.email,
        "role": staff.role.value,
        "is_active": staff.is_active,
        "created_at": isoformat(staff.created_at),
        "updated_at": isoformat(staff.updated_at),
    }


def create_staff(
    db: Session,
    first_name: str,
    last_name: str,
    email: str,
    password: str,
    role: StaffRole = StaffRole.STAFF,
    created_by: Optional[int] = None,
) -> Staff:
    email = email.lower()
    if db.query(Staff.id).filter(Staff.email == email).first():
        raise conflict("Staff with this email already exists")

    staff = Staff(
        first_name=first_name,
        last_name=last_name,
        email=email,
        password_hash=get_password_hash(password),
        role=role,
        created_by=created_by,
    )
    db.add(staff)
    db.commit()
    db.refresh(staff)
    logger.info(f"Staff registered: {staff.email} (ID: {staff.id}, role: {staff.role.value}) by {created_by}")
    return staff


def list_staff(db: Session) -> List[Staff]:
    return db.query(Staff).order_by(Staff.created_at.desc(), Staff.id.desc()).all()


def set_staff_active(db: Session, staff_id: int, is_active: bool, acting_staff_id: int) -> Staff:
    """Activate or deactivate a staff account. Admins cannot change their own."""
    if staff_id == acting_staff_id:
        raise bad_request("Cannot deactivate your own account")

    staff = db.get(Staff, staff_id)
    if staff is None:
        raise not_found("Staff")

    staff.is_active = is_active
    db.commit()
    db.refresh(staff)
    logger.info(f"Staff {staff_id} {'activated' if is_active else 'deactivated'} by {acting_staff_id}")
    return staff


def users_overview(db: Session) -> Dict[str, Any]:
    staff = list_staff(db)
    members = db.query(Member).order_by(Member.created_at.desc(), Member.id.desc()).all()
    return {
        "staff": [staff_to_dict(s) for s in staff],
        "members": [
            {
                "id": m.id,
                "username": m.username,
                "first_name": m.first_name,
                "last_name": m.last_name,
                "email": m.email,
                "created_at": isoformat(m.created_at),
            }
            for m in members
        ],
        "staff_count": len(staff),
        "member_count": len(members),
    }
