"""Member registration, updates and search."""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from gymaccess.core.errors import conflict, not_found
from gymaccess.core.responses import isoformat
from gymaccess.core.security import get_password_hash
from gymaccess.models.member import Member
from gymaccess.services.membership_service import membership_to_dict
from gymaccess.services.qr_service import generate_qr_token

logger = logging.getLogger(__name__)


def member_to_dict(member: Member, include_memberships: bool = False) -> Dict[str, Any]:
    data = {
        "id": member.id,
        "username": member.username,
        "first_name": member.first_name,
        "last_name": member.last_name,
        "email": member.email,
        "phone_number": member.phone_number,
        "qr_code": member.qr_code,
        "total_points": member.total_points,
        "current_streak": member.current_streak,
        "level": member.level,
        "member_since": isoformat(member.member_since),
        "created_at": isoformat(member.created_at),
    }
    if include_memberships:
        memberships = sorted(member.memberships, key=lambda m: (m.created_at, m.id), reverse=True)
        data["memberships"] = [membership_to_dict(m) for m in memberships]
    return data


def get_member(db: Session, member_id: int) -> Member:
    member = db.get(Member, member_id)
    if member is None:
        raise not_found("Member")
    return member


def _ensure_unique(db: Session, email: str, username: Optional[str], exclude_id: Optional[int] = None) -> None:
    email_query = db.query(Member.id).filter(Member.email == email)
    if exclude_id is not None:
        email_query = email_query.filter(Member.id != exclude_id)
    if email_query.first():
        raise conflict("Member with this email already exists")

    if username is not None:
        username_query = db.query(Member.id).filter(Member.username == username)
        if exclude_id is not None:
            username_query = username_query.filter(Member.id != exclude_id)
        if username_query.first():
            raise conflict("Username is already taken")


def create_member(
    db: Session,
    username: str,
    first_name: str,
    last_name: str,
    email: str,
    phone_number: Optional[str] = None,
    password: Optional[str] = None,
) -> Member:
    """Register a member with a fresh QR token.

    Front-desk registrations pass no password; self-registrations do.
    """
    email = email.lower()
    _ensure_unique(db, email, username)

    member = Member(
        username=username,
        first_name=first_name,
        last_name=last_name,
        email=email,
        phone_number=phone_number,
        qr_code=generate_qr_token(),
        password_hash=get_password_hash(password) if password else None,
    )
    db.add(member)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise conflict("Member with this email or username already exists")
    db.refresh(member)
    logger.info(f"Member registered: {member.email} (ID: {member.id})")
    return member


def update_member(db: Session, member_id: int, changes: Dict[str, Any]) -> Member:
    member = get_member(db, member_id)

    if "email" in changes and changes["email"] is not None:
        changes["email"] = changes["email"].lower()
        _ensure_unique(db, changes["email"], None, exclude_id=member_id)

    for field, value in changes.items():
        setattr(member, field, value)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise conflict("Member with this email already exists")
    db.refresh(member)
    logger.info(f"Member {member_id} updated: {sorted(changes)}")
    return member


def list_members(db: Session) -> List[Member]:
    return (
        db.query(Member)
        .options(selectinload(Member.memberships))
        .order_by(Member.created_at.desc(), Member.id.desc())
        .all()
    )


def search_members(db: Session, query: str) -> List[Member]:
    """Case-insensitive substring match on name, email or QR token."""
    pattern = f"%{query}%"
    return (
        db.query(Member)
        .options(selectinload(Member.memberships))
        .filter(
            or_(
                Member.first_name.ilike(pattern),
                Member.last_name.ilike(pattern),
                Member.email.ilike(pattern),
                Member.qr_code.ilike(pattern),
            )
        )
        .order_by(Member.last_name.asc(), Member.first_name.asc())
        .all()
    )


def rotate_qr_token(db: Session, member_id: int) -> Member:
    """Issue a new QR token; the previous one stops matching immediately."""
    member = get_member(db, member_id)
    member.qr_code = generate_qr_token()
    db.commit()
    db.refresh(member)
    logger.info(f"QR token rotated for member {member_id}")
    return member
