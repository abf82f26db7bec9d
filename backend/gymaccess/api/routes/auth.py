"""Authentication routes."""

import logging

from fastapi import APIRouter, Request, status

from gymaccess.core.config import settings
from gymaccess.core.errors import ApiError, ErrorKind, not_found
from gymaccess.core.rate_limit import limiter
from gymaccess.core.rbac import MEMBER_ROLE, CurrentPrincipal
from gymaccess.core.security import (
    MEMBER_AUDIENCE, STAFF_AUDIENCE, create_access_token, verify_password,
)
from gymaccess.db.session import DbSession
from gymaccess.models.member import Member
from gymaccess.models.staff import Staff
from gymaccess.schemas.auth import AuthResponse, LoginRequest, MemberRegisterRequest
from gymaccess.services.member_service import create_member

logger = logging.getLogger("auth")

router = APIRouter()


def _client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def _member_user(member: Member) -> dict:
    return {
        "id": member.id,
        "username": member.username,
        "first_name": member.first_name,
        "last_name": member.last_name,
        "email": member.email,
        "role": MEMBER_ROLE,
    }


def _member_token(member: Member) -> str:
    return create_access_token(
        data={"sub": str(member.id), "email": member.email, "role": MEMBER_ROLE},
        audience=MEMBER_AUDIENCE,
    )


@router.post("/staff/login", response_model=AuthResponse)
@limiter.limit(settings.login_rate_limit)
def staff_login(request: Request, login_request: LoginRequest, db: DbSession):
    """Authenticate a staff account and return a staff-audience token."""
    client_ip = _client_ip(request)
    email = login_request.email.lower()
    staff = db.query(Staff).filter(Staff.email == email).first()

    if not staff or not verify_password(login_request.password, staff.password_hash):
        logger.warning(f"Failed staff login for email: {email} from IP: {client_ip}")
        raise ApiError(ErrorKind.AUTHENTICATION, "Invalid credentials")
    if not staff.is_active:
        logger.warning(f"Login attempt for deactivated staff: {email} (ID: {staff.id}) from IP: {client_ip}")
        raise ApiError(ErrorKind.AUTHENTICATION, "Account is deactivated")

    logger.info(f"Successful staff login: {staff.email} (ID: {staff.id}, role: {staff.role.value}) from IP: {client_ip}")
    token = create_access_token(
        data={"sub": str(staff.id), "email": staff.email, "role": staff.role.value},
        audience=STAFF_AUDIENCE,
    )
    return AuthResponse(
        access_token=token,
        user={
            "id": staff.id,
            "first_name": staff.first_name,
            "last_name": staff.last_name,
            "email": staff.email,
            "role": staff.role.value,
        },
    )


@router.post("/user/login", response_model=AuthResponse)
@limiter.limit(settings.login_rate_limit)
def member_login(request: Request, login_request: LoginRequest, db: DbSession):
    """Authenticate a member with a portal password."""
    client_ip = _client_ip(request)
    email = login_request.email.lower()
    member = db.query(Member).filter(Member.email == email).first()

    # Members created at the front desk have no password hash
    if not member or not verify_password(login_request.password, member.password_hash):
        logger.warning(f"Failed member login for email: {email} from IP: {client_ip}")
        raise ApiError(ErrorKind.AUTHENTICATION, "Invalid credentials")

    logger.info(f"Successful member login: {member.email} (ID: {member.id}) from IP: {client_ip}")
    return AuthResponse(access_token=_member_token(member), user=_member_user(member))


@router.post("/user/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.login_rate_limit)
def member_register(request: Request, data: MemberRegisterRequest, db: DbSession):
    """Self-registration for the member portal. Returns a member token."""
    member = create_member(
        db,
        username=data.username,
        first_name=data.first_name,
        last_name=data.last_name,
        email=data.email,
        phone_number=data.phone_number,
        password=data.password,
    )
    logger.info(f"Member self-registered: {member.email} (ID: {member.id}) from IP: {_client_ip(request)}")
    return AuthResponse(access_token=_member_token(member), user=_member_user(member))


@router.get("/me")
def get_me(current: CurrentPrincipal, db: DbSession):
    """The principal behind the bearer token."""
    if current.is_staff:
        staff = db.get(Staff, current.id)
        return {
            "id": staff.id,
            "first_name": staff.first_name,
            "last_name": staff.last_name,
            "email": staff.email,
            "role": staff.role.value,
            "audience": current.audience,
        }

    member = db.get(Member, current.id)
    if member is None:
        raise not_found("Member")
    return {**_member_user(member), "audience": current.audience}
