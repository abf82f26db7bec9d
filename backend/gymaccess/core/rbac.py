"""Role-Based Access Control (RBAC) utilities.

Two token audiences exist: ``staff`` (roles admin and staff) and ``member``
(role member). Staff tokens are re-checked against the database on every
request so that deactivating an account takes effect before the token
expires. Member tokens are stateless.
"""

import logging
from typing import Annotated, Optional

from fastapi import Depends, Request

from gymaccess.core.errors import ApiError, ErrorKind
from gymaccess.core.security import MEMBER_AUDIENCE, STAFF_AUDIENCE, decode_access_token
from gymaccess.db.session import DbSession
from gymaccess.models.staff import Staff, StaffRole

logger = logging.getLogger("auth")

MEMBER_ROLE = "member"


class TokenData:
    """Decoded token data.

    Attributes:
        principal_id: Staff id or member id, depending on the audience.
        email: Email address at the time the token was issued.
        role: "admin", "staff" or "member".
        audience: "staff" or "member".
    """

    def __init__(self, principal_id: int, email: str, role: str, audience: str):
        self.principal_id = principal_id
        self.id = principal_id
        self.email = email
        self.role = role
        self.audience = audience

    @property
    def is_staff(self) -> bool:
        return self.audience == STAFF_AUDIENCE

    @property
    def is_admin(self) -> bool:
        return self.is_staff and self.role == StaffRole.ADMIN.value

    @property
    def is_member(self) -> bool:
        return self.audience == MEMBER_AUDIENCE


def _bearer_token(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        token = auth_header.split(" ", 1)[1].strip()
        return token or None
    return None


def get_current_principal(request: Request, db: DbSession) -> TokenData:
    """Resolve the caller from the Authorization: Bearer header."""
    token = _bearer_token(request)
    if token is None:
        raise ApiError(
            ErrorKind.AUTHENTICATION,
            "Access token required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = decode_access_token(token)
    if payload is None:
        raise ApiError(ErrorKind.FORBIDDEN, "Invalid or expired token")

    audience = payload.get("aud")
    role = payload.get("role")
    try:
        principal_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise ApiError(ErrorKind.FORBIDDEN, "Invalid or expired token")

    if audience == STAFF_AUDIENCE:
        if role not in {r.value for r in StaffRole}:
            raise ApiError(ErrorKind.FORBIDDEN, "Invalid or expired token")
        staff = db.get(Staff, principal_id)
        if staff is None:
            raise ApiError(ErrorKind.AUTHENTICATION, "Invalid credentials")
        if not staff.is_active:
            logger.warning(f"Rejected token for deactivated staff ID: {principal_id}")
            raise ApiError(ErrorKind.AUTHENTICATION, "Account is deactivated")
        # Role changes apply immediately as well
        role = staff.role.value
    elif audience == MEMBER_AUDIENCE:
        if role != MEMBER_ROLE:
            raise ApiError(ErrorKind.FORBIDDEN, "Invalid or expired token")
    else:
        raise ApiError(ErrorKind.FORBIDDEN, "Invalid or expired token")

    return TokenData(
        principal_id=principal_id,
        email=payload.get("email", ""),
        role=role,
        audience=audience,
    )


CurrentPrincipal = Annotated[TokenData, Depends(get_current_principal)]


def require_staff(current: CurrentPrincipal) -> TokenData:
    if not current.is_staff:
        raise ApiError(ErrorKind.FORBIDDEN, "Staff access required")
    return current


def require_admin(current: CurrentPrincipal) -> TokenData:
    if not current.is_admin:
        raise ApiError(ErrorKind.FORBIDDEN, "Admin access required")
    return current


def require_member(current: CurrentPrincipal) -> TokenData:
    if not current.is_member:
        raise ApiError(ErrorKind.FORBIDDEN, "Access denied")
    return current


# Common role dependencies
RequireStaff = Annotated[TokenData, Depends(require_staff)]
RequireAdmin = Annotated[TokenData, Depends(require_admin)]
RequireMember = Annotated[TokenData, Depends(require_member)]


def ensure_self_or_staff(current: TokenData, member_id: int) -> None:
    """Members may only touch their own records; staff may touch any."""
    if current.is_staff:
        return
    if current.principal_id != member_id:
        raise ApiError(ErrorKind.FORBIDDEN, "Access denied")
