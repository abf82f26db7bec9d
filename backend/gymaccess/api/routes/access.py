"""Front-desk access validation and access log routes."""

from fastapi import APIRouter, Query, Request

from gymaccess.core.rate_limit import limiter
from gymaccess.core.rbac import RequireStaff
from gymaccess.core.responses import paginated_response
from gymaccess.db.session import DbSession
from gymaccess.schemas.access import ValidateAccessRequest
from gymaccess.services.access_service import (
    AccessValidationService, access_log_to_dict, list_access_logs,
)

router = APIRouter()


@router.post("/validate")
@limiter.limit("120/minute")
def validate_access(request: Request, data: ValidateAccessRequest, db: DbSession, current: RequireStaff):
    """Validate a scanned QR token. Denials are 200 responses with access=false."""
    return AccessValidationService(db).validate(data.qr_code, staff_id=current.id)


@router.get("/logs")
@limiter.limit("60/minute")
def get_access_logs(
    request: Request,
    db: DbSession,
    current: RequireStaff,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
):
    logs, total = list_access_logs(db, page=page, limit=limit)
    return paginated_response("logs", [access_log_to_dict(log) for log in logs], total, page, limit)
