"""Public leaderboard."""

from typing import Literal

from fastapi import APIRouter, Query, Request

from gymaccess.core.rate_limit import limiter
from gymaccess.db.session import DbSession
from gymaccess.services.gamification_service import GamificationService

router = APIRouter()


@router.get("")
@limiter.limit("60/minute")
def get_leaderboard(
    request: Request,
    db: DbSession,
    type: Literal["all", "weekly", "monthly"] = "all",
    limit: int = Query(50, ge=1, le=100),
):
    """Members ranked by all-time points; weekly/monthly only admit recent visitors."""
    return GamificationService(db).leaderboard(board_type=type, limit=limit)
