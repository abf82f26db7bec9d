"""API routes."""

from fastapi import APIRouter

from gymaccess.api.routes import (
    access, admin, auth, leaderboard, members, memberships, user,
)

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
api_router.include_router(access.router, prefix="/access", tags=["access"])
api_router.include_router(members.router, prefix="/members", tags=["members"])
api_router.include_router(memberships.router, prefix="/memberships", tags=["memberships"])
api_router.include_router(user.router, prefix="/user", tags=["user", "gamification"])
api_router.include_router(leaderboard.router, prefix="/leaderboard", tags=["gamification"])
