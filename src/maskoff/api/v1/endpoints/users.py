"""Profile directory endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Query

from maskoff.api.v1.dependencies import CurrentUserDep, SessionDep
from maskoff.models import UserProfile
from maskoff.schemas.user import UserResponse

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=list[UserResponse])
async def list_users(
    _: CurrentUserDep,
    db: SessionDep,
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
) -> list[UserProfile]:
    """List public profile information for every known user."""
    return (
        db.query(UserProfile)
        .order_by(UserProfile.username)
        .offset(offset)
        .limit(limit)
        .all()
    )


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: CurrentUserDep) -> UserProfile:
    """Return the caller's own profile."""
    return current_user
