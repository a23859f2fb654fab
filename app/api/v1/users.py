"""Acting-account endpoints: the account itself and its activity feed."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user
from app.database import get_db
from app.models import User
from app.models.base import as_utc
from app.schemas.common import APIResponse
from app.schemas.user import ActivityItem, UserResponse
from app.services.activity_service import get_activity_service

router = APIRouter()


@router.get("", response_model=APIResponse[UserResponse])
async def current_account(current_user: User = Depends(get_current_user)):
    """Return the acting account."""
    return APIResponse(data=UserResponse.model_validate(current_user))


@router.get("/activity", response_model=APIResponse[list[ActivityItem]])
async def recent_activity(
    limit: int = Query(10, ge=1),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Latest activity of the current user, newest first; at most 50 entries."""
    entries = await get_activity_service().recent(db, current_user, limit)
    return APIResponse(
        data=[
            ActivityItem(
                id=entry.id,
                action=entry.action,
                title=entry.title,
                description=entry.description,
                icon=entry.icon,
                timestamp=as_utc(entry.created_at),
            )
            for entry in entries
        ]
    )
