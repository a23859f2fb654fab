"""Profile API endpoints for the acting account."""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import client_ip, get_current_user, get_notifier_dep, get_storage_dep
from app.database import get_db
from app.models import User
from app.schemas.auth import ChangePasswordRequest, UpdateProfileRequest
from app.schemas.common import APIResponse
from app.schemas.user import UserResponse
from app.services.auth_service import get_auth_service
from app.services.notification_service import Notifier
from app.services.profile_service import get_profile_service
from app.services.storage_service import StorageService

router = APIRouter()


@router.get("", response_model=APIResponse[UserResponse])
async def get_profile(current_user: User = Depends(get_current_user)):
    """Get the current user's profile."""
    return APIResponse(data=UserResponse.model_validate(current_user))


@router.put("", response_model=APIResponse[UserResponse])
async def update_profile(
    body: UpdateProfileRequest,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier_dep),
):
    """Update name, email, phone or bio."""
    user = await get_profile_service().update(db, current_user, body, notifier, client_ip(request))
    return APIResponse(data=UserResponse.model_validate(user), message="Profile updated successfully")


@router.put("/password", response_model=APIResponse[None])
async def change_password(
    body: ChangePasswordRequest,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Change the password; every session including this one must log in again."""
    await get_auth_service().change_password(db, current_user, body, client_ip(request))
    return APIResponse(message="Password changed successfully. Please log in again.")


@router.delete("/image", response_model=APIResponse[UserResponse])
async def delete_profile_image(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    storage: StorageService = Depends(get_storage_dep),
):
    """Remove the profile image."""
    user = await get_profile_service().delete_image(db, current_user, storage)
    return APIResponse(data=UserResponse.model_validate(user), message="Profile image removed")
