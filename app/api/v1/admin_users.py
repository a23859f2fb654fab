"""Admin user management API endpoints (super admin only)."""

import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_notifier_dep, get_storage_dep, require_super_admin
from app.database import get_db
from app.models import User
from app.models.base import utcnow
from app.schemas.common import APIResponse, PaginationMeta
from app.schemas.user import (
    AdminUserCreate,
    AdminUserUpdate,
    BulkActionRequest,
    UserFilters,
    UserResponse,
    UserStats,
)
from app.services.notification_service import Notifier
from app.services.storage_service import StorageService
from app.services.user_service import get_user_service

router = APIRouter()

SORT_PATTERN = "^(name|email|role|created_at|updated_at|email_verified_at)$"


def user_filters(
    search: str | None = Query(None),
    role: str | None = Query(None, pattern="^(user|super-admin)$"),
    status: str | None = Query(None, pattern="^(verified|unverified)$"),
    two_factor: str | None = Query(None, pattern="^(enabled|disabled)$"),
    date_from: date | None = Query(None),
    date_to: date | None = Query(None),
) -> UserFilters:
    return UserFilters(
        search=search,
        role=role,
        status=status,
        two_factor=two_factor,
        date_from=date_from,
        date_to=date_to,
    )


@router.get("", response_model=APIResponse[list[UserResponse]])
async def list_users(
    filters: UserFilters = Depends(user_filters),
    sort_by: str = Query("created_at", pattern=SORT_PATTERN),
    sort_direction: str = Query("desc", pattern="^(asc|desc)$"),
    page: int = Query(1, ge=1),
    per_page: int = Query(10, ge=1, le=100),
    admin: User = Depends(require_super_admin),
    db: AsyncSession = Depends(get_db),
):
    """List users with filters, sorting and pagination."""
    users, total = await get_user_service().list_users(
        db, filters, sort_by, sort_direction, page, per_page
    )
    return APIResponse(
        data=[UserResponse.model_validate(user) for user in users],
        pagination=PaginationMeta.build(page, per_page, total, len(users)),
    )


@router.get("/stats", response_model=APIResponse[UserStats])
async def user_stats(
    admin: User = Depends(require_super_admin),
    db: AsyncSession = Depends(get_db),
):
    return APIResponse(data=await get_user_service().stats(db))


@router.get("/export")
async def export_users(
    filters: UserFilters = Depends(user_filters),
    sort_by: str = Query("created_at", pattern=SORT_PATTERN),
    sort_direction: str = Query("desc", pattern="^(asc|desc)$"),
    admin: User = Depends(require_super_admin),
    db: AsyncSession = Depends(get_db),
):
    """Download the filtered user list as CSV."""
    service = get_user_service()
    rows = await service.export_rows(db, filters, sort_by, sort_direction)
    filename = f"users_{utcnow().strftime('%Y-%m-%d_%H-%M-%S')}.csv"

    return StreamingResponse(
        service.iter_csv(rows),
        media_type="text/csv",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "Cache-Control": "no-cache",
        },
    )


@router.post("/bulk-action", response_model=APIResponse[dict])
async def bulk_action(
    body: BulkActionRequest,
    admin: User = Depends(require_super_admin),
    db: AsyncSession = Depends(get_db),
    storage: StorageService = Depends(get_storage_dep),
):
    """Apply one action to several users; the acting admin may not be among them."""
    affected = await get_user_service().bulk_action(db, admin, body, storage)
    return APIResponse(
        data={"action": body.action.value, "affected": affected},
        message=f"Bulk action '{body.action.value}' applied to {affected} users",
    )


@router.post("", response_model=APIResponse[UserResponse], status_code=201)
async def create_user(
    body: AdminUserCreate,
    admin: User = Depends(require_super_admin),
    db: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier_dep),
):
    """Create an account; it must verify its email when verification is required."""
    user = await get_user_service().create_user(db, admin, body, notifier)
    return APIResponse(data=UserResponse.model_validate(user), message="User created successfully")


@router.get("/{user_id}", response_model=APIResponse[UserResponse])
async def get_user(
    user_id: uuid.UUID,
    admin: User = Depends(require_super_admin),
    db: AsyncSession = Depends(get_db),
):
    user = await get_user_service().get_user(db, user_id)
    return APIResponse(data=UserResponse.model_validate(user))


@router.put("/{user_id}", response_model=APIResponse[UserResponse])
async def update_user(
    user_id: uuid.UUID,
    body: AdminUserUpdate,
    admin: User = Depends(require_super_admin),
    db: AsyncSession = Depends(get_db),
):
    user = await get_user_service().update_user(db, admin, user_id, body)
    return APIResponse(data=UserResponse.model_validate(user), message="User updated successfully")


@router.delete("/{user_id}", response_model=APIResponse[None])
async def delete_user(
    user_id: uuid.UUID,
    admin: User = Depends(require_super_admin),
    db: AsyncSession = Depends(get_db),
    storage: StorageService = Depends(get_storage_dep),
):
    """Delete a user; admins cannot delete themselves."""
    await get_user_service().delete_user(db, admin, user_id, storage)
    return APIResponse(message="User deleted successfully")
