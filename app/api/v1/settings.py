"""Application settings API endpoints.

Admin routes see full rows; the public and theme routes expose only
settings flagged as public.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_super_admin
from app.database import get_db
from app.models import User
from app.schemas.common import APIResponse
from app.schemas.setting import SettingsUpdateRequest
from app.services.setting_service import get_setting_service

admin_router = APIRouter()
public_router = APIRouter()


@admin_router.get("", response_model=APIResponse[dict])
async def all_settings(
    admin: User = Depends(require_super_admin),
    db: AsyncSession = Depends(get_db),
):
    """All settings keyed by group."""
    return APIResponse(data=await get_setting_service().get_all_grouped(db))


@admin_router.put("")
async def update_settings(
    body: SettingsUpdateRequest,
    admin: User = Depends(require_super_admin),
    db: AsyncSession = Depends(get_db),
):
    """Update several settings at once.

    Entries that fail are reported in ``errors``; the rest are still saved
    and returned in ``data`` with a 422 status.
    """
    result = await get_setting_service().set_many(db, body.settings)

    if result.is_partial_failure:
        payload = APIResponse(
            status="error",
            data=result.updated,
            errors=result.errors,
            message="Some settings could not be updated",
        )
        return JSONResponse(status_code=422, content=payload.model_dump(mode="json"))

    payload = APIResponse(data=result.updated, message="Settings updated successfully")
    return JSONResponse(status_code=200, content=payload.model_dump(mode="json"))


@admin_router.post("/reset", response_model=APIResponse[dict])
async def reset_settings(
    admin: User = Depends(require_super_admin),
    db: AsyncSession = Depends(get_db),
):
    """Replace every setting with the built-in defaults."""
    count = await get_setting_service().reset_to_defaults(db)
    return APIResponse(data={"count": count}, message="Settings reset to defaults")


@admin_router.get("/{group}", response_model=APIResponse[list[dict]])
async def settings_by_group(
    group: str,
    admin: User = Depends(require_super_admin),
    db: AsyncSession = Depends(get_db),
):
    """Settings of one group; a group with no settings yields an empty list."""
    return APIResponse(data=await get_setting_service().get_by_group(db, group))


@public_router.get("/public", response_model=APIResponse[dict])
async def public_settings(db: AsyncSession = Depends(get_db)):
    """Settings safe for anonymous callers, such as whether registration is open."""
    return APIResponse(data=await get_setting_service().get_public(db))


@public_router.get("/theme", response_model=APIResponse[dict])
async def theme_settings(db: AsyncSession = Depends(get_db)):
    """Settings the frontend needs to brand itself; same subset as /public."""
    return APIResponse(data=await get_setting_service().get_public(db))
