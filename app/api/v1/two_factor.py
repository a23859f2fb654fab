"""Two-factor authentication API endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user
from app.database import get_db
from app.models import User
from app.schemas.auth import (
    TwoFactorConfirmRequest,
    TwoFactorDisableRequest,
    TwoFactorSetupResponse,
    TwoFactorStatus,
)
from app.schemas.common import APIResponse
from app.services.two_factor_service import get_two_factor_service

router = APIRouter()


@router.get("/status", response_model=APIResponse[TwoFactorStatus])
async def status(current_user: User = Depends(get_current_user)):
    return APIResponse(data=get_two_factor_service().status(current_user))


@router.post("/enable", response_model=APIResponse[TwoFactorSetupResponse])
async def enable(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Start setup; the response carries the secret for the authenticator app."""
    setup = await get_two_factor_service().enable(db, current_user)
    return APIResponse(
        data=setup,
        message="Scan the code with your authenticator app, then confirm with a generated code.",
    )


@router.get("/qr-code", response_model=APIResponse[TwoFactorSetupResponse])
async def qr_code(current_user: User = Depends(get_current_user)):
    """Provisioning URI of a pending setup, for rendering as a QR code."""
    return APIResponse(data=get_two_factor_service().provisioning(current_user))


@router.post("/confirm", response_model=APIResponse[TwoFactorStatus])
async def confirm(
    body: TwoFactorConfirmRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    result = await get_two_factor_service().confirm(db, current_user, body.code)
    return APIResponse(data=result, message="Two-factor authentication enabled.")


@router.delete("/enable", response_model=APIResponse[TwoFactorStatus])
async def cancel(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Cancel an unconfirmed setup."""
    result = await get_two_factor_service().cancel(db, current_user)
    return APIResponse(data=result, message="Two-factor setup cancelled.")


@router.delete("/disable", response_model=APIResponse[TwoFactorStatus])
async def disable(
    body: TwoFactorDisableRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    result = await get_two_factor_service().disable(db, current_user, body.password)
    return APIResponse(data=result, message="Two-factor authentication disabled.")
