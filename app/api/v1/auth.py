"""Authentication API endpoints."""

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import (
    ACCESS_TOKEN_COOKIE,
    client_ip,
    get_current_auth,
    get_current_user,
    get_notifier_dep,
    require_registration_open,
)
from app.config import settings
from app.database import get_db
from app.models import User
from app.schemas.auth import (
    ForgotPasswordRequest,
    LoginRequest,
    RegisterRequest,
    ResendVerificationRequest,
    ResetPasswordRequest,
    TokenResponse,
    VerifyEmailRequest,
)
from app.schemas.common import APIResponse
from app.schemas.user import UserResponse
from app.services.auth_service import get_auth_service
from app.services.notification_service import Notifier
from app.services.token_store import IssuedToken, ResolvedToken

router = APIRouter()


def _set_token_cookie(response: Response, issued: IssuedToken) -> None:
    """Set an HttpOnly cookie for web clients."""
    response.set_cookie(
        key=ACCESS_TOKEN_COOKIE,
        value=issued.token,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        max_age=issued.expires_in,
    )


def _token_response(user: User, issued: IssuedToken) -> TokenResponse:
    return TokenResponse(
        user=UserResponse.model_validate(user),
        token=issued.token,
        expires_in=issued.expires_in,
    )


@router.post("/register", status_code=201, dependencies=[Depends(require_registration_open)])
async def register(
    body: RegisterRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier_dep),
):
    """Register a new account.

    When email verification is required no token is issued until the
    address is confirmed.
    """
    result = await get_auth_service().register(db, body, notifier, client_ip(request))

    if result.token is None:
        payload = APIResponse(
            data={"user": UserResponse.model_validate(result.user), "verification_required": True},
            message="Registration successful. Please check your email to verify your account.",
        )
        return JSONResponse(status_code=201, content=payload.model_dump(mode="json"))

    payload = APIResponse(
        data=_token_response(result.user, result.token),
        message="Registration successful.",
    )
    response = JSONResponse(status_code=201, content=payload.model_dump(mode="json"))
    _set_token_cookie(response, result.token)
    return response


@router.post("/login", response_model=APIResponse[TokenResponse])
async def login(
    body: LoginRequest,
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    """Authenticate and return a bearer token."""
    user, issued = await get_auth_service().login(db, body.email, body.password, client_ip(request))
    _set_token_cookie(response, issued)

    return APIResponse(
        data=_token_response(user, issued),
        message=f"Welcome back, {user.name}!",
    )


@router.post("/logout", response_model=APIResponse[None])
async def logout(
    request: Request,
    response: Response,
    auth: ResolvedToken = Depends(get_current_auth),
    db: AsyncSession = Depends(get_db),
):
    """Revoke the token used for this request; other sessions stay signed in."""
    await get_auth_service().logout(db, auth, client_ip(request))
    response.delete_cookie(
        key=ACCESS_TOKEN_COOKIE,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )
    return APIResponse(message="Logged out successfully")


@router.post("/refresh", response_model=APIResponse[TokenResponse])
async def refresh(
    response: Response,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Replace every token of the account with a single new one."""
    issued = await get_auth_service().refresh(db, current_user)
    _set_token_cookie(response, issued)
    return APIResponse(data=_token_response(current_user, issued), message="Token refreshed")


@router.post("/verify-email", response_model=APIResponse[UserResponse])
async def verify_email(body: VerifyEmailRequest, db: AsyncSession = Depends(get_db)):
    """Confirm an email address from a verification link."""
    user = await get_auth_service().verify_email(db, body.token)
    return APIResponse(data=UserResponse.model_validate(user), message="Email verified successfully.")


@router.post("/resend-verification", response_model=APIResponse[None])
async def resend_verification(
    body: ResendVerificationRequest,
    db: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier_dep),
):
    """Resend the verification link.

    Always returns success to prevent email enumeration.
    """
    await get_auth_service().resend_verification(db, body.email, notifier)
    return APIResponse(
        message="If the account exists and is unverified, a new verification link has been sent."
    )


@router.post("/forgot-password", response_model=APIResponse[None])
async def forgot_password(
    body: ForgotPasswordRequest,
    db: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier_dep),
):
    """Request a password reset email.

    Always returns success to prevent email enumeration.
    """
    await get_auth_service().forgot_password(db, body.email, notifier)
    return APIResponse(
        message="If an account exists with this email, you will receive a password reset link."
    )


@router.post("/reset-password", response_model=APIResponse[None])
async def reset_password(body: ResetPasswordRequest, db: AsyncSession = Depends(get_db)):
    """Reset the password using a token from the reset email."""
    await get_auth_service().reset_password(db, body)
    return APIResponse(message="Your password has been reset. Please log in with your new password.")
