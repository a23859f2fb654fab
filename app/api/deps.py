"""Shared route dependencies: authentication, roles and collaborators."""

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.exceptions import ForbiddenException, RegistrationDisabledException, UnauthorizedException
from app.models import User
from app.services.notification_service import Notifier, get_notifier
from app.services.setting_service import get_setting_service
from app.services.storage_service import StorageService, get_storage_service
from app.services.token_store import ResolvedToken, get_token_store

ACCESS_TOKEN_COOKIE = "access_token"


def _extract_token(request: Request, authorization: str | None) -> str | None:
    """Bearer header first, then the access token cookie."""
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization.split(" ", 1)[1].strip()
        if token:
            return token
    return request.cookies.get(ACCESS_TOKEN_COOKIE)


async def get_current_auth(
    request: Request,
    authorization: str | None = Header(default=None),
    db: AsyncSession = Depends(get_db),
) -> ResolvedToken:
    """Resolve the presented token to its account and token row.

    Raises:
        UnauthorizedException: If the token is missing, invalid, expired or revoked
    """
    token = _extract_token(request, authorization)
    if not token:
        raise UnauthorizedException()

    resolved = await get_token_store().resolve(db, token)
    if resolved is None:
        raise UnauthorizedException("Invalid or expired token")
    return resolved


async def get_current_user(auth: ResolvedToken = Depends(get_current_auth)) -> User:
    """The acting account."""
    return auth.user


async def require_super_admin(current: User = Depends(get_current_user)) -> User:
    """Ensure the acting account is a super admin.

    Raises:
        ForbiddenException: If the account lacks the super-admin role
    """
    if not current.is_super_admin:
        raise ForbiddenException("Super admin access required")
    return current


async def require_registration_open(db: AsyncSession = Depends(get_db)) -> None:
    """Refuse registration while it is switched off.

    Runs as a route dependency so it is decided before the request body is
    validated.

    Raises:
        RegistrationDisabledException: If the registration_enabled setting is off
    """
    if not await get_setting_service().get(db, "registration_enabled", True):
        raise RegistrationDisabledException()


def client_ip(request: Request) -> str | None:
    """Caller address recorded in the activity log."""
    return request.client.host if request.client else None


def get_notifier_dep() -> Notifier:
    return get_notifier()


def get_storage_dep() -> StorageService:
    return get_storage_service()
