"""API v1 router aggregator."""

from fastapi import APIRouter

from app.api.v1 import admin_users, auth, broadcasting, profile, settings, two_factor, users

api_router = APIRouter(tags=["API v1"])

# Include all API routers
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(users.router, prefix="/user", tags=["User"])
api_router.include_router(profile.router, prefix="/profile", tags=["Profile"])
api_router.include_router(two_factor.router, prefix="/2fa", tags=["Two-Factor"])
api_router.include_router(settings.public_router, prefix="/settings", tags=["Settings"])
api_router.include_router(broadcasting.router, prefix="/broadcasting", tags=["Broadcasting"])
api_router.include_router(admin_users.router, prefix="/admin/users", tags=["Admin Users"])
api_router.include_router(settings.admin_router, prefix="/admin/settings", tags=["Admin Settings"])
