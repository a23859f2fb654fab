"""Pydantic schemas for request/response validation."""

from app.schemas.auth import (
    ChangePasswordRequest,
    ChannelAuthRequest,
    ForgotPasswordRequest,
    LoginRequest,
    RegisterRequest,
    ResendVerificationRequest,
    ResetPasswordRequest,
    TokenResponse,
    TwoFactorConfirmRequest,
    TwoFactorDisableRequest,
    TwoFactorSetupResponse,
    TwoFactorStatus,
    UpdateProfileRequest,
    VerifyEmailRequest,
)
from app.schemas.common import APIResponse, PaginationMeta
from app.schemas.setting import (
    SettingEntry,
    SettingsUpdateRequest,
    SettingsUpdateResult,
    UpdatedSetting,
)
from app.schemas.user import (
    ActivityItem,
    AdminUserCreate,
    AdminUserUpdate,
    BulkAction,
    BulkActionRequest,
    UserFilters,
    UserResponse,
    UserStats,
)

__all__ = [
    # Auth
    "ChangePasswordRequest",
    "ChannelAuthRequest",
    "ForgotPasswordRequest",
    "LoginRequest",
    "RegisterRequest",
    "ResendVerificationRequest",
    "ResetPasswordRequest",
    "TokenResponse",
    "TwoFactorConfirmRequest",
    "TwoFactorDisableRequest",
    "TwoFactorSetupResponse",
    "TwoFactorStatus",
    "UpdateProfileRequest",
    "VerifyEmailRequest",
    # Common
    "APIResponse",
    "PaginationMeta",
    # Setting
    "SettingEntry",
    "SettingsUpdateRequest",
    "SettingsUpdateResult",
    "UpdatedSetting",
    # User
    "ActivityItem",
    "AdminUserCreate",
    "AdminUserUpdate",
    "BulkAction",
    "BulkActionRequest",
    "UserFilters",
    "UserResponse",
    "UserStats",
]
