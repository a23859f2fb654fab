"""Service layer for business logic."""

from app.services.account_service import AccountService, get_account_service
from app.services.activity_service import ActivityService, get_activity_service
from app.services.auth_service import AuthService, get_auth_service
from app.services.email_service import EmailService, get_email_service
from app.services.notification_service import EmailNotifier, Notifier, get_notifier
from app.services.profile_service import ProfileService, get_profile_service
from app.services.setting_service import SettingService, get_setting_service
from app.services.storage_service import StorageService, get_storage_service
from app.services.token_store import DatabaseTokenStore, TokenStore, get_token_store
from app.services.two_factor_service import TwoFactorService, get_two_factor_service
from app.services.user_service import UserService, get_user_service

__all__ = [
    "AccountService",
    "get_account_service",
    "ActivityService",
    "get_activity_service",
    "AuthService",
    "get_auth_service",
    "EmailService",
    "get_email_service",
    "Notifier",
    "EmailNotifier",
    "get_notifier",
    "ProfileService",
    "get_profile_service",
    "SettingService",
    "get_setting_service",
    "StorageService",
    "get_storage_service",
    "TokenStore",
    "DatabaseTokenStore",
    "get_token_store",
    "TwoFactorService",
    "get_two_factor_service",
    "UserService",
    "get_user_service",
]
