"""Built-in settings catalog written by a reset to defaults."""

# General Settings
GENERAL_SETTINGS = [
    {"key": "app_name", "value": "Boilerplate", "type": "string",
     "description": "Application name displayed throughout the app", "is_public": True},
    {"key": "app_url", "value": "http://localhost:3000", "type": "string",
     "description": "Base URL of the application", "is_public": True},
    {"key": "timezone", "value": "UTC", "type": "string",
     "description": "Default timezone for the application", "is_public": False},
    {"key": "language", "value": "en", "type": "string",
     "description": "Default language for new users", "is_public": False},
    {"key": "maintenance_mode", "value": "0", "type": "boolean",
     "description": "Enable maintenance mode to restrict access", "is_public": True},
    {"key": "registration_enabled", "value": "1", "type": "boolean",
     "description": "Allow new users to register", "is_public": True},
    {"key": "email_verification", "value": "1", "type": "boolean",
     "description": "Require users to verify their email", "is_public": False},
]

# Security Settings
SECURITY_SETTINGS = [
    {"key": "min_password_length", "value": "8", "type": "integer",
     "description": "Minimum characters required for passwords", "is_public": False},
    {"key": "require_uppercase", "value": "1", "type": "boolean",
     "description": "Require uppercase letters in passwords", "is_public": False},
    {"key": "require_lowercase", "value": "1", "type": "boolean",
     "description": "Require lowercase letters in passwords", "is_public": False},
    {"key": "require_numbers", "value": "1", "type": "boolean",
     "description": "Require numbers in passwords", "is_public": False},
    {"key": "require_symbols", "value": "0", "type": "boolean",
     "description": "Require special characters in passwords", "is_public": False},
    {"key": "session_timeout", "value": "120", "type": "integer",
     "description": "Session timeout in minutes", "is_public": False},
    {"key": "force_two_factor", "value": "0", "type": "boolean",
     "description": "Force 2FA for all users", "is_public": False},
    {"key": "rate_limit_enabled", "value": "1", "type": "boolean",
     "description": "Enable rate limiting", "is_public": False},
    {"key": "max_login_attempts", "value": "5", "type": "integer",
     "description": "Maximum failed login attempts before lockout", "is_public": False},
]

# Email Settings
EMAIL_SETTINGS = [
    {"key": "smtp_host", "value": "", "type": "string",
     "description": "SMTP server hostname", "is_public": False},
    {"key": "smtp_port", "value": "587", "type": "integer",
     "description": "SMTP server port", "is_public": False},
    {"key": "smtp_username", "value": "", "type": "string",
     "description": "SMTP authentication username", "is_public": False},
    {"key": "smtp_password", "value": "", "type": "string",
     "description": "SMTP authentication password", "is_public": False},
    {"key": "smtp_encryption", "value": "1", "type": "boolean",
     "description": "Use SSL/TLS for SMTP", "is_public": False},
    {"key": "from_email", "value": "noreply@example.com", "type": "string",
     "description": "Default sender email address", "is_public": False},
    {"key": "from_name", "value": "Boilerplate", "type": "string",
     "description": "Default sender name", "is_public": False},
    {"key": "email_notifications", "value": "1", "type": "boolean",
     "description": "Enable email notifications", "is_public": False},
]

# Notification Settings
NOTIFICATION_SETTINGS = [
    {"key": "notify_new_users", "value": "1", "type": "boolean",
     "description": "Notify on new user registration", "is_public": False},
    {"key": "notify_failed_logins", "value": "1", "type": "boolean",
     "description": "Notify on failed login attempts", "is_public": False},
    {"key": "notify_system_errors", "value": "1", "type": "boolean",
     "description": "Notify on system errors", "is_public": False},
    {"key": "notify_security_events", "value": "1", "type": "boolean",
     "description": "Notify on security events", "is_public": False},
]

# Advanced Settings
ADVANCED_SETTINGS = [
    {"key": "debug_mode", "value": "0", "type": "boolean",
     "description": "Enable debug mode", "is_public": False},
    {"key": "cache_enabled", "value": "1", "type": "boolean",
     "description": "Enable application caching", "is_public": False},
    {"key": "cache_timeout", "value": "60", "type": "integer",
     "description": "Cache timeout in minutes", "is_public": False},
    {"key": "auto_backup", "value": "1", "type": "boolean",
     "description": "Enable automatic backups", "is_public": False},
    {"key": "backup_frequency", "value": "daily", "type": "string",
     "description": "Backup frequency", "is_public": False},
    {"key": "log_retention", "value": "1", "type": "boolean",
     "description": "Enable log retention", "is_public": False},
    {"key": "log_retention_days", "value": "30", "type": "integer",
     "description": "Log retention period in days", "is_public": False},
]

DEFAULT_SETTINGS_BY_GROUP = {
    "general": GENERAL_SETTINGS,
    "security": SECURITY_SETTINGS,
    "email": EMAIL_SETTINGS,
    "notifications": NOTIFICATION_SETTINGS,
    "advanced": ADVANCED_SETTINGS,
}


def get_default_settings() -> list[dict]:
    """Get the full default catalog, each entry tagged with its group."""
    return [
        {**entry, "group": group}
        for group, entries in DEFAULT_SETTINGS_BY_GROUP.items()
        for entry in entries
    ]
