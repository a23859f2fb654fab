"""Authentication-related Pydantic schemas.

Each request schema lists exactly the fields its operation accepts;
password rules themselves depend on runtime settings and are checked by
the password policy, not here.
"""

from pydantic import BaseModel, EmailStr, Field

from app.schemas.user import UserResponse


class LoginRequest(BaseModel):
    """Login request schema."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class RegisterRequest(BaseModel):
    """Self-service registration request."""

    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr = Field(..., max_length=255)
    password: str = ""
    password_confirmation: str = ""


class TokenResponse(BaseModel):
    """Issued token together with the account it belongs to."""

    user: UserResponse
    token: str
    token_type: str = "Bearer"
    expires_in: int  # Seconds until token expires


class UpdateProfileRequest(BaseModel):
    """Profile update; only these fields are writable by the account owner."""

    name: str | None = Field(None, min_length=1, max_length=255)
    email: EmailStr | None = Field(None, max_length=255)
    phone: str | None = Field(None, max_length=20)
    bio: str | None = Field(None, max_length=1000)


class ChangePasswordRequest(BaseModel):
    """Change password request (for authenticated users)."""

    current_password: str = Field(..., min_length=1)
    password: str = ""
    password_confirmation: str = ""


class ForgotPasswordRequest(BaseModel):
    """Forgot password request."""

    email: EmailStr


class ResetPasswordRequest(BaseModel):
    """Password reset request."""

    token: str = Field(..., min_length=1)
    password: str = ""
    password_confirmation: str = ""


class VerifyEmailRequest(BaseModel):
    """Email verification request."""

    token: str = Field(..., min_length=1)


class ResendVerificationRequest(BaseModel):
    """Resend verification email request."""

    email: EmailStr


class TwoFactorStatus(BaseModel):
    """Two-factor state of the current account."""

    enabled: bool
    confirmed: bool
    pending_confirmation: bool


class TwoFactorSetupResponse(BaseModel):
    """Secret and provisioning URI for a pending two-factor setup."""

    secret: str
    provisioning_uri: str


class TwoFactorConfirmRequest(BaseModel):
    """Code from the authenticator app."""

    code: str = Field(..., min_length=6, max_length=8)


class TwoFactorDisableRequest(BaseModel):
    """Password re-check before two-factor is switched off."""

    password: str = Field(..., min_length=1)


class ChannelAuthRequest(BaseModel):
    """Broadcast channel subscription check."""

    channel_name: str = Field(..., min_length=1, max_length=255)
