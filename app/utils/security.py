"""Security utilities: password hashing and signed tokens."""

import hashlib
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from passlib.context import CryptContext

from app.config import settings

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ACCESS_TOKEN_TYPE = "access"
EMAIL_VERIFICATION_TOKEN_TYPE = "email_verification"
PASSWORD_RESET_TOKEN_TYPE = "password_reset"


def hash_password(password: str) -> str:
    """Hash a password using bcrypt.

    Args:
        password: Plain text password to hash

    Returns:
        Bcrypt hash of the password
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a bcrypt hash.

    Args:
        plain_password: Plain text password to verify
        hashed_password: Bcrypt hash to verify against

    Returns:
        True if password matches, False otherwise
    """
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # Malformed or unknown hash format
        return False


def _encode(payload: dict[str, Any]) -> str:
    return jwt.encode(
        payload,
        settings.effective_jwt_secret,
        algorithm=settings.jwt_algorithm,
    )


def create_access_token(
    user_id: uuid.UUID,
    token_id: uuid.UUID,
    expires_delta: timedelta,
) -> str:
    """Create a JWT access token bound to a persisted token row.

    Args:
        user_id: User's UUID
        token_id: Id of the access_tokens row, carried as ``jti``
        expires_delta: Token lifetime

    Returns:
        Encoded JWT token string
    """
    now = datetime.now(timezone.utc)

    payload = {
        "sub": str(user_id),
        "jti": str(token_id),
        "iat": now,
        "exp": now + expires_delta,
        "type": ACCESS_TOKEN_TYPE,
    }

    return _encode(payload)


def decode_token(token: str) -> dict[str, Any] | None:
    """Decode and validate a JWT token.

    Args:
        token: JWT token string to decode

    Returns:
        Token payload dictionary if valid, None if invalid/expired
    """
    try:
        return jwt.decode(
            token,
            settings.effective_jwt_secret,
            algorithms=[settings.jwt_algorithm],
        )
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None


def _decode_typed(token: str, token_type: str) -> dict[str, Any] | None:
    payload = decode_token(token)
    if payload and payload.get("type") == token_type:
        return payload
    return None


def decode_access_token(token: str) -> dict[str, Any] | None:
    """Decode an access token and verify it's an access token type."""
    return _decode_typed(token, ACCESS_TOKEN_TYPE)


def create_email_verification_token(user_id: uuid.UUID, email: str) -> str:
    """Create a token proving ownership of ``email`` for the given user."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "email": email,
        "iat": now,
        "exp": now + timedelta(hours=settings.email_verification_expire_hours),
        "type": EMAIL_VERIFICATION_TOKEN_TYPE,
    }
    return _encode(payload)


def decode_email_verification_token(token: str) -> dict[str, Any] | None:
    """Decode an email verification token."""
    return _decode_typed(token, EMAIL_VERIFICATION_TOKEN_TYPE)


def password_fingerprint(password_hash: str) -> str:
    """Short digest of the stored hash; changes whenever the password does."""
    return hashlib.sha256(password_hash.encode("utf-8")).hexdigest()[:16]


def create_password_reset_token(user_id: uuid.UUID, password_hash: str) -> str:
    """Create a password reset token.

    The token embeds a fingerprint of the current password hash, so it stops
    working once the password has been changed.
    """
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "pwd": password_fingerprint(password_hash),
        "iat": now,
        "exp": now + timedelta(hours=settings.password_reset_expire_hours),
        "type": PASSWORD_RESET_TOKEN_TYPE,
    }
    return _encode(payload)


def decode_password_reset_token(token: str) -> dict[str, Any] | None:
    """Decode a password reset token."""
    return _decode_typed(token, PASSWORD_RESET_TOKEN_TYPE)


def parse_subject(payload: dict[str, Any], claim: str = "sub") -> uuid.UUID | None:
    """Extract a UUID claim from a decoded payload."""
    try:
        return uuid.UUID(payload[claim])
    except (KeyError, ValueError, TypeError):
        return None
