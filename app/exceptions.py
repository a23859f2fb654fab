"""Custom exception classes and global exception handlers."""

import logging
import traceback

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppException(Exception):
    """Base exception for all application-specific errors."""

    def __init__(self, message: str, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class NotFoundException(AppException):
    """Resource not found exception."""

    def __init__(self, resource: str = "Resource"):
        super().__init__(f"{resource} not found", 404)


class ForbiddenException(AppException):
    """Access forbidden exception."""

    def __init__(self, message: str = "You don't have permission to perform this action"):
        super().__init__(message, 403)


class UnauthorizedException(AppException):
    """Authentication required exception."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, 401)


class ConflictException(AppException):
    """Resource conflict exception."""

    def __init__(self, message: str = "Resource already exists"):
        super().__init__(message, 409)


class ValidationException(AppException):
    """Validation error exception with field-level errors."""

    def __init__(self, errors: list[dict] | str, message: str = "Validation failed"):
        if isinstance(errors, str):
            errors = [{"field": "general", "message": errors}]
        super().__init__(message, 422)
        self.errors = errors


class DuplicateEmailException(ValidationException):
    """The email address already belongs to another account."""

    def __init__(self):
        super().__init__([{"field": "email", "message": "The email has already been taken."}])


class InvalidCredentialsException(UnauthorizedException):
    """Login failed.

    Unknown email and wrong password share this exact error.
    """

    def __init__(self):
        super().__init__("Invalid credentials")


class InvalidCurrentPasswordException(AppException):
    """Current password check failed during a password change."""

    def __init__(self):
        super().__init__("Current password is incorrect", 400)


class RegistrationDisabledException(ForbiddenException):
    """Self-service registration is switched off."""

    def __init__(self):
        super().__init__("User registration is currently disabled.")


class EmailNotVerifiedException(ForbiddenException):
    """Login refused until the email address is verified."""

    def __init__(self):
        super().__init__("Please verify your email address before logging in.")


class SelfActionException(AppException):
    """An admin targeted their own account with a destructive action."""

    def __init__(self, message: str = "You cannot perform actions on your own account"):
        super().__init__(message, 422)


class TwoFactorException(AppException):
    """Two-factor setup is in the wrong state or the code is invalid."""

    def __init__(self, message: str):
        super().__init__(message, 422)


class StorageFailureException(AppException):
    """A storage operation failed and was rolled back."""

    def __init__(self, message: str = "A storage error occurred"):
        super().__init__(message, 500)


def _error_content(message: str, errors=None) -> dict:
    content = {"status": "error", "message": message}
    if errors is not None:
        content["errors"] = jsonable_encoder(errors)
    return content


def create_exception_handlers():
    """Create exception handlers rendering the standard error envelope."""

    async def app_exception_handler(request: Request, exc: AppException):
        """Handle application exceptions."""
        if exc.status_code >= 500:
            logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
        else:
            logger.warning(
                f"{type(exc).__name__} on {request.method} {request.url.path}: "
                f"{exc.message} (status={exc.status_code})"
            )
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_content(exc.message, getattr(exc, "errors", None)),
        )

    async def request_validation_handler(request: Request, exc: RequestValidationError):
        """Re-shape FastAPI body/query validation errors into field-level errors."""
        errors = []
        for error in exc.errors():
            loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
            errors.append({"field": ".".join(loc) or "general", "message": error.get("msg", "Invalid value")})
        logger.warning(f"Request validation failed on {request.method} {request.url.path}: {errors}")
        return JSONResponse(status_code=422, content=_error_content("Validation failed", errors))

    async def generic_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions."""
        logger.error(f"Unhandled exception on {request.method} {request.url.path}")
        logger.error(f"Exception: {type(exc).__name__}: {exc}")
        tb_lines = traceback.format_exception(type(exc), exc, exc.__traceback__)
        logger.error("".join(tb_lines))

        return JSONResponse(
            status_code=500,
            content=_error_content("An unexpected error occurred"),
        )

    return {
        AppException: app_exception_handler,
        RequestValidationError: request_validation_handler,
        Exception: generic_exception_handler,
    }
