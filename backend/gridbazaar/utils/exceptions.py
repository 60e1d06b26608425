"""
GridBazaar - Custom Exceptions
Application-specific exceptions with HTTP error handling
"""
from typing import Optional, Any, Dict
from fastapi import Request, status
from fastapi.responses import JSONResponse
from loguru import logger


class GridBazaarException(Exception):
    """Base exception for GridBazaar."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str = "An error occurred",
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)


# =========================
# Authentication Exceptions
# =========================

class AuthenticationError(GridBazaarException):
    """Authentication related errors."""
    status_code = status.HTTP_401_UNAUTHORIZED


class InvalidCredentialsError(AuthenticationError):
    """Invalid email or password."""

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message=message, code="INVALID_CREDENTIALS")


class InactiveUserError(AuthenticationError):
    """User account is inactive."""
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str = "User account is inactive"):
        super().__init__(message=message, code="INACTIVE_USER")


# =========================
# User / Profile Exceptions
# =========================

class UserError(GridBazaarException):
    """User related errors."""
    status_code = status.HTTP_400_BAD_REQUEST


class EmailAlreadyRegisteredError(UserError):
    """Email already registered."""

    def __init__(self, message: str = "Email already registered"):
        super().__init__(message=message, code="EMAIL_REGISTERED")


class UsernameAlreadyTakenError(UserError):
    """Username already taken."""

    def __init__(self, message: str = "Username already taken"):
        super().__init__(message=message, code="USERNAME_TAKEN")


class ProfileNotFoundError(UserError):
    """Marketplace profile missing for the user."""
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, message: str = "Profile not found"):
        super().__init__(message=message, code="PROFILE_NOT_FOUND")


# =========================
# Portfolio Exceptions
# =========================

class PortfolioError(GridBazaarException):
    """Portfolio related errors."""
    status_code = status.HTTP_400_BAD_REQUEST


class PortfolioNotFoundError(PortfolioError):
    """Portfolio not found."""
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, message: str = "Portfolio not found"):
        super().__init__(message=message, code="PORTFOLIO_NOT_FOUND")


class PortfolioItemNotFoundError(PortfolioError):
    """Portfolio item not found."""
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, message: str = "Portfolio item not found"):
        super().__init__(message=message, code="PORTFOLIO_ITEM_NOT_FOUND")


# =========================
# Listing / Watchlist Exceptions
# =========================

class ListingError(GridBazaarException):
    """Listing related errors."""
    status_code = status.HTTP_400_BAD_REQUEST


class ListingNotFoundError(ListingError):
    """Listing not found."""
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, message: str = "Listing not found"):
        super().__init__(message=message, code="LISTING_NOT_FOUND")


class AlreadyWatchingError(ListingError):
    """Listing already on the watchlist."""
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, message: str = "Listing already in watchlist"):
        super().__init__(message=message, code="ALREADY_WATCHING")


# =========================
# Email Verification Exceptions
# =========================

class VerificationError(GridBazaarException):
    """Email verification related errors."""
    status_code = status.HTTP_400_BAD_REQUEST


class MissingVerificationFieldsError(VerificationError):
    """Required request fields absent."""

    def __init__(self, message: str = "Code and email are required"):
        super().__init__(message=message, code="MISSING_FIELDS")


class InvalidVerificationCodeError(VerificationError):
    """No unused, unexpired code matches."""

    def __init__(self, message: str = "Invalid or expired verification code"):
        super().__init__(message=message, code="INVALID_CODE")


class VerificationStorageError(VerificationError):
    """Code lookup or update failed in the store."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "Database error occurred"):
        super().__init__(message=message, code="VERIFICATION_STORAGE_ERROR")


class VerificationDeliveryError(VerificationError):
    """Verification email could not be sent."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "Failed to send verification email"):
        super().__init__(message=message, code="VERIFICATION_DELIVERY_ERROR")


# =========================
# Map Configuration Exceptions
# =========================

class MapConfigError(GridBazaarException):
    """Map configuration errors."""


class MapTokenNotConfiguredError(MapConfigError):
    """Public map token missing."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str = "Please add your Mapbox public token (pk.*) to the MAPBOX_PUBLIC_TOKEN secret",
    ):
        super().__init__(message=message, code="Mapbox public token not configured")


class InvalidMapTokenError(MapConfigError):
    """Configured token is not a public token."""
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(
        self,
        message: str = "Mapbox GL requires a public access token (pk.*), not a secret token (sk.*)",
    ):
        super().__init__(message=message, code="Invalid token type")


# =========================
# Exception Handler
# =========================

async def gridbazaar_exception_handler(
    request: Request,
    exc: GridBazaarException,
) -> JSONResponse:
    """Render application exceptions as JSON errors."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.code}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.code, "message": exc.message, **exc.details},
    )

