"""
GridBazaar - Dependencies
Dependency injection for FastAPI endpoints
"""
from typing import AsyncGenerator

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from gridbazaar.config import settings
from gridbazaar.core.features import FeatureRegistry
from gridbazaar.core.verification.service import EmailVerificationService
from gridbazaar.db.database import Database
from gridbazaar.db.models.profile import Profile
from gridbazaar.db.models.user import User
from gridbazaar.db.repositories.user import UserRepository
from gridbazaar.core.security import verify_token
from gridbazaar.realtime.broker import RealtimeBroker
from gridbazaar.services.email_service import EmailService, email_service
from gridbazaar.utils.exceptions import InactiveUserError, ProfileNotFoundError


# OAuth2 scheme for token authentication
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_V1_PREFIX}/auth/login"
)


def get_database(request: Request) -> Database:
    """Database owned by the running application."""
    return request.app.state.database


async def get_db(
    database: Database = Depends(get_database)
) -> AsyncGenerator[AsyncSession, None]:
    """
    Database session dependency.
    
    Yields:
        AsyncSession: Database session
    """
    async for session in database.session():
        yield session


def get_realtime_broker(request: Request) -> RealtimeBroker:
    return request.app.state.realtime_broker


def get_feature_registry(request: Request) -> FeatureRegistry:
    return request.app.state.features


def get_email_service() -> EmailService:
    return email_service


async def get_user_repository(
    db: AsyncSession = Depends(get_db)
) -> UserRepository:
    """User repository dependency."""
    return UserRepository(db)


async def get_verification_service(
    db: AsyncSession = Depends(get_db),
    mailer: EmailService = Depends(get_email_service),
) -> EmailVerificationService:
    return EmailVerificationService.from_session(db, mailer)


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    user_repo: UserRepository = Depends(get_user_repository)
) -> User:
    """
    Get current authenticated user from JWT token.
    
    Raises:
        HTTPException: If token is invalid or user not found
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    
    user_id = verify_token(token, token_type="access")
    if user_id is None:
        raise credentials_exception
    
    try:
        user = await user_repo.get_by_id(int(user_id))
    except (ValueError, TypeError):
        raise credentials_exception
    
    if user is None:
        raise credentials_exception
    
    return user


async def get_current_active_user(
    current_user: User = Depends(get_current_user)
) -> User:
    """
    Get current active user.
    
    Raises:
        InactiveUserError: If user is inactive
    """
    if not current_user.is_active:
        raise InactiveUserError()
    return current_user


async def get_current_profile(
    current_user: User = Depends(get_current_active_user)
) -> Profile:
    """Marketplace profile of the active user."""
    if current_user.profile is None:
        raise ProfileNotFoundError()
    return current_user.profile
