"""
GridBazaar - User Repository
CRUD operations for User and Profile models
"""
from datetime import datetime
from typing import Optional

from sqlalchemy import select, or_, func
from sqlalchemy.ext.asyncio import AsyncSession

from gridbazaar.db.models.user import User
from gridbazaar.db.models.profile import Profile
from gridbazaar.schemas.user import UserCreate, ProfileUpdate
from gridbazaar.core.security import get_password_hash, verify_password


class UserRepository:
    """Repository for User CRUD operations."""
    
    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session
    
    async def get_by_id(self, user_id: int) -> Optional[User]:
        """
        Get user by ID.
        
        Args:
            user_id: The user's ID
            
        Returns:
            User object if found, None otherwise
        """
        result = await self.session.execute(
            select(User).where(User.id == user_id)
        )
        return result.scalar_one_or_none()
    
    async def get_by_email(self, email: str) -> Optional[User]:
        """
        Get user by email address, ignoring case.
        
        Args:
            email: The user's email address
            
        Returns:
            User object if found, None otherwise
        """
        result = await self.session.execute(
            select(User).where(func.lower(User.email) == email.strip().lower())
        )
        return result.scalar_one_or_none()
    
    async def get_by_email_or_username(
        self,
        email: str,
        username: str
    ) -> Optional[User]:
        """Get user by email (case-insensitive) or username."""
        result = await self.session.execute(
            select(User).where(
                or_(func.lower(User.email) == email.lower(), User.username == username)
            )
        )
        return result.scalars().first()
    
    async def create(self, user_data: UserCreate) -> User:
        """
        Create a new user together with their marketplace profile.
        
        Args:
            user_data: User creation data
            
        Returns:
            Created User object
        """
        user = User(
            email=user_data.email.lower(),
            username=user_data.username,
            full_name=user_data.full_name,
            hashed_password=get_password_hash(user_data.password),
            is_active=True,
            is_superuser=False,
        )
        user.profile = Profile(
            company_name=user_data.company_name,
            role=user_data.role,
        )
        self.session.add(user)
        await self.session.commit()
        await self.session.refresh(user)
        return user
    
    async def authenticate(self, email: str, password: str) -> Optional[User]:
        """
        Authenticate a user by email and password.
        
        Returns:
            User object if authentication successful, None otherwise
        """
        user = await self.get_by_email(email)
        if not user:
            return None
        if not verify_password(password, user.hashed_password):
            return None
        return user
    
    async def update_last_login(self, user: User) -> User:
        """Update user's last login timestamp."""
        user.last_login = datetime.utcnow()
        await self.session.commit()
        await self.session.refresh(user)
        return user
    
    async def update_profile(self, profile: Profile, data: ProfileUpdate) -> Profile:
        """Apply editable fields to a profile."""
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(profile, field, value)
        profile.updated_at = datetime.utcnow()
        await self.session.commit()
        await self.session.refresh(profile)
        return profile
    
    async def get_profile(self, user_id: int) -> Optional[Profile]:
        """Get the marketplace profile of a user."""
        result = await self.session.execute(
            select(Profile).where(Profile.user_id == user_id)
        )
        return result.scalar_one_or_none()
    
    async def mark_email_verified(self, user_id: int) -> Profile:
        """
        Flip the profile's email verification flag and confirm the account email.
        
        Creates a default profile when the user has none yet.
        """
        profile = await self.get_profile(user_id)
        if profile is None:
            profile = Profile(user_id=user_id, is_email_verified=True)
            self.session.add(profile)
        else:
            profile.is_email_verified = True
            profile.updated_at = datetime.utcnow()
        
        user = await self.get_by_id(user_id)
        if user is not None:
            user.email_confirmed_at = datetime.utcnow()
        
        await self.session.commit()
        return profile
