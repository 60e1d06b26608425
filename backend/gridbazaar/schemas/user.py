"""
GridBazaar - Pydantic Schemas
User, Profile and Authentication Schemas
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, ConfigDict

from gridbazaar.db.models.profile import ProfileRole


# =========================
# Token Schemas
# =========================

class Token(BaseModel):
    """Schema for token response."""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class RefreshTokenRequest(BaseModel):
    """Schema for refresh token request."""
    refresh_token: str


# =========================
# Profile Schemas
# =========================

class ProfileResponse(BaseModel):
    """Marketplace profile."""
    id: int
    user_id: int
    company_name: str
    role: ProfileRole
    bio: Optional[str] = None
    phone_number: Optional[str] = None
    is_email_verified: bool = False
    is_id_verified: bool = False
    created_at: datetime
    
    model_config = ConfigDict(from_attributes=True)


class ProfileUpdate(BaseModel):
    """Editable profile fields."""
    company_name: Optional[str] = Field(None, min_length=1, max_length=255)
    role: Optional[ProfileRole] = None
    bio: Optional[str] = Field(None, max_length=1000)
    phone_number: Optional[str] = Field(None, max_length=50)


# =========================
# User Schemas
# =========================

class UserBase(BaseModel):
    """Base schema for User with common fields."""
    email: EmailStr
    username: str = Field(..., min_length=3, max_length=50)
    full_name: Optional[str] = Field(None, max_length=100)


class UserCreate(UserBase):
    """Schema for creating a new user and their marketplace profile."""
    password: str = Field(..., min_length=8, max_length=100)
    company_name: str = Field(default="GridBazaar User", min_length=1, max_length=255)
    role: ProfileRole = ProfileRole.BUYER
    
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "email": "user@example.com",
                "username": "solarbuyer",
                "full_name": "Jane Doe",
                "password": "strongpassword123",
                "company_name": "Sunfield Capital",
                "role": "buyer"
            }
        }
    )


class UserLogin(BaseModel):
    """Schema for user login."""
    email: EmailStr
    password: str


class User(UserBase):
    """Schema for User response (without password)."""
    id: int
    is_active: bool = True
    email_confirmed_at: Optional[datetime] = None
    created_at: datetime
    profile: Optional[ProfileResponse] = None
    
    model_config = ConfigDict(from_attributes=True)


class UserWithToken(User):
    """Schema for User response with tokens."""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class Message(BaseModel):
    """Generic message response schema."""
    message: str
