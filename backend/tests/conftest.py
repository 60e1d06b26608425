"""
GridBazaar - Test Configuration
Shared fixtures and test configuration.
"""
import os
from datetime import datetime, date, timedelta
from typing import Optional
import pytest
from unittest.mock import AsyncMock, MagicMock

# Set test environment
os.environ["APP_ENV"] = "testing"
os.environ["SECRET_KEY"] = "test-secret-key-for-testing"
os.environ["POSTGRES_HOST"] = "localhost"
os.environ["POSTGRES_DB"] = "gridbazaar_test"
os.environ["MAPBOX_PUBLIC_TOKEN"] = "pk.test-public-token"
os.environ["ENABLE_LISTING_ANNOUNCEMENTS"] = "false"
os.environ["LOG_DIR"] = os.path.join(os.path.dirname(os.path.abspath(__file__)), ".logs")


# =========================
# Portfolio Fixtures
# =========================

def make_item(
    acquisition_price: Optional[float] = 100.0,
    current_value: Optional[float] = 150.0,
    status: str = "active",
    sector: Optional[str] = "solar",
    risk_level: Optional[str] = "low",
    acquisition_date: Optional[date] = None,
) -> dict:
    """Portfolio item mapping as the metrics calculator consumes it."""
    metadata = {}
    if sector is not None:
        metadata["sector"] = sector
    if risk_level is not None:
        metadata["riskLevel"] = risk_level
    return {
        "status": status,
        "acquisition_price": acquisition_price,
        "current_value": current_value,
        "acquisition_date": acquisition_date,
        "metadata": metadata,
    }


@pytest.fixture
def item_factory():
    """Factory for portfolio item mappings."""
    return make_item


@pytest.fixture
def sample_items() -> list:
    """Mixed-sector holdings."""
    return [
        make_item(100, 150, sector="solar", risk_level="low"),
        make_item(200, 180, sector="wind", risk_level="moderate"),
        make_item(300, 330, sector="storage", risk_level="high"),
        make_item(50, 40, status="sold", sector="hydro", risk_level="high"),
    ]


# =========================
# User / Profile Fixtures
# =========================

@pytest.fixture
def sample_user_data() -> dict:
    """Sample user registration data."""
    return {
        "email": "test@example.com",
        "username": "testuser",
        "password": "SecurePassword123!",
        "full_name": "Test User",
        "company_name": "Sunfield Capital",
        "role": "investor",
    }


@pytest.fixture
def sample_profile():
    """Sample profile object mock."""
    from gridbazaar.db.models.profile import Profile, ProfileRole
    profile = MagicMock(spec=Profile)
    profile.id = 10
    profile.user_id = 1
    profile.company_name = "Sunfield Capital"
    profile.role = ProfileRole.INVESTOR
    profile.is_email_verified = False
    profile.is_id_verified = False
    profile.created_at = datetime.utcnow()
    return profile


@pytest.fixture
def sample_user(sample_profile):
    """Sample user object mock."""
    from gridbazaar.db.models.user import User
    user = MagicMock(spec=User)
    user.id = 1
    user.email = "test@example.com"
    user.username = "testuser"
    user.hashed_password = "$2b$12$test_hashed_password"
    user.full_name = "Test User"
    user.is_active = True
    user.is_superuser = False
    user.email_confirmed_at = None
    user.created_at = datetime.utcnow()
    user.updated_at = datetime.utcnow()
    user.profile = sample_profile
    return user


# =========================
# Database Fixtures
# =========================

@pytest.fixture
def mock_db_session():
    """Mock async database session."""
    session = AsyncMock()
    session.add = MagicMock()
    session.commit = AsyncMock()
    session.refresh = AsyncMock()
    session.execute = AsyncMock()
    session.delete = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.get = AsyncMock()
    return session


def scalars_result(rows: list):
    """Execute() result whose scalars().all() yields rows."""
    result = MagicMock()
    result.scalars.return_value.all.return_value = rows
    result.scalar_one_or_none.return_value = rows[0] if rows else None
    return result


@pytest.fixture
def scalars():
    return scalars_result


# =========================
# Auth Fixtures
# =========================

@pytest.fixture
def valid_access_token(sample_user) -> str:
    """Valid access token for sample user."""
    from gridbazaar.core.security import create_access_token
    return create_access_token(subject=sample_user.id)


@pytest.fixture
def expired_access_token(sample_user) -> str:
    """Expired access token for sample user."""
    from gridbazaar.core.security import create_access_token
    return create_access_token(subject=sample_user.id, expires_delta=timedelta(seconds=-1))
