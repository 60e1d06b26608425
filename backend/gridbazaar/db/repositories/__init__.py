"""
GridBazaar - Data Repositories

Repository pattern implementations for database operations.
"""
from gridbazaar.db.repositories.user import UserRepository
from gridbazaar.db.repositories.verification_code import VerificationCodeRepository

__all__ = [
    "UserRepository",
    "VerificationCodeRepository",
]
