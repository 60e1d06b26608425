"""
GridBazaar - Email Verification Code Model
"""
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey

from gridbazaar.db.database import Base


class EmailVerificationCode(Base):
    """One-time code confirming an email address."""
    
    __tablename__ = "email_verification_codes"
    
    id = Column(Integer, primary_key=True, index=True)
    # Null for codes issued before the account exists
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=True)
    email = Column(String(255), nullable=False, index=True)
    code = Column(String(12), nullable=False)
    expires_at = Column(DateTime, nullable=False)
    used_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    
    @property
    def is_used(self) -> bool:
        return self.used_at is not None
    
    def __repr__(self):
        return f"<EmailVerificationCode {self.email} used={self.is_used}>"
