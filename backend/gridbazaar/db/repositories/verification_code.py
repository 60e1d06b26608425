"""
Verification Code Repository

Database operations for one-time email verification codes.
"""
from datetime import datetime
from typing import Optional

from sqlalchemy import select, delete, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import set_committed_value

from gridbazaar.db.models.verification import EmailVerificationCode


class VerificationCodeRepository:
    """Repository for EmailVerificationCode operations."""
    
    def __init__(self, session: AsyncSession):
        self.session = session
    
    async def find_active(
        self,
        code: str,
        email: str,
        now: datetime,
    ) -> Optional[EmailVerificationCode]:
        """Newest unused, unexpired code matching code and (lowercased) email."""
        result = await self.session.execute(
            select(EmailVerificationCode)
            .where(
                EmailVerificationCode.code == code,
                EmailVerificationCode.email == email,
                EmailVerificationCode.used_at.is_(None),
                EmailVerificationCode.expires_at > now,
            )
            .order_by(EmailVerificationCode.created_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()
    
    async def mark_used(self, record: EmailVerificationCode, used_at: datetime) -> bool:
        """
        Claim a code.
        
        Only an unused row is stamped, so concurrent redemptions of the same
        code claim it at most once.
        
        Returns:
            True if this call consumed the code
        """
        result = await self.session.execute(
            update(EmailVerificationCode)
            .where(
                EmailVerificationCode.id == record.id,
                EmailVerificationCode.used_at.is_(None),
            )
            .values(used_at=used_at)
            .execution_options(synchronize_session=False)
        )
        await self.session.commit()
        if not result.rowcount:
            return False
        set_committed_value(record, "used_at", used_at)
        return True
    
    async def assign_user(self, record: EmailVerificationCode, user_id: int) -> None:
        """Attach a user to a code issued without one."""
        record.user_id = user_id
        await self.session.commit()
    
    async def delete_unused(self, user_id: int, email: str) -> int:
        """Remove outstanding codes of a user for an email."""
        result = await self.session.execute(
            delete(EmailVerificationCode).where(
                EmailVerificationCode.user_id == user_id,
                EmailVerificationCode.email == email,
                EmailVerificationCode.used_at.is_(None),
            )
        )
        await self.session.commit()
        return result.rowcount or 0
    
    async def create(
        self,
        user_id: Optional[int],
        email: str,
        code: str,
        expires_at: datetime,
    ) -> EmailVerificationCode:
        """Store a new code."""
        record = EmailVerificationCode(
            user_id=user_id,
            email=email,
            code=code,
            expires_at=expires_at,
        )
        self.session.add(record)
        await self.session.commit()
        await self.session.refresh(record)
        return record
