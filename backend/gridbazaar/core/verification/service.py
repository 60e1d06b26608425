"""
Email Verification Service

Issues one-time email verification codes and redeems them.

A code is redeemable once: redemption looks up the newest unused,
unexpired code for the (trimmed) code and (lowercased) email and stamps
``used_at`` on it, so a second attempt finds nothing.
"""
import secrets
from datetime import datetime, timedelta
from typing import Any, Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from gridbazaar.config import settings
from gridbazaar.db.repositories.user import UserRepository
from gridbazaar.db.repositories.verification_code import VerificationCodeRepository
from gridbazaar.services.email_service import EmailService, email_service as default_email_service
from gridbazaar.utils.exceptions import (
    MissingVerificationFieldsError,
    InvalidVerificationCodeError,
    VerificationStorageError,
    VerificationDeliveryError,
)


def generate_code(length: int = 6) -> str:
    """Random numeric code with leading zeros kept."""
    return "".join(secrets.choice("0123456789") for _ in range(length))


class EmailVerificationService:
    """
    Issue and redeem email verification codes.
    
    Usage:
        service = EmailVerificationService.from_session(db)
        await service.issue_code("jane@example.com", user_id=7)
        result = await service.verify_code("123456", "Jane@Example.com")
    """
    
    def __init__(
        self,
        codes: VerificationCodeRepository,
        users: UserRepository,
        mailer: Optional[EmailService] = None,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.codes = codes
        self.users = users
        self.mailer = mailer or default_email_service
        self.clock = clock
    
    @classmethod
    def from_session(
        cls,
        db: AsyncSession,
        mailer: Optional[EmailService] = None,
    ) -> "EmailVerificationService":
        return cls(VerificationCodeRepository(db), UserRepository(db), mailer)
    
    async def issue_code(
        self,
        email: Optional[str],
        user_id: Optional[int],
        is_resend: bool = False,
    ) -> dict[str, Any]:
        """
        Replace the user's outstanding codes with a fresh one and email it.
        
        Raises:
            MissingVerificationFieldsError: email or user id missing
            VerificationStorageError: the code could not be stored
            VerificationDeliveryError: the email could not be sent
        """
        if not email or not user_id:
            raise MissingVerificationFieldsError("Email and user_id are required")
        
        email = email.strip().lower()
        code = generate_code(settings.VERIFICATION_CODE_LENGTH)
        expires_at = self.clock() + timedelta(minutes=settings.VERIFICATION_CODE_TTL_MINUTES)
        
        try:
            removed = await self.codes.delete_unused(user_id, email)
            await self.codes.create(user_id, email, code, expires_at)
        except Exception as e:
            logger.error(f"Failed to store verification code for {email}: {e}")
            raise VerificationStorageError("Failed to store verification code")
        if removed:
            logger.debug(f"Replaced {removed} outstanding code(s) for {email}")
        
        sent = await self.mailer.send_verification_code(
            email, code, settings.VERIFICATION_CODE_TTL_MINUTES, is_resend=is_resend
        )
        if not sent:
            raise VerificationDeliveryError()
        
        message = (
            "Verification code resent successfully" if is_resend
            else "Verification code sent successfully"
        )
        logger.info(f"{message} to {email}")
        return {"success": True, "message": message}
    
    async def verify_code(self, code: Optional[str], email: Optional[str]) -> dict[str, Any]:
        """
        Redeem a code.
        
        Returns:
            {"success": True, "message": ..., "user_id": ...}
        
        Raises:
            MissingVerificationFieldsError: code or email missing
            InvalidVerificationCodeError: no unused, unexpired code matches
            VerificationStorageError: lookup or redemption failed
        """
        if not code or not email:
            raise MissingVerificationFieldsError()
        
        email = email.strip().lower()
        now = self.clock()
        
        try:
            record = await self.codes.find_active(code.strip(), email, now)
        except Exception as e:
            logger.error(f"Verification code lookup failed for {email}: {e}")
            raise VerificationStorageError()
        
        if record is None:
            logger.info(f"Invalid or expired verification code for {email}")
            raise InvalidVerificationCodeError()
        
        try:
            claimed = await self.codes.mark_used(record, now)
        except Exception as e:
            logger.error(f"Failed to mark verification code {record.id} as used: {e}")
            raise VerificationStorageError("Failed to process verification")
        if not claimed:
            logger.info(f"Verification code {record.id} was already redeemed")
            raise InvalidVerificationCodeError()
        
        user_id = record.user_id
        if not user_id:
            user_id = await self._resolve_user(record, email)
        
        if user_id:
            try:
                await self.users.mark_email_verified(user_id)
            except Exception as e:
                # verification itself already succeeded
                logger.error(f"Failed to update email verification status for user {user_id}: {e}")
        
        logger.info(f"Email verified for {email} (user {user_id})")
        return {"success": True, "message": "Email verified successfully", "user_id": user_id}
    
    async def _resolve_user(self, record, email: str) -> Optional[int]:
        """Find the account for a code issued without one and attach it."""
        try:
            user = await self.users.get_by_email(email)
            if user is None:
                return None
            await self.codes.assign_user(record, user.id)
            return user.id
        except Exception as e:
            logger.error(f"Failed to resolve user for {email}: {e}")
            return None
