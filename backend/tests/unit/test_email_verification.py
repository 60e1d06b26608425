"""
Unit Tests - Email Verification Service
Uses in-memory repositories so redemption semantics can be checked end to end.
"""
import asyncio
from datetime import datetime, timedelta
from types import SimpleNamespace
from typing import Optional

import pytest
from unittest.mock import AsyncMock, MagicMock

from gridbazaar.core.verification.service import EmailVerificationService, generate_code
from gridbazaar.db.models.verification import EmailVerificationCode
from gridbazaar.utils.exceptions import (
    InvalidVerificationCodeError,
    MissingVerificationFieldsError,
    VerificationDeliveryError,
    VerificationStorageError,
)


NOW = datetime(2024, 6, 1, 12, 0, 0)


class InMemoryCodes:
    """Verification code store with the repository's interface."""
    
    def __init__(self):
        self.records: list[EmailVerificationCode] = []
        self.fail_lookup = False
        self.fail_mark = False
    
    def add(self, code, email, user_id=None, expires_at=None, created_at=None):
        record = EmailVerificationCode(
            id=len(self.records) + 1,
            user_id=user_id,
            email=email,
            code=code,
            expires_at=expires_at or NOW + timedelta(minutes=15),
            created_at=created_at or NOW,
        )
        self.records.append(record)
        return record
    
    async def find_active(self, code, email, now):
        await asyncio.sleep(0)
        if self.fail_lookup:
            raise RuntimeError("connection lost")
        matches = [
            r for r in self.records
            if r.code == code and r.email == email and r.used_at is None and r.expires_at > now
        ]
        return max(matches, key=lambda r: r.created_at) if matches else None
    
    async def mark_used(self, record, used_at):
        await asyncio.sleep(0)
        if self.fail_mark:
            raise RuntimeError("update failed")
        if record.used_at is not None:
            return False
        record.used_at = used_at
        return True
    
    async def assign_user(self, record, user_id):
        record.user_id = user_id
    
    async def delete_unused(self, user_id, email):
        before = len(self.records)
        self.records = [
            r for r in self.records
            if not (r.user_id == user_id and r.email == email and r.used_at is None)
        ]
        return before - len(self.records)
    
    async def create(self, user_id, email, code, expires_at):
        return self.add(code, email, user_id=user_id, expires_at=expires_at)


@pytest.fixture
def codes():
    return InMemoryCodes()


@pytest.fixture
def users():
    repo = MagicMock()
    repo.get_by_email = AsyncMock(return_value=None)
    repo.mark_email_verified = AsyncMock()
    return repo


@pytest.fixture
def mailer():
    service = MagicMock()
    service.send_verification_code = AsyncMock(return_value=True)
    return service


@pytest.fixture
def service(codes, users, mailer):
    return EmailVerificationService(codes, users, mailer, clock=lambda: NOW)


class TestVerifyCode:
    
    @pytest.mark.asyncio
    async def test_success_marks_code_used_once(self, service, codes, users):
        record = codes.add("123456", "jane@example.com", user_id=7)
        
        result = await service.verify_code(" 123456 ", "Jane@Example.com")
        
        assert result == {"success": True, "message": "Email verified successfully", "user_id": 7}
        assert record.used_at == NOW
        users.mark_email_verified.assert_awaited_once_with(7)
    
    @pytest.mark.asyncio
    async def test_second_redemption_is_rejected(self, service, codes):
        codes.add("123456", "jane@example.com", user_id=7)
        await service.verify_code("123456", "jane@example.com")
        
        with pytest.raises(InvalidVerificationCodeError) as exc_info:
            await service.verify_code("123456", "jane@example.com")
        
        assert exc_info.value.message == "Invalid or expired verification code"
        assert exc_info.value.status_code == 400
    
    @pytest.mark.asyncio
    async def test_concurrent_redemption_succeeds_once(self, service, codes, users):
        codes.add("123456", "jane@example.com", user_id=7)
        
        results = await asyncio.gather(
            service.verify_code("123456", "jane@example.com"),
            service.verify_code("123456", "jane@example.com"),
            return_exceptions=True,
        )
        
        successes = [r for r in results if isinstance(r, dict)]
        failures = [r for r in results if isinstance(r, InvalidVerificationCodeError)]
        assert len(successes) == 1
        assert len(failures) == 1
        users.mark_email_verified.assert_awaited_once_with(7)
    
    @pytest.mark.asyncio
    async def test_expired_code(self, service, codes):
        codes.add("123456", "jane@example.com", expires_at=NOW - timedelta(seconds=1))
        
        with pytest.raises(InvalidVerificationCodeError):
            await service.verify_code("123456", "jane@example.com")
    
    @pytest.mark.asyncio
    async def test_wrong_email(self, service, codes):
        codes.add("123456", "jane@example.com")
        
        with pytest.raises(InvalidVerificationCodeError):
            await service.verify_code("123456", "john@example.com")
    
    @pytest.mark.asyncio
    @pytest.mark.parametrize("code,email", [(None, "a@b.com"), ("123456", None), ("", ""), ("1", "")])
    async def test_missing_fields(self, service, code, email):
        with pytest.raises(MissingVerificationFieldsError) as exc_info:
            await service.verify_code(code, email)
        
        assert exc_info.value.message == "Code and email are required"
    
    @pytest.mark.asyncio
    async def test_lookup_failure(self, service, codes):
        codes.fail_lookup = True
        
        with pytest.raises(VerificationStorageError) as exc_info:
            await service.verify_code("123456", "jane@example.com")
        
        assert exc_info.value.message == "Database error occurred"
        assert exc_info.value.status_code == 500
    
    @pytest.mark.asyncio
    async def test_mark_used_failure(self, service, codes):
        codes.add("123456", "jane@example.com")
        codes.fail_mark = True
        
        with pytest.raises(VerificationStorageError) as exc_info:
            await service.verify_code("123456", "jane@example.com")
        
        assert exc_info.value.message == "Failed to process verification"
    
    @pytest.mark.asyncio
    async def test_code_without_user_is_backfilled(self, service, codes, users):
        record = codes.add("654321", "jane@example.com", user_id=None)
        users.get_by_email.return_value = SimpleNamespace(id=11)
        
        result = await service.verify_code("654321", "jane@example.com")
        
        assert result["user_id"] == 11
        assert record.user_id == 11
        users.mark_email_verified.assert_awaited_once_with(11)
    
    @pytest.mark.asyncio
    async def test_code_without_known_user(self, service, codes, users):
        codes.add("654321", "ghost@example.com", user_id=None)
        
        result = await service.verify_code("654321", "ghost@example.com")
        
        assert result["success"] is True
        assert result["user_id"] is None
        users.mark_email_verified.assert_not_awaited()
    
    @pytest.mark.asyncio
    async def test_profile_update_failure_does_not_fail(self, service, codes, users):
        codes.add("123456", "jane@example.com", user_id=7)
        users.mark_email_verified.side_effect = RuntimeError("profile table locked")
        
        result = await service.verify_code("123456", "jane@example.com")
        
        assert result["success"] is True
    
    @pytest.mark.asyncio
    async def test_newest_matching_code_is_used(self, service, codes):
        older = codes.add("111111", "jane@example.com", created_at=NOW - timedelta(minutes=5))
        newer = codes.add("111111", "jane@example.com", created_at=NOW - timedelta(minutes=1))
        
        await service.verify_code("111111", "jane@example.com")
        
        assert newer.used_at == NOW
        assert older.used_at is None


class TestIssueCode:
    
    @pytest.mark.asyncio
    async def test_issue_replaces_unused_codes(self, service, codes, mailer):
        codes.add("000000", "jane@example.com", user_id=7)
        
        result = await service.issue_code("Jane@Example.com", 7)
        
        assert result == {"success": True, "message": "Verification code sent successfully"}
        assert len(codes.records) == 1
        record = codes.records[0]
        assert record.email == "jane@example.com"
        assert record.expires_at == NOW + timedelta(minutes=15)
        assert len(record.code) == 6 and record.code.isdigit()
        mailer.send_verification_code.assert_awaited_once_with(
            "jane@example.com", record.code, 15, is_resend=False
        )
    
    @pytest.mark.asyncio
    async def test_resend_message(self, service):
        result = await service.issue_code("jane@example.com", 7, is_resend=True)
        
        assert result["message"] == "Verification code resent successfully"
    
    @pytest.mark.asyncio
    async def test_issued_code_can_be_redeemed(self, service, codes):
        await service.issue_code("jane@example.com", 7)
        
        result = await service.verify_code(codes.records[0].code, "jane@example.com")
        
        assert result["user_id"] == 7
    
    @pytest.mark.asyncio
    async def test_missing_fields(self, service):
        with pytest.raises(MissingVerificationFieldsError) as exc_info:
            await service.issue_code("jane@example.com", None)
        
        assert exc_info.value.message == "Email and user_id are required"
    
    @pytest.mark.asyncio
    async def test_delivery_failure(self, service, mailer):
        mailer.send_verification_code.return_value = False
        
        with pytest.raises(VerificationDeliveryError):
            await service.issue_code("jane@example.com", 7)


class TestGenerateCode:
    
    def test_numeric_of_length(self):
        code = generate_code(8)
        
        assert len(code) == 8
        assert code.isdigit()
