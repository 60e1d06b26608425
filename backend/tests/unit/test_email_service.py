"""
Unit Tests - Email Service
"""
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from gridbazaar.services.email_service import EmailService


@pytest.fixture
def smtp():
    client = MagicMock()
    client.__aenter__.return_value = client
    client.__aexit__.return_value = False
    client.login = AsyncMock()
    client.send_message = AsyncMock()
    return client


@pytest.fixture
def service(monkeypatch, smtp):
    service = EmailService()
    monkeypatch.setattr(service.config, "SMTP_USER", "mailer@gridbazaar.com")
    monkeypatch.setattr(service.config, "SMTP_PASSWORD", "app-password")
    with patch.object(service, "_smtp_client", return_value=smtp):
        yield service


class TestSendEmail:
    
    @pytest.mark.asyncio
    async def test_sends_and_closes(self, service, smtp):
        sent = await service.send_email("jane@example.com", "Hello", "<p>Hi</p>", "Hi")
        
        assert sent is True
        smtp.login.assert_awaited_once_with("mailer@gridbazaar.com", "app-password")
        message = smtp.send_message.call_args[0][0]
        assert message["To"] == "jane@example.com"
        smtp.__aexit__.assert_awaited_once()
    
    @pytest.mark.asyncio
    async def test_connection_closed_when_send_fails(self, service, smtp):
        smtp.send_message.side_effect = ConnectionResetError("server hung up")
        
        sent = await service.send_email("jane@example.com", "Hello", "<p>Hi</p>")
        
        assert sent is False
        smtp.__aexit__.assert_awaited_once()
    
    @pytest.mark.asyncio
    async def test_not_configured(self, monkeypatch, smtp):
        service = EmailService()
        monkeypatch.setattr(service.config, "SMTP_USER", "")
        
        assert await service.send_email("jane@example.com", "Hello", "<p>Hi</p>") is False


class TestVerificationEmail:
    
    @pytest.mark.asyncio
    async def test_subject_carries_code(self, service, smtp):
        sent = await service.send_verification_code("jane@example.com", "042917", 15)
        
        assert sent is True
        message = smtp.send_message.call_args[0][0]
        assert message["Subject"] == "Your GridBazaar verification code: 042917"
