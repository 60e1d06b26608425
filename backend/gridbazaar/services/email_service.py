"""
GridBazaar - Email Service

Sends transactional email via SMTP:
- Email verification codes
"""
import aiosmtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import Optional
from loguru import logger
from jinja2 import Template
import os


class EmailConfig:
    """Email configuration from environment."""
    
    SMTP_HOST: str = os.getenv("SMTP_HOST", "smtp.gmail.com")
    SMTP_PORT: int = int(os.getenv("SMTP_PORT", "587"))
    SMTP_USER: str = os.getenv("SMTP_USER", "")
    SMTP_PASSWORD: str = os.getenv("SMTP_PASSWORD", "")
    SMTP_FROM_NAME: str = os.getenv("SMTP_FROM_NAME", "GridBazaar")
    SMTP_FROM_EMAIL: str = os.getenv("SMTP_FROM_EMAIL", "noreply@gridbazaar.com")
    SMTP_USE_TLS: bool = os.getenv("SMTP_USE_TLS", "true").lower() == "true"
    
    @classmethod
    def is_configured(cls) -> bool:
        """Check if email is properly configured."""
        return bool(cls.SMTP_USER and cls.SMTP_PASSWORD)


# Email Templates
TEMPLATES = {
    "verification_code": """
<!DOCTYPE html>
<html>
<head>
    <style>
        body { font-family: Arial, sans-serif; background-color: #f4f6f8; color: #1f2937; padding: 20px; }
        .container { max-width: 560px; margin: 0 auto; background: #ffffff; border-radius: 10px; padding: 30px; }
        .header { text-align: center; border-bottom: 2px solid #e5e7eb; padding-bottom: 20px; margin-bottom: 20px; }
        .header h1 { color: #0f766e; margin: 0; }
        .code { font-size: 36px; font-weight: bold; letter-spacing: 8px; text-align: center; margin: 30px 0; color: #111827; }
        .note { color: #6b7280; font-size: 14px; text-align: center; }
        .footer { text-align: center; margin-top: 30px; color: #9ca3af; font-size: 12px; }
    </style>
</head>
<body>
    <div class="container">
        <div class="header">
            <h1>⚡ GridBazaar</h1>
        </div>
        <p>{{ 'Here is your new verification code.' if is_resend else 'Welcome! Use this code to verify your email address.' }}</p>
        <div class="code">{{ code }}</div>
        <p class="note">The code expires in {{ ttl_minutes }} minutes. If you did not request it, you can ignore this email.</p>
        <div class="footer">
            <p>GridBazaar - Energy Infrastructure Marketplace</p>
        </div>
    </div>
</body>
</html>
""",
}

VERIFICATION_TEXT = Template(
    "Your GridBazaar verification code is {{ code }}.\n"
    "It expires in {{ ttl_minutes }} minutes."
)


class EmailService:
    """Async email service for transactional messages."""
    
    def __init__(self):
        self.config = EmailConfig
    
    def is_enabled(self) -> bool:
        """Check if email service is enabled and configured."""
        return self.config.is_configured()
    
    def _smtp_client(self) -> aiosmtplib.SMTP:
        """SMTP client; connects on entering its context and quits on exit."""
        return aiosmtplib.SMTP(
            hostname=self.config.SMTP_HOST,
            port=self.config.SMTP_PORT,
            use_tls=False,  # STARTTLS when configured
            start_tls=self.config.SMTP_USE_TLS,
        )
    
    async def send_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None,
    ) -> bool:
        """
        Send an email.
        
        Args:
            to_email: Recipient email address
            subject: Email subject
            html_content: HTML body
            text_content: Plain text body (optional)
            
        Returns:
            True if sent successfully, False otherwise
        """
        if not self.is_enabled():
            logger.warning("Email service not configured, skipping email send")
            return False
        
        try:
            msg = MIMEMultipart("alternative")
            msg["Subject"] = subject
            msg["From"] = f"{self.config.SMTP_FROM_NAME} <{self.config.SMTP_FROM_EMAIL}>"
            msg["To"] = to_email
            
            if text_content:
                msg.attach(MIMEText(text_content, "plain"))
            msg.attach(MIMEText(html_content, "html"))
            
            async with self._smtp_client() as smtp:
                await smtp.login(self.config.SMTP_USER, self.config.SMTP_PASSWORD)
                await smtp.send_message(msg)
            
            logger.info(f"Email sent successfully to {to_email}: {subject}")
            return True
            
        except Exception as e:
            logger.error(f"Failed to send email to {to_email}: {e}")
            return False
    
    async def send_verification_code(
        self,
        to_email: str,
        code: str,
        ttl_minutes: int,
        is_resend: bool = False,
    ) -> bool:
        """Send an email verification code."""
        context = {"code": code, "ttl_minutes": ttl_minutes, "is_resend": is_resend}
        html = Template(TEMPLATES["verification_code"]).render(**context)
        return await self.send_email(
            to_email=to_email,
            subject=f"Your GridBazaar verification code: {code}",
            html_content=html,
            text_content=VERIFICATION_TEXT.render(**context),
        )


# Global instance
email_service = EmailService()
