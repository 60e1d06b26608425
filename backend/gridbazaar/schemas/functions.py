"""
GridBazaar - Function Handler Schemas
Request bodies of the serverless-style handlers
"""
from typing import Optional
from pydantic import BaseModel


class VerifyEmailCodeRequest(BaseModel):
    """Body of verify-email-code; fields validated by the handler."""
    code: Optional[str] = None
    email: Optional[str] = None


class SendVerificationCodeRequest(BaseModel):
    """Body of send-verification-code."""
    email: Optional[str] = None
    user_id: Optional[int] = None
    is_resend: bool = False


class MapboxConfigResponse(BaseModel):
    mapboxToken: str

