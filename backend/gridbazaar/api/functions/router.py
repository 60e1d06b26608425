"""
GridBazaar - Function Handlers

Standalone HTTP handlers mounted under the functions prefix:
- get-mapbox-config
- verify-email-code
- send-verification-code

Verification handlers answer ``{"success": false, "error": ...}`` on
failure; map configuration errors go through the application handler.
"""
import json
from typing import Any

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import ValidationError

from gridbazaar.dependencies import get_verification_service
from gridbazaar.core.map_config import get_mapbox_config
from gridbazaar.core.verification.service import EmailVerificationService
from gridbazaar.schemas.functions import (
    MapboxConfigResponse,
    SendVerificationCodeRequest,
    VerifyEmailCodeRequest,
)
from gridbazaar.utils.exceptions import VerificationError

functions_router = APIRouter()


def _failure(status_code: int, error: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": error})


async def _read_body(request: Request, model):
    """Parse a JSON object body into ``model``; None when malformed."""
    try:
        payload: Any = await request.json()
        if not isinstance(payload, dict):
            return None
        return model.model_validate(payload)
    except (json.JSONDecodeError, UnicodeDecodeError, ValidationError):
        return None


@functions_router.api_route(
    "/get-mapbox-config",
    methods=["GET", "POST"],
    response_model=MapboxConfigResponse,
    tags=["Functions"],
)
async def mapbox_config():
    """Public map token for the browser."""
    return get_mapbox_config()


@functions_router.post("/verify-email-code", tags=["Functions"])
async def verify_email_code(
    request: Request,
    service: EmailVerificationService = Depends(get_verification_service),
):
    """Redeem an email verification code."""
    body = await _read_body(request, VerifyEmailCodeRequest)
    if body is None:
        return _failure(status.HTTP_400_BAD_REQUEST, "Invalid JSON body")
    
    try:
        return await service.verify_code(body.code, body.email)
    except VerificationError as e:
        return _failure(e.status_code, e.message)
    except Exception as e:
        logger.error(f"Unexpected error verifying email code: {e}")
        return _failure(status.HTTP_500_INTERNAL_SERVER_ERROR, "An unexpected error occurred")


@functions_router.api_route(
    "/verify-email-code",
    methods=["GET", "HEAD", "PUT", "PATCH", "DELETE", "OPTIONS"],
    include_in_schema=False,
)
async def verify_email_code_method_not_allowed():
    return _failure(status.HTTP_405_METHOD_NOT_ALLOWED, "Method not allowed")


@functions_router.post("/send-verification-code", tags=["Functions"])
async def send_verification_code(
    request: Request,
    service: EmailVerificationService = Depends(get_verification_service),
):
    """Issue a fresh verification code and email it."""
    body = await _read_body(request, SendVerificationCodeRequest)
    if body is None:
        return _failure(status.HTTP_400_BAD_REQUEST, "Invalid JSON body")
    
    try:
        return await service.issue_code(body.email, body.user_id, is_resend=body.is_resend)
    except VerificationError as e:
        return _failure(e.status_code, e.message)
    except Exception as e:
        logger.error(f"Unexpected error sending verification code: {e}")
        return _failure(status.HTTP_500_INTERNAL_SERVER_ERROR, "An unexpected error occurred")
