"""Login-flow router — request a code by email, then redeem it.

Endpoints
---------
POST /send-otp     → generate + dispatch a code, remember the email in the session
POST /verify-otp   → validate the submitted code for the session's email
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, HTTPException, Request, Response
from pydantic import BaseModel, StringConstraints

from otp_login.config import settings
from otp_login.otp.manager import OTPManager, TransportError
from otp_login.services.session_manager import EMAIL_KEY, SessionManager

logger = logging.getLogger(__name__)

router = APIRouter(tags=["otp"])

INVALID_OTP_MESSAGE = "Invalid or expired OTP"
SEND_FAILED_MESSAGE = "Failed to send OTP. Please try again later."


# ── Request / response models ────────────────────────────

class SendOTPRequest(BaseModel):
    email: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class SendOTPResponse(BaseModel):
    success: bool
    message: str


class VerifyOTPRequest(BaseModel):
    otp: str


class VerifyOTPResponse(BaseModel):
    verified: bool
    message: str


# ── Helpers ──────────────────────────────────────────────

def _otp_manager(request: Request) -> OTPManager:
    return request.app.state.otp_manager


def _session_manager(request: Request) -> SessionManager:
    return request.app.state.session_manager


# ── Endpoints ────────────────────────────────────────────

@router.post("/send-otp", response_model=SendOTPResponse)
async def send_otp(body: SendOTPRequest, request: Request, response: Response):
    """Issue a code for *email* and hand it to the transport.

    The code is stored before delivery is attempted; a failed delivery
    leaves it outstanding until it expires or a new one is requested.
    """
    manager = _otp_manager(request)
    email = body.email

    code = manager.generate(email)
    try:
        await manager.dispatch(email, code)
    except TransportError:
        logger.exception("Error sending OTP to %s", email)
        raise HTTPException(status_code=500, detail=SEND_FAILED_MESSAGE)

    sessions = _session_manager(request)
    session = sessions.get(request.cookies.get(settings.session_cookie_name))
    session.state[EMAIL_KEY] = email
    response.set_cookie(
        settings.session_cookie_name,
        session.session_id,
        httponly=True,
        samesite="lax",
        max_age=manager.ttl_seconds,
    )
    return SendOTPResponse(success=True, message="OTP sent")


@router.post("/verify-otp", response_model=VerifyOTPResponse)
async def verify_otp(body: VerifyOTPRequest, request: Request):
    """Validate the submitted code against the email held in the session."""
    sessions = _session_manager(request)
    session = sessions.find(request.cookies.get(settings.session_cookie_name))
    email = session.email if session else None
    if not email:
        logger.info("OTP verification attempted without a login session")
        return VerifyOTPResponse(verified=False, message=INVALID_OTP_MESSAGE)

    result = _otp_manager(request).validate(email, body.otp.strip())
    if result.ok:
        sessions.clear(session.session_id)
        return VerifyOTPResponse(verified=True, message=f"OTP Verified! Welcome {email}")

    logger.info("OTP verification failed for %s (%s)", email, result.value)
    return VerifyOTPResponse(verified=False, message=INVALID_OTP_MESSAGE)
