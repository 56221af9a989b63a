"""Background task that periodically drops expired OTP records."""

from __future__ import annotations

import asyncio
import logging

from otp_login.otp.manager import OTPManager

logger = logging.getLogger(__name__)


async def run_sweeper(manager: OTPManager, interval: float) -> None:
    """Sweep *manager*'s store every *interval* seconds until cancelled."""
    if interval <= 0:
        raise ValueError("sweep interval must be positive")

    logger.info("OTP expiry sweeper started (every %ss)", interval)
    try:
        while True:
            await asyncio.sleep(interval)
            manager.sweep()
    finally:
        logger.info("OTP expiry sweeper stopped")
