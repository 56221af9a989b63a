"""Email service — delivers one-time passcodes via async SMTP."""

from __future__ import annotations

import logging
from email.message import EmailMessage

import aiosmtplib

from otp_login.config import Settings, settings as default_settings
from otp_login.services.transport import MessageTransport, TransportError

logger = logging.getLogger(__name__)


class EmailService(MessageTransport):
    """Sends OTP emails using the configured SMTP server.

    When no ``smtp_host`` is configured the message is logged instead of
    sent, so the login flow can be exercised locally without a mail
    server.
    """

    def __init__(self, config: Settings | None = None) -> None:
        self._settings = config or default_settings

    @property
    def name(self) -> str:
        return "EmailService"

    def build_message(self, to_email: str, code: str) -> EmailMessage:
        """Compose the OTP email for *to_email*."""
        cfg = self._settings
        minutes = max(1, cfg.otp_ttl_seconds // 60)
        body = (
            "Hello,\n\n"
            f"Your {cfg.app_name} verification code is: {code}\n\n"
            f"The code expires in {minutes} minute{'s' if minutes != 1 else ''} "
            "and can be used only once.\n\n"
            "If you did not request this code, you can ignore this email.\n\n"
            f"The {cfg.app_name} Team"
        )

        msg = EmailMessage()
        msg["Subject"] = f"Your {cfg.app_name} verification code"
        msg["From"] = cfg.email_from
        msg["To"] = to_email
        msg.set_content(body)
        return msg

    async def send_code(self, destination: str, code: str) -> None:
        cfg = self._settings
        if not cfg.smtp_host:
            logger.warning(
                "SMTP_HOST not set — OTP for %s logged only: %s", destination, code
            )
            return

        msg = self.build_message(destination, code)
        logger.info("Sending OTP email to %s", destination)

        try:
            await aiosmtplib.send(
                msg,
                hostname=cfg.smtp_host,
                port=cfg.smtp_port,
                username=cfg.smtp_username or None,
                password=cfg.smtp_password or None,
                start_tls=cfg.smtp_start_tls,
            )
        except (aiosmtplib.SMTPException, OSError) as exc:
            raise TransportError(f"SMTP delivery to {destination} failed: {exc}") from exc

        logger.info("OTP email sent to %s", destination)
