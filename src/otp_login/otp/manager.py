"""OTP manager — issues, dispatches and validates one-time passcodes.

The manager owns an :class:`OtpStore` handed to it by the caller.  Codes
are drawn from :mod:`secrets`, compared with :func:`hmac.compare_digest`,
and retired either by one successful validation or by expiry.
"""

from __future__ import annotations

import enum
import hmac
import logging
import secrets
import time
from collections.abc import Callable

from otp_login.config import settings
from otp_login.otp.store import OtpRecord, OtpStore
from otp_login.services.transport import MessageTransport, TransportError

logger = logging.getLogger(__name__)


class VerifyResult(enum.Enum):
    """Outcome of :pymethod:`OTPManager.validate`.

    Callers facing end users should collapse every non-``VERIFIED`` value
    into one generic message; the distinction is for logs and tests.
    """

    VERIFIED = "verified"
    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    ALREADY_USED = "already_used"
    MISMATCH = "mismatch"

    @property
    def ok(self) -> bool:
        return self is VerifyResult.VERIFIED


def generate_code(length: int, alphabet: str) -> str:
    """Return a random code of *length* characters from *alphabet*."""
    if length < 1:
        raise ValueError("OTP length must be positive")
    if not alphabet:
        raise ValueError("OTP alphabet must not be empty")
    return "".join(secrets.choice(alphabet) for _ in range(length))


class OTPManager:
    """Generate → dispatch → validate lifecycle for one-time passcodes.

    Parameters
    ----------
    store:
        The record store.  Injected so tests can inspect or reset it.
    transport:
        Delivers codes out-of-band (see :pymethod:`dispatch`).
    ttl_seconds, code_length, alphabet:
        Validity window and code shape; default to the app settings.
    clock:
        Returns the current time in seconds.  Defaults to ``time.monotonic``
        so wall-clock adjustments never stretch or shrink the window.
    """

    def __init__(
        self,
        store: OtpStore,
        transport: MessageTransport,
        *,
        ttl_seconds: int | None = None,
        code_length: int | None = None,
        alphabet: str | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._store = store
        self._transport = transport
        self._ttl = settings.otp_ttl_seconds if ttl_seconds is None else ttl_seconds
        self._length = settings.otp_length if code_length is None else code_length
        self._alphabet = alphabet or settings.otp_alphabet
        self._clock = clock

    @property
    def store(self) -> OtpStore:
        return self._store

    @property
    def ttl_seconds(self) -> int:
        return self._ttl

    # ── Generate ─────────────────────────────────────────

    def generate(self, identifier: str) -> str:
        """Issue a fresh code for *identifier*, replacing any outstanding one."""
        code = generate_code(self._length, self._alphabet)
        now = self._clock()
        record = OtpRecord(
            identifier=identifier,
            code=code,
            issued_at=now,
            expires_at=now + self._ttl,
        )
        previous = self._store.put(record)
        if previous is not None and not previous.is_terminal(now):
            logger.info("OTP for %s superseded by a new code", identifier)
        logger.info("OTP generated for %s (valid %ss)", identifier, self._ttl)
        return code

    # ── Dispatch ─────────────────────────────────────────

    async def dispatch(self, identifier: str, code: str) -> None:
        """Hand *code* to the transport for delivery to *identifier*.

        Runs outside the store lock.  On failure the stored record is left
        as-is and :class:`TransportError` is raised.
        """
        try:
            await self._transport.send_code(identifier, code)
        except TransportError:
            logger.error("OTP dispatch to %s failed via %s", identifier, self._transport.name)
            raise
        except Exception as exc:
            logger.error(
                "OTP dispatch to %s failed via %s: %s",
                identifier,
                self._transport.name,
                exc,
            )
            raise TransportError(f"could not deliver code to {identifier}") from exc
        logger.info("OTP dispatched to %s via %s", identifier, self._transport.name)

    # ── Validate ─────────────────────────────────────────

    def validate(self, identifier: str, submitted_code: str) -> VerifyResult:
        """Check *submitted_code* against the outstanding record.

        Lookup, checks and consumption happen under the store lock, so of
        several concurrent calls with the right code exactly one wins.  A
        wrong code leaves the record live.
        """
        with self._store.locked():
            now = self._clock()
            record = self._store.get(identifier)
            result = self._check(record, submitted_code, now)
            if result is VerifyResult.VERIFIED:
                record.consumed = True
            elif result is VerifyResult.EXPIRED:
                self._store.remove(identifier)

        logger.info("OTP validation for %s: %s", identifier, result.value)
        return result

    @staticmethod
    def _check(record: OtpRecord | None, submitted_code: str, now: float) -> VerifyResult:
        if record is None:
            return VerifyResult.NOT_FOUND
        if record.consumed:
            return VerifyResult.ALREADY_USED
        if record.is_expired(now):
            return VerifyResult.EXPIRED
        if not hmac.compare_digest(
            record.code.encode("utf-8"), (submitted_code or "").encode("utf-8")
        ):
            return VerifyResult.MISMATCH
        return VerifyResult.VERIFIED

    # ── Housekeeping ─────────────────────────────────────

    def sweep(self) -> int:
        """Remove expired records; returns how many were dropped."""
        removed = self._store.purge_expired(self._clock())
        if removed:
            logger.info("Expiry sweep removed %d OTP record(s)", removed)
        else:
            logger.debug("Expiry sweep found nothing to remove")
        return removed
