"""In-memory OTP store with expiry — one outstanding record per identifier."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass
class OtpRecord:
    """A single issued code and its validity window.

    ``code`` is kept out of ``repr`` so records can be logged safely.
    """

    identifier: str
    code: str = field(repr=False)
    issued_at: float
    expires_at: float
    consumed: bool = False

    def is_expired(self, now: float) -> bool:
        return now > self.expires_at

    def is_terminal(self, now: float) -> bool:
        """A consumed or expired record can never validate again."""
        return self.consumed or self.is_expired(now)


class OtpStore:
    """Thread-safe in-memory map of ``identifier → OtpRecord``.

    Every method takes the store lock.  The lock is re-entrant, so a
    caller that needs a read-check-then-write sequence to be atomic can
    wrap it in :pymethod:`locked` and still use the individual methods
    inside the block.
    """

    def __init__(self) -> None:
        self._records: dict[str, OtpRecord] = {}
        self._lock = threading.RLock()

    @contextmanager
    def locked(self) -> Iterator[None]:
        """Hold the store lock for the duration of the ``with`` block."""
        with self._lock:
            yield

    def put(self, record: OtpRecord) -> OtpRecord | None:
        """Store *record*, returning the record it replaced (if any)."""
        with self._lock:
            previous = self._records.get(record.identifier)
            self._records[record.identifier] = record
            return previous

    def get(self, identifier: str) -> OtpRecord | None:
        with self._lock:
            return self._records.get(identifier)

    def remove(self, identifier: str) -> OtpRecord | None:
        with self._lock:
            return self._records.pop(identifier, None)

    def purge_expired(self, now: float) -> int:
        """Drop every record whose validity window has passed."""
        with self._lock:
            expired = [
                identifier
                for identifier, record in self._records.items()
                if record.is_expired(now)
            ]
            for identifier in expired:
                del self._records[identifier]
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._records.clear()
        logger.debug("OTP store cleared")

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __contains__(self, identifier: object) -> bool:
        with self._lock:
            return identifier in self._records
