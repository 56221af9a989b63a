"""Message transport — abstract interface for out-of-band code delivery."""

from abc import ABC, abstractmethod


class MessageTransport(ABC):
    """Abstract base class for anything that can deliver a code.

    A transport receives the destination identifier and the code, and
    either returns normally (delivered) or raises.  The OTP manager does
    not care *why* delivery failed, only that it did.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable transport name (used in logs)."""

    @abstractmethod
    async def send_code(self, destination: str, code: str) -> None:
        """Deliver *code* to *destination*.

        Parameters
        ----------
        destination:
            Where to send the code, e.g. an email address.
        code:
            The one-time passcode to deliver.
        """


class TransportError(Exception):
    """Raised when a code could not be handed to the message transport."""
