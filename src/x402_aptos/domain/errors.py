"""Domain-specific exceptions."""

from __future__ import annotations

from typing import Optional, Union

from .reasons import InvalidReason


class DecodeError(ValueError):
    """Raised when a payment envelope cannot be decoded."""


class PaymentRejected(Exception):
    """Raised by a validation rule when a payment does not satisfy requirements."""

    def __init__(self, reason: Union[InvalidReason, str]) -> None:
        self.reason = reason.value if isinstance(reason, InvalidReason) else reason
        super().__init__(self.reason)


class LedgerError(Exception):
    """Base class for failures reported by the ledger collaborator."""


class LedgerRequestError(LedgerError):
    """Raised when the ledger node rejects a request."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class ConfirmationTimeout(LedgerError):
    """Raised when a submitted transaction does not reach a terminal state in time."""


class ConfirmationError(LedgerError):
    """Raised when a submitted transaction is committed but fails on-chain."""


class MalformedPaymentRequest(Exception):
    """Raised when a request member is present but does not match its schema.

    ``network`` is the network the payer claimed, when it could be read.
    """

    def __init__(self, reason: InvalidReason, detail: str, network: str = "") -> None:
        self.reason = reason
        self.network = network
        super().__init__(f"{reason.value}: {detail}")
