"""Reason codes reported by verify and settle."""

from __future__ import annotations

from enum import Enum


class InvalidReason(str, Enum):
    """Fixed set of reasons a payment is rejected."""

    MISSING_PARAMETERS = "missing_parameters"
    UNSUPPORTED_SCHEME = "unsupported_scheme"
    NETWORK_MISMATCH = "network_mismatch"
    DECODE_ERROR = "invalid_payment_decode_error"
    MISSING_ENTRY_FUNCTION = "invalid_payment_missing_entry_function"
    WRONG_FUNCTION = "invalid_payment_wrong_function"
    WRONG_TYPE_ARGS = "invalid_payment_wrong_type_args"
    WRONG_ARGS = "invalid_payment_wrong_args"
    ASSET_MISMATCH = "invalid_payment_asset_mismatch"
    RECIPIENT_MISMATCH = "invalid_payment_recipient_mismatch"
    AMOUNT_MISMATCH = "invalid_payment_amount_mismatch"
    SIMULATION_FAILED = "simulation_failed"
    SIMULATION_ERROR = "simulation_error"
    UNEXPECTED_VERIFY_ERROR = "unexpected_verify_error"
    VERIFICATION_FAILED = "verification_failed"
    TRANSACTION_FAILED = "transaction_failed"

    def with_detail(self, detail: str) -> str:
        """Render the reason with a free-form suffix, e.g. ``simulation_failed: OUT_OF_GAS``."""
        return f"{self.value}: {detail}"
