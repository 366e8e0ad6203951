"""Payment entities exchanged with merchants and payers."""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from .reasons import InvalidReason
from .scheme import X402_VERSION


class AcceptedRequirements(BaseModel):
    """Scheme and network the payer claims to have paid under."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    scheme: str
    network: str


class AptosPaymentData(BaseModel):
    """Scheme-specific payload: the base64 payment envelope."""

    model_config = ConfigDict(frozen=True)

    transaction: str


class PaymentPayload(BaseModel):
    """Payer-supplied payment, immutable for the lifetime of a request."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    x402_version: int = Field(X402_VERSION, alias="x402Version")
    accepted: AcceptedRequirements
    payload: AptosPaymentData


class PaymentRequirements(BaseModel):
    """Merchant-supplied requirements, immutable for the lifetime of a request.

    ``amount`` is kept as the literal decimal string the merchant sent; it is
    compared by string equality, so ``"0100"`` never matches ``100``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    scheme: str
    network: str
    asset: str
    pay_to: str = Field(..., alias="payTo")
    amount: str
    sponsored: bool = False
    extra: Optional[Dict[str, Any]] = None

    @property
    def is_sponsored(self) -> bool:
        """Sponsored either at the top level or via the x402 ``extra`` bag."""
        return self.sponsored or bool(self.extra and self.extra.get("sponsored") is True)


class VerifyResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    is_valid: bool = Field(..., alias="isValid")
    invalid_reason: Optional[str] = Field(None, alias="invalidReason")
    payer: str = ""

    @classmethod
    def valid(cls, payer: str) -> "VerifyResult":
        return cls(is_valid=True, payer=payer)

    @classmethod
    def invalid(cls, reason: str, payer: str = "") -> "VerifyResult":
        if isinstance(reason, InvalidReason):
            reason = reason.value
        return cls(is_valid=False, invalid_reason=reason, payer=payer)


class SettleResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    transaction: str = ""
    network: str = ""
    payer: str = ""
    error_reason: Optional[str] = Field(None, alias="errorReason")

    @classmethod
    def failure(cls, reason: str, network: str = "", payer: str = "") -> "SettleResult":
        if isinstance(reason, InvalidReason):
            reason = reason.value
        return cls(success=False, network=network, payer=payer, error_reason=reason)
