"""Data Transfer Objects for the facilitator HTTP surface."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..domain.entities import PaymentPayload, PaymentRequirements
from ..domain.errors import MalformedPaymentRequest
from ..domain.reasons import InvalidReason
from ..domain.scheme import EXACT_SCHEME


def _member(data: Any, *path: str) -> Any:
    for key in path:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


class PaymentRequestDTO(BaseModel):
    """Body of ``/verify`` and ``/settle``.

    Members are accepted as raw JSON so that an absent member can be reported
    as ``missing_parameters`` and a malformed one as a regular verdict, never
    as a framework validation error.
    """

    model_config = ConfigDict(populate_by_name=True)

    payment_payload: Optional[Any] = Field(None, alias="paymentPayload")
    payment_requirements: Optional[Any] = Field(None, alias="paymentRequirements")

    @property
    def is_complete(self) -> bool:
        return self.payment_payload is not None and self.payment_requirements is not None

    def to_domain(self) -> Tuple[PaymentPayload, PaymentRequirements]:
        """Validate both members into domain entities.

        Raises:
            MalformedPaymentRequest: ``unsupported_scheme`` when either scheme is
                missing or not ``exact``, ``unexpected_verify_error`` otherwise.
        """
        try:
            return (
                PaymentPayload.model_validate(self.payment_payload),
                PaymentRequirements.model_validate(self.payment_requirements),
            )
        except ValidationError as e:
            schemes = (
                _member(self.payment_payload, "accepted", "scheme"),
                _member(self.payment_requirements, "scheme"),
            )
            if any(scheme != EXACT_SCHEME for scheme in schemes):
                reason = InvalidReason.UNSUPPORTED_SCHEME
            else:
                reason = InvalidReason.UNEXPECTED_VERIFY_ERROR
            network = _member(self.payment_payload, "accepted", "network")
            raise MalformedPaymentRequest(
                reason,
                f"{e.error_count()} invalid field(s)",
                network=network if isinstance(network, str) else "",
            ) from e


class SupportedKindDTO(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    x402_version: int = Field(..., alias="x402Version")
    scheme: str
    network: str
    extra: Dict[str, bool]


class SupportedResponseDTO(BaseModel):
    kinds: List[SupportedKindDTO]
    signers: Dict[str, str]


class HealthResponseDTO(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: str
    network: str
    fee_payer: str = Field(..., alias="feePayer")
