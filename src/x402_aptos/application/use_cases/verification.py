"""Verification use case: decode, validate and simulate a payment."""

from __future__ import annotations

import logging
from typing import Optional, Tuple

from ...aptos.envelope import TransferIntent, decode_payment_transaction
from ...domain.entities import PaymentPayload, PaymentRequirements, VerifyResult
from ...domain.errors import DecodeError, PaymentRejected
from ...domain.reasons import InvalidReason
from ...domain.scheme import EXACT_FUNGIBLE_ASSET_TRANSFER, ExactSchemeConfig
from ...domain.shared import LedgerClientProtocol
from .simulation import SimulationGate
from .transfer_validators import (
    validate_network,
    validate_scheme,
    validate_transfer_intent,
)

logger = logging.getLogger(__name__)


class VerificationService:
    """Service that turns a payment and its requirements into a verdict.

    Exactly one reason is reported per call. The payer is reported as soon as
    the sender is decodable, even when a later rule fails.
    """

    def __init__(
        self,
        ledger_client: LedgerClientProtocol,
        config: ExactSchemeConfig = EXACT_FUNGIBLE_ASSET_TRANSFER,
    ) -> None:
        self.config = config
        self.simulation_gate = SimulationGate(ledger_client)

    async def verify(
        self, payload: PaymentPayload, requirements: PaymentRequirements
    ) -> VerifyResult:
        result, _ = await self.verify_intent(payload, requirements)
        return result

    async def verify_intent(
        self, payload: PaymentPayload, requirements: PaymentRequirements
    ) -> Tuple[VerifyResult, Optional[TransferIntent]]:
        """Verify and also return the decoded intent for the settlement path.

        Never raises: unexpected failures become ``unexpected_verify_error``.
        """
        try:
            return await self._run_rules(payload, requirements)
        except Exception:
            logger.exception("Unexpected error while verifying payment")
            return VerifyResult.invalid(InvalidReason.UNEXPECTED_VERIFY_ERROR), None

    async def _run_rules(
        self, payload: PaymentPayload, requirements: PaymentRequirements
    ) -> Tuple[VerifyResult, Optional[TransferIntent]]:
        # 1-2) Scheme and network, before anything is decoded
        try:
            validate_scheme(payload, requirements, self.config)
            validate_network(payload, requirements)
        except PaymentRejected as e:
            return VerifyResult.invalid(e.reason), None

        # 3) Decode the envelope
        try:
            intent = decode_payment_transaction(payload.payload.transaction)
        except DecodeError as e:
            logger.info("Rejecting undecodable payment envelope: %s", e)
            return VerifyResult.invalid(InvalidReason.DECODE_ERROR), None

        payer = str(intent.sender)

        # 4-10) Structural rules, then 11) simulation
        try:
            validate_transfer_intent(intent, requirements, self.config)
            await self.simulation_gate.check(intent)
        except PaymentRejected as e:
            return VerifyResult.invalid(e.reason, payer), intent
        except DecodeError as e:
            logger.info("Rejecting payment with undecodable arguments: %s", e)
            return VerifyResult.invalid(InvalidReason.DECODE_ERROR, payer), intent

        return VerifyResult.valid(payer), intent
