"""Settlement use case: verify, optionally sponsor, submit and confirm."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from aptos_sdk.authenticator import AccountAuthenticator

from ...aptos.envelope import TransferIntent
from ...domain.entities import PaymentPayload, PaymentRequirements, SettleResult
from ...domain.reasons import InvalidReason
from ...domain.shared import FeePayerSignerProtocol, LedgerClientProtocol
from .verification import VerificationService

logger = logging.getLogger(__name__)


class SettlementState(str, Enum):
    INIT = "init"
    VERIFYING = "verifying"
    INVALID = "invalid"
    VERIFIED = "verified"
    SIGNING = "signing"
    SUBMITTING = "submitting"
    CONFIRMING = "confirming"
    CONFIRMED = "confirmed"
    FAILED = "failed"


class SettlementService:
    """Service that executes a verified payment on-chain.

    Verification is always re-run here, never trusted from an earlier call,
    so settle is safe to call without a prior verify. Nothing is retried:
    every failure is reported as a terminal result.

    Concurrent sponsored settlements share the sponsor account and may race on
    its sequence number; sequencing is left to the ledger collaborator.
    """

    def __init__(
        self,
        verification_service: VerificationService,
        ledger_client: LedgerClientProtocol,
        fee_payer_signer: FeePayerSignerProtocol,
    ) -> None:
        self.verification_service = verification_service
        self.ledger_client = ledger_client
        self.fee_payer_signer = fee_payer_signer

    def _transition(self, state: SettlementState, payer: str) -> None:
        logger.debug("Settlement for payer %s -> %s", payer or "<unknown>", state.value)

    async def settle(
        self, payload: PaymentPayload, requirements: PaymentRequirements
    ) -> SettleResult:
        self._transition(SettlementState.VERIFYING, "")
        verify_result, intent = await self.verification_service.verify_intent(
            payload, requirements
        )
        payer = verify_result.payer
        if not verify_result.is_valid or intent is None:
            self._transition(SettlementState.INVALID, payer)
            return SettleResult.failure(
                verify_result.invalid_reason or InvalidReason.VERIFICATION_FAILED,
                network=payload.accepted.network,
                payer=payer,
            )
        self._transition(SettlementState.VERIFIED, payer)

        try:
            fee_payer_authenticator: Optional[AccountAuthenticator] = None
            if requirements.is_sponsored:
                self._transition(SettlementState.SIGNING, payer)
                fee_payer_authenticator = self._sponsor(intent)

            self._transition(SettlementState.SUBMITTING, payer)
            pending = await self.ledger_client.submit(
                intent.transaction,
                intent.sender_authenticator,
                fee_payer_authenticator,
            )

            # Once submitted, the wait always runs to completion.
            self._transition(SettlementState.CONFIRMING, payer)
            await self.ledger_client.wait_for_transaction(pending.hash)
        except Exception as e:
            logger.warning("Settlement failed for payer %s: %s", payer, e)
            self._transition(SettlementState.FAILED, payer)
            return SettleResult.failure(
                InvalidReason.TRANSACTION_FAILED.with_detail(str(e)),
                network=payload.accepted.network,
                payer=payer,
            )

        self._transition(SettlementState.CONFIRMED, payer)
        logger.info("Settled payment from %s in transaction %s", payer, pending.hash)
        return SettleResult(
            success=True,
            transaction=pending.hash,
            network=requirements.network,
            payer=payer,
        )

    def _sponsor(self, intent: TransferIntent) -> AccountAuthenticator:
        """Attach the sponsor as fee payer and co-sign.

        This is the only mutation of request-derived state in the pipeline.
        """
        intent.transaction.fee_payer_address = self.fee_payer_signer.address
        return self.fee_payer_signer.co_sign(intent.transaction)
