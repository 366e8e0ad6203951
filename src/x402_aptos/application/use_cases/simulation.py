"""Chain simulation gate, the last rule of the verification chain."""

from __future__ import annotations

import logging

from ...aptos.envelope import TransferIntent
from ...domain.errors import PaymentRejected
from ...domain.reasons import InvalidReason
from ...domain.shared import LedgerClientProtocol

logger = logging.getLogger(__name__)


class SimulationGate:
    """Asks the ledger whether a decoded transaction would succeed."""

    def __init__(self, ledger_client: LedgerClientProtocol) -> None:
        self.ledger_client = ledger_client

    async def check(self, intent: TransferIntent) -> None:
        """Simulate ``intent`` with the sender's public key material.

        Raises:
            PaymentRejected: ``simulation_failed: <vm status>`` when the chain
                predicts failure, ``simulation_error: <message>`` when the
                collaborator itself fails.
        """
        try:
            outcome = await self.ledger_client.simulate(
                intent.transaction, intent.signer_public_key
            )
        except Exception as e:
            logger.warning("Simulation request failed for %s: %s", intent.sender, e)
            raise PaymentRejected(InvalidReason.SIMULATION_ERROR.with_detail(str(e))) from e

        if not outcome.success:
            raise PaymentRejected(
                InvalidReason.SIMULATION_FAILED.with_detail(outcome.vm_status)
            )
