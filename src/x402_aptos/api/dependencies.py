"""FastAPI dependencies for the facilitator API.

Process-wide collaborators (settings, ledger client, fee payer signer) are
created once in the application lifespan and read from ``app.state``.
"""

from __future__ import annotations

from fastapi import Depends, Request

from ..application.use_cases.settlement import SettlementService
from ..application.use_cases.verification import VerificationService
from ..domain.shared import FeePayerSignerProtocol, LedgerClientProtocol
from ..env import Settings


def get_app_settings(request: Request) -> Settings:
    """Get settings the application was created with."""
    return request.app.state.settings


def get_ledger_client(request: Request) -> LedgerClientProtocol:
    """Get the shared ledger client."""
    return request.app.state.ledger_client


def get_fee_payer_signer(request: Request) -> FeePayerSignerProtocol:
    """Get the fee sponsor signer."""
    return request.app.state.fee_payer_signer


def get_verification_service(
    ledger_client: LedgerClientProtocol = Depends(get_ledger_client),
) -> VerificationService:
    """Get verification service."""
    return VerificationService(ledger_client)


def get_settlement_service(
    verification_service: VerificationService = Depends(get_verification_service),
    ledger_client: LedgerClientProtocol = Depends(get_ledger_client),
    fee_payer_signer: FeePayerSignerProtocol = Depends(get_fee_payer_signer),
) -> SettlementService:
    """Get settlement service."""
    return SettlementService(
        verification_service=verification_service,
        ledger_client=ledger_client,
        fee_payer_signer=fee_payer_signer,
    )
