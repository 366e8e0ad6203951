"""Pytest fixtures for use case tests."""

from __future__ import annotations

import pytest

from x402_aptos.application.use_cases.settlement import SettlementService
from x402_aptos.application.use_cases.verification import VerificationService
from x402_aptos.aptos.signing import Ed25519FeePayerSigner

from tests.fixtures import FakeLedgerClient


@pytest.fixture
def verification_service(ledger_client: FakeLedgerClient) -> VerificationService:
    """Create a verification service backed by the in-memory ledger."""
    return VerificationService(ledger_client)


@pytest.fixture
def settlement_service(
    verification_service: VerificationService,
    ledger_client: FakeLedgerClient,
    fee_payer_signer: Ed25519FeePayerSigner,
) -> SettlementService:
    """Create a settlement service sharing the in-memory ledger."""
    return SettlementService(verification_service, ledger_client, fee_payer_signer)
