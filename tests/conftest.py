"""Shared pytest fixtures for facilitator tests."""

from __future__ import annotations

from typing import Any, Callable, Dict

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from x402_aptos.aptos.signing import Ed25519FeePayerSigner
from x402_aptos.domain.entities import PaymentPayload, PaymentRequirements
from x402_aptos.env import Settings

from tests.fixtures import FakeLedgerClient, build_payment, transfer_payload
from tests.fixtures.constants import AMOUNT, ASSET, NETWORK, RECIPIENT
from tests.fixtures.transactions import ed25519_address


@pytest.fixture
def sender_key() -> Ed25519PrivateKey:
    """Generate the payer's key for testing."""
    return Ed25519PrivateKey.generate()


@pytest.fixture
def sender_address(sender_key: Ed25519PrivateKey) -> str:
    return ed25519_address(sender_key)


@pytest.fixture
def fee_payer_private_key_hex() -> str:
    """Get a fresh fee payer private key as 0x-prefixed hex."""
    raw = Ed25519PrivateKey.generate().private_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PrivateFormat.Raw,
        encryption_algorithm=serialization.NoEncryption(),
    )
    return "0x" + raw.hex()


@pytest.fixture
def fee_payer_signer(fee_payer_private_key_hex: str) -> Ed25519FeePayerSigner:
    return Ed25519FeePayerSigner.from_hex(fee_payer_private_key_hex)


@pytest.fixture
def settings(fee_payer_private_key_hex: str) -> Settings:
    return Settings(aptos_private_key=fee_payer_private_key_hex, network=NETWORK)


@pytest.fixture
def ledger_client() -> FakeLedgerClient:
    return FakeLedgerClient()


@pytest.fixture
def transfer_transaction(sender_key: Ed25519PrivateKey) -> str:
    """Base64 envelope paying AMOUNT of ASSET to RECIPIENT."""
    return build_payment(
        sender_key, payload=transfer_payload(ASSET, RECIPIENT, AMOUNT)
    )


@pytest.fixture
def make_payload() -> Callable[..., PaymentPayload]:
    def _make(transaction: str, scheme: str = "exact", network: str = NETWORK) -> PaymentPayload:
        return PaymentPayload.model_validate(
            {
                "x402Version": 2,
                "accepted": {"scheme": scheme, "network": network},
                "payload": {"transaction": transaction},
            }
        )

    return _make


@pytest.fixture
def make_requirements() -> Callable[..., PaymentRequirements]:
    def _make(**overrides: Any) -> PaymentRequirements:
        data: Dict[str, Any] = {
            "scheme": "exact",
            "network": NETWORK,
            "asset": ASSET,
            "payTo": RECIPIENT,
            "amount": str(AMOUNT),
        }
        data.update(overrides)
        return PaymentRequirements.model_validate(data)

    return _make
