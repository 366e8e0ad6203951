"""Tests for the assembled facilitator application."""

from __future__ import annotations

from typing import Iterator

import pytest
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from fastapi.testclient import TestClient

from x402_aptos.api.app import create_app
from x402_aptos.aptos.signing import Ed25519FeePayerSigner
from x402_aptos.aptos.types import long_form
from x402_aptos.env import Settings

from tests.fixtures import FakeLedgerClient, build_payment
from tests.fixtures.constants import ASSET, NETWORK, RECIPIENT
from tests.fixtures.transactions import entry_function_payload


@pytest.fixture
def client(
    settings: Settings,
    ledger_client: FakeLedgerClient,
    fee_payer_signer: Ed25519FeePayerSigner,
) -> Iterator[TestClient]:
    app = create_app(
        settings, ledger_client=ledger_client, fee_payer_signer=fee_payer_signer
    )
    with TestClient(app) as test_client:
        yield test_client


def _body(transaction: str, **requirement_overrides) -> dict:
    requirements = {
        "scheme": "exact",
        "network": NETWORK,
        "asset": ASSET,
        "payTo": RECIPIENT,
        "amount": "5000",
    }
    requirements.update(requirement_overrides)
    return {
        "paymentPayload": {
            "x402Version": 2,
            "accepted": {"scheme": "exact", "network": NETWORK},
            "payload": {"transaction": transaction},
        },
        "paymentRequirements": requirements,
    }


def test_health(client: TestClient, fee_payer_signer: Ed25519FeePayerSigner) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {
        "status": "ok",
        "network": NETWORK,
        "feePayer": long_form(fee_payer_signer.address),
    }


def test_supported_advertises_fee_payer(
    client: TestClient, fee_payer_signer: Ed25519FeePayerSigner
) -> None:
    data = client.get("/supported").json()

    assert data["kinds"][0]["network"] == NETWORK
    assert data["kinds"][0]["extra"] == {"sponsored": True}
    assert data["signers"] == {NETWORK: long_form(fee_payer_signer.address)}


def test_verify_end_to_end(
    client: TestClient, transfer_transaction: str, sender_address: str
) -> None:
    response = client.post("/verify", json=_body(transfer_transaction))

    assert response.status_code == 200
    assert response.json() == {"isValid": True, "payer": sender_address}


def test_verify_unknown_scheme_end_to_end(client: TestClient, transfer_transaction: str) -> None:
    response = client.post("/verify", json=_body(transfer_transaction, scheme="upto"))

    assert response.status_code == 200
    assert response.json() == {
        "isValid": False,
        "invalidReason": "unsupported_scheme",
        "payer": "",
    }


def test_verify_numeric_amount_end_to_end(
    client: TestClient, ledger_client: FakeLedgerClient, transfer_transaction: str
) -> None:
    response = client.post("/verify", json=_body(transfer_transaction, amount=5000))

    assert response.status_code == 200
    assert response.json() == {
        "isValid": False,
        "invalidReason": "unexpected_verify_error",
        "payer": "",
    }
    assert ledger_client.simulations == []


def test_verify_requirements_without_scheme_end_to_end(
    client: TestClient, transfer_transaction: str
) -> None:
    body = _body(transfer_transaction)
    del body["paymentRequirements"]["scheme"]

    response = client.post("/verify", json=body)

    assert response.status_code == 200
    assert response.json()["invalidReason"] == "unsupported_scheme"


def test_verify_missing_member_end_to_end(client: TestClient, transfer_transaction: str) -> None:
    body = _body(transfer_transaction)
    del body["paymentRequirements"]

    response = client.post("/verify", json=body)

    assert response.status_code == 400
    assert response.json()["invalidReason"] == "missing_parameters"


def test_verify_deeply_nested_type_argument_end_to_end(
    client: TestClient, sender_key: Ed25519PrivateKey
) -> None:
    payload = entry_function_payload(type_args=[bytes([6]) * 5000 + b"\x00"])
    response = client.post("/verify", json=_body(build_payment(sender_key, payload=payload)))

    assert response.status_code == 200
    assert response.json() == {
        "isValid": False,
        "invalidReason": "invalid_payment_decode_error",
        "payer": "",
    }


def test_settle_numeric_amount_end_to_end(
    client: TestClient, ledger_client: FakeLedgerClient, transfer_transaction: str
) -> None:
    response = client.post("/settle", json=_body(transfer_transaction, amount=5000))

    assert response.status_code == 200
    assert response.json() == {
        "success": False,
        "transaction": "",
        "network": NETWORK,
        "payer": "",
        "errorReason": "unexpected_verify_error",
    }
    assert ledger_client.submissions == []


def test_settle_sponsored_end_to_end(
    client: TestClient,
    ledger_client: FakeLedgerClient,
    fee_payer_signer: Ed25519FeePayerSigner,
    transfer_transaction: str,
    sender_address: str,
) -> None:
    response = client.post(
        "/settle", json=_body(transfer_transaction, extra={"sponsored": True})
    )

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "transaction": ledger_client.tx_hash,
        "network": NETWORK,
        "payer": sender_address,
    }
    assert ledger_client.submissions[0].fee_payer_address == fee_payer_signer.address


def test_injected_ledger_client_is_not_closed(
    settings: Settings,
    ledger_client: FakeLedgerClient,
    fee_payer_signer: Ed25519FeePayerSigner,
) -> None:
    app = create_app(settings, ledger_client=ledger_client, fee_payer_signer=fee_payer_signer)
    with TestClient(app):
        pass

    assert ledger_client.closed is False


def test_metrics_endpoint(client: TestClient) -> None:
    client.post("/verify", json={})

    response = client.get("/metrics/")

    assert response.status_code == 200
    assert "facilitator_verify_requests_total" in response.text
