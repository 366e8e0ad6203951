"""Tests for environment-driven settings."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from x402_aptos.env import Settings, get_settings


def test_defaults_from_environment(
    monkeypatch: pytest.MonkeyPatch, fee_payer_private_key_hex: str
) -> None:
    monkeypatch.setenv("APTOS_PRIVATE_KEY", fee_payer_private_key_hex)
    for name in (
        "FACILITATOR_NETWORK",
        "APTOS_NODE_URL",
        "PORT",
        "FACILITATOR_API_CORS_ORIGINS",
        "FACILITATOR_TX_WAIT_TIMEOUT_SECONDS",
    ):
        monkeypatch.delenv(name, raising=False)

    settings = get_settings()

    assert settings.network == "aptos:2"
    assert settings.api_port == 4022
    assert settings.aptos_node_url == "https://fullnode.testnet.aptoslabs.com/v1"
    assert settings.api_cors_origins == ["*"]
    assert settings.tx_wait_timeout_seconds == 20.0


def test_overrides_from_environment(
    monkeypatch: pytest.MonkeyPatch, fee_payer_private_key_hex: str
) -> None:
    monkeypatch.setenv("APTOS_PRIVATE_KEY", fee_payer_private_key_hex)
    monkeypatch.setenv("FACILITATOR_NETWORK", "aptos:1")
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("FACILITATOR_API_CORS_ORIGINS", "https://a.example,https://b.example")

    settings = get_settings()

    assert settings.network == "aptos:1"
    assert settings.api_port == 8080
    assert settings.api_cors_origins == ["https://a.example", "https://b.example"]


def test_missing_private_key_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("APTOS_PRIVATE_KEY", raising=False)

    with pytest.raises(ValidationError, match="APTOS_PRIVATE_KEY environment variable required"):
        get_settings()


def test_malformed_private_key_is_rejected() -> None:
    with pytest.raises(ValidationError, match="Invalid APTOS_PRIVATE_KEY"):
        Settings(aptos_private_key="0x1234")


def test_aip80_private_key_is_accepted() -> None:
    settings = Settings(aptos_private_key="ed25519-priv-0x" + "11" * 32)

    assert settings.aptos_private_key.startswith("ed25519-priv-")
