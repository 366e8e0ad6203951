from __future__ import annotations

import os

from pydantic import BaseModel, field_validator

from .aptos.signing import load_ed25519_private_key
from .domain.scheme import DEFAULT_NETWORK


class Settings(BaseModel):
    """Typed application settings built from environment variables."""

    aptos_private_key: str
    network: str = DEFAULT_NETWORK
    aptos_node_url: str = "https://fullnode.testnet.aptoslabs.com/v1"

    # API settings
    api_host: str = "0.0.0.0"
    api_port: int = 4022
    api_debug: bool = False
    api_cors_origins: list[str] = ["*"]

    # Ledger client settings
    http_timeout_seconds: float = 10.0
    tx_wait_timeout_seconds: float = 20.0

    # Application settings
    app_name: str = "x402 Aptos Facilitator"
    app_version: str = "1.0.0"

    @field_validator("aptos_private_key")
    @classmethod
    def validate_aptos_private_key(cls, v: str) -> str:
        if not v:
            raise ValueError("APTOS_PRIVATE_KEY environment variable required")
        try:
            load_ed25519_private_key(v)
        except ValueError as e:
            raise ValueError(f"Invalid APTOS_PRIVATE_KEY: {e}") from e
        return v


def get_settings() -> Settings:
    """Return typed settings instance sourced from env vars."""
    return Settings(
        aptos_private_key=os.environ.get("APTOS_PRIVATE_KEY", ""),
        network=os.environ.get("FACILITATOR_NETWORK", DEFAULT_NETWORK),
        aptos_node_url=os.environ.get(
            "APTOS_NODE_URL", "https://fullnode.testnet.aptoslabs.com/v1"
        ),
        api_host=os.environ.get("FACILITATOR_API_HOST", "0.0.0.0"),
        api_port=int(os.environ.get("PORT", "4022")),
        api_debug=os.environ.get("FACILITATOR_API_DEBUG", "false").lower() == "true",
        api_cors_origins=os.environ.get("FACILITATOR_API_CORS_ORIGINS", "*").split(","),
        http_timeout_seconds=float(
            os.environ.get("FACILITATOR_HTTP_TIMEOUT_SECONDS", "10")
        ),
        tx_wait_timeout_seconds=float(
            os.environ.get("FACILITATOR_TX_WAIT_TIMEOUT_SECONDS", "20")
        ),
        app_name=os.environ.get("FACILITATOR_APP_NAME", "x402 Aptos Facilitator"),
        app_version=os.environ.get("FACILITATOR_APP_VERSION", "1.0.0"),
    )
