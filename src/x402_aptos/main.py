from __future__ import annotations

import asyncio
import logging
import os
import sys
import uvicorn

# Install uvloop for better async performance (Linux/macOS only)
if sys.platform != "win32":
    try:
        import uvloop

        asyncio.set_event_loop_policy(uvloop.EventLoopPolicy())
    except ImportError:
        pass  # uvloop not available, continue with default event loop

from .aptos.signing import Ed25519FeePayerSigner
from .aptos.types import long_form
from .env import get_settings


def _setup_prometheus_multiproc_dir() -> None:
    """Prepare the Prometheus multiprocess directory before Uvicorn starts.

    This ensures each run writes to a clean directory so metrics can be
    correctly aggregated by the multiprocess collector.
    """
    prom_dir = os.environ.get("PROMETHEUS_MULTIPROC_DIR")
    if not prom_dir:
        return

    os.makedirs(prom_dir, exist_ok=True)
    for filename in os.listdir(prom_dir):
        file_path = os.path.join(prom_dir, filename)
        if os.path.isfile(file_path):
            os.remove(file_path)


def main() -> None:
    """Main entry point for the facilitator."""

    settings = get_settings()
    fee_payer = Ed25519FeePayerSigner.from_hex(settings.aptos_private_key).address

    logging.basicConfig(
        level=logging.DEBUG if settings.api_debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    print(f"Starting {settings.app_name} v{settings.app_version}")
    print(f"Network:   {settings.network}")
    print(f"Fee payer: {long_form(fee_payer)}")
    print(f"Node:      {settings.aptos_node_url}")
    print(f"API will be available at: http://{settings.api_host}:{settings.api_port}")
    print("Endpoints: POST /verify, POST /settle, GET /supported, GET /health")

    _setup_prometheus_multiproc_dir()

    uvicorn.run(
        "x402_aptos.api.app:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_debug,
        log_level="info",
    )


if __name__ == "__main__":
    main()
