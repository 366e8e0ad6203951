"""FastAPI application configuration."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import make_asgi_app

from ..application.dtos import HealthResponseDTO
from ..aptos.signing import Ed25519FeePayerSigner
from ..aptos.types import long_form
from ..domain.shared import FeePayerSignerProtocol, LedgerClientProtocol
from ..env import Settings, get_settings
from ..infrastructure.aptos_client import AptosRestClient
from .routers import facilitator


def create_app(
    settings: Optional[Settings] = None,
    *,
    ledger_client: Optional[LedgerClientProtocol] = None,
    fee_payer_signer: Optional[FeePayerSignerProtocol] = None,
) -> FastAPI:
    """Create and configure FastAPI application.

    ``ledger_client`` and ``fee_payer_signer`` default to the Aptos REST client
    and the Ed25519 signer built from ``settings``. A ledger client passed in
    is owned by the caller and not closed on shutdown.
    """
    settings = settings or get_settings()
    signer = fee_payer_signer or Ed25519FeePayerSigner.from_hex(settings.aptos_private_key)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if ledger_client is not None:
            app.state.ledger_client = ledger_client
            yield
            return
        async with AptosRestClient(
            settings.aptos_node_url,
            timeout=settings.http_timeout_seconds,
            wait_timeout=settings.tx_wait_timeout_seconds,
        ) as client:
            app.state.ledger_client = client
            yield

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="x402 facilitator for exact fungible-asset payments on Aptos",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.fee_payer_signer = signer

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api_cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(facilitator.router)
    app.mount("/metrics", make_asgi_app())

    @app.get("/health", response_model=HealthResponseDTO)
    async def health_check(request: Request) -> HealthResponseDTO:
        """Health check endpoint."""
        return HealthResponseDTO(
            status="ok",
            network=request.app.state.settings.network,
            fee_payer=long_form(request.app.state.fee_payer_signer.address),
        )

    return app
