"""Facilitator API routes: verify, settle and capability advertisement."""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Optional, Union

from fastapi import APIRouter, Body, Depends, status
from fastapi.responses import JSONResponse
from prometheus_client import Counter, Gauge, Histogram

from ...application.dtos import (
    PaymentRequestDTO,
    SupportedKindDTO,
    SupportedResponseDTO,
)
from ...application.use_cases.settlement import SettlementService
from ...application.use_cases.verification import VerificationService
from ...aptos.types import long_form
from ...domain.entities import SettleResult, VerifyResult
from ...domain.errors import MalformedPaymentRequest
from ...domain.reasons import InvalidReason
from ...domain.scheme import EXACT_SCHEME, X402_VERSION
from ...domain.shared import FeePayerSignerProtocol
from ...env import Settings
from ..dependencies import (
    get_app_settings,
    get_fee_payer_signer,
    get_settlement_service,
    get_verification_service,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["facilitator"])

verify_requests_total = Counter(
    "facilitator_verify_requests_total",
    "Total verify requests processed",
    ["status"],
)
verify_request_duration_seconds = Histogram(
    "facilitator_verify_request_duration_seconds",
    "Wall time to verify a payment",
    ["status"],
)
settle_requests_total = Counter(
    "facilitator_settle_requests_total",
    "Total settle requests processed",
    ["status"],
)
settle_request_duration_seconds = Histogram(
    "facilitator_settle_request_duration_seconds",
    "Wall time to settle a payment, including confirmation",
    ["status"],
    buckets=(0.5, 1.0, 2.0, 3.0, 5.0, 8.0, 13.0, 21.0, 34.0, float("inf")),
)
settle_requests_inprogress = Gauge(
    "facilitator_settle_requests_inprogress",
    "Number of settlements currently being processed",
    multiprocess_mode="livesum",
)


def _log_json(label: str, obj: Any) -> None:
    logger.info("%s\n%s", label, json.dumps(obj, indent=2, default=str))


def _dump(model: Any) -> Any:
    return model.model_dump(by_alias=True, exclude_none=True)


@router.post(
    "/verify",
    response_model=VerifyResult,
    response_model_exclude_none=True,
    responses={status.HTTP_400_BAD_REQUEST: {"model": VerifyResult}},
)
async def verify_payment(
    request_data: Optional[PaymentRequestDTO] = Body(None),
    verification_service: VerificationService = Depends(get_verification_service),
) -> Union[VerifyResult, JSONResponse]:
    """Verify a payment without executing it."""
    if request_data is None or not request_data.is_complete:
        verify_requests_total.labels(status="bad_request").inc()
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_dump(VerifyResult.invalid(InvalidReason.MISSING_PARAMETERS)),
        )

    _log_json("VERIFY REQUEST", _dump(request_data))
    try:
        payment_payload, payment_requirements = request_data.to_domain()
    except MalformedPaymentRequest as e:
        logger.info("Rejecting malformed verify request: %s", e)
        verify_requests_total.labels(status="invalid").inc()
        return VerifyResult.invalid(e.reason)

    start_time = time.perf_counter()
    try:
        result = await verification_service.verify(payment_payload, payment_requirements)
    except Exception as e:
        logger.exception("Verify endpoint error")
        verify_requests_total.labels(status="server_error").inc()
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_dump(VerifyResult.invalid(str(e))),
        )

    label = "valid" if result.is_valid else "invalid"
    verify_requests_total.labels(status=label).inc()
    verify_request_duration_seconds.labels(status=label).observe(
        time.perf_counter() - start_time
    )
    _log_json("VERIFY RESPONSE", _dump(result))
    return result


@router.post(
    "/settle",
    response_model=SettleResult,
    response_model_exclude_none=True,
    responses={status.HTTP_400_BAD_REQUEST: {"model": SettleResult}},
)
async def settle_payment(
    request_data: Optional[PaymentRequestDTO] = Body(None),
    settlement_service: SettlementService = Depends(get_settlement_service),
) -> Union[SettleResult, JSONResponse]:
    """Submit a verified payment on-chain and wait for confirmation."""
    if request_data is None or not request_data.is_complete:
        settle_requests_total.labels(status="bad_request").inc()
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_dump(SettleResult.failure(InvalidReason.MISSING_PARAMETERS)),
        )

    _log_json("SETTLE REQUEST", _dump(request_data))
    try:
        payment_payload, payment_requirements = request_data.to_domain()
    except MalformedPaymentRequest as e:
        logger.info("Rejecting malformed settle request: %s", e)
        settle_requests_total.labels(status="failure").inc()
        return SettleResult.failure(e.reason, network=e.network)

    start_time = time.perf_counter()
    settle_requests_inprogress.inc()
    try:
        result = await settlement_service.settle(payment_payload, payment_requirements)
    except Exception as e:
        logger.exception("Settle endpoint error")
        settle_requests_total.labels(status="server_error").inc()
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_dump(SettleResult.failure(str(e))),
        )
    finally:
        settle_requests_inprogress.dec()

    label = "success" if result.success else "failure"
    settle_requests_total.labels(status=label).inc()
    settle_request_duration_seconds.labels(status=label).observe(
        time.perf_counter() - start_time
    )
    _log_json("SETTLE RESPONSE", _dump(result))
    return result


@router.get(
    "/supported",
    response_model=SupportedResponseDTO,
    response_model_by_alias=True,
)
async def get_supported(
    settings: Settings = Depends(get_app_settings),
    fee_payer_signer: FeePayerSignerProtocol = Depends(get_fee_payer_signer),
) -> SupportedResponseDTO:
    """Advertise the supported scheme, network and fee payer."""
    return SupportedResponseDTO(
        kinds=[
            SupportedKindDTO(
                x402_version=X402_VERSION,
                scheme=EXACT_SCHEME,
                network=settings.network,
                extra={"sponsored": True},
            )
        ],
        signers={settings.network: long_form(fee_payer_signer.address)},
    )
