"""Ledger client backed by the Aptos SDK REST client."""

from __future__ import annotations

import json
import logging
import math
from contextlib import contextmanager
from types import TracebackType
from typing import Any, Dict, Iterator, Optional, Type

import httpx
from aptos_sdk.async_client import (
    ApiError,
    ClientConfig,
    RestClient,
    TransactionFailed,
    TransactionTimeout,
)
from aptos_sdk.authenticator import AccountAuthenticator

from ..aptos.authenticator import PublicKeyMaterial
from ..aptos.signing import signed_transaction, simulation_transaction
from ..aptos.types import SimpleTransaction
from ..domain.errors import ConfirmationError, ConfirmationTimeout, LedgerRequestError
from ..domain.shared import CommittedTransaction, PendingTransaction, SimulationOutcome

logger = logging.getLogger(__name__)


@contextmanager
def _node_errors() -> Iterator[None]:
    try:
        yield
    except ApiError as e:
        raise LedgerRequestError(
            f"Ledger node returned {e.status_code}: {_node_message(str(e))}",
            status_code=e.status_code,
        ) from e
    except httpx.RequestError as e:
        raise LedgerRequestError(f"Could not reach ledger node: {e}") from e


def _node_message(body: str) -> str:
    """The node's ``message`` field when the error body is JSON, else the body."""
    try:
        data = json.loads(body)
    except ValueError:
        return body
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return body


class AptosRestClient:
    """Adapter from the ledger protocol to ``aptos_sdk.async_client.RestClient``.

    Confirmation polling is the SDK's: once a second until the transaction
    leaves the pending state (a 404 counts as pending) or ``wait_timeout``
    elapses.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        *,
        wait_timeout: float = 20.0,
        rest_client: Optional[RestClient] = None,
    ) -> None:
        if rest_client is None:
            rest_client = RestClient(
                base_url,
                ClientConfig(transaction_wait_in_seconds=math.ceil(wait_timeout)),
            )
            rest_client.client.timeout = httpx.Timeout(timeout)
        self._rest = rest_client

    async def simulate(
        self,
        transaction: SimpleTransaction,
        signer_public_key: PublicKeyMaterial,
    ) -> SimulationOutcome:
        with _node_errors():
            data = await self._rest.simulate_bcs_transaction(
                simulation_transaction(transaction, signer_public_key)
            )
        if not data:
            raise LedgerRequestError("Simulation returned no results")
        result = data[0]
        return SimulationOutcome(
            success=bool(result.get("success")),
            vm_status=str(result.get("vm_status", "")),
        )

    async def submit(
        self,
        transaction: SimpleTransaction,
        sender_authenticator: AccountAuthenticator,
        fee_payer_authenticator: Optional[AccountAuthenticator] = None,
    ) -> PendingTransaction:
        signed = signed_transaction(
            transaction, sender_authenticator, fee_payer_authenticator
        )
        with _node_errors():
            tx_hash = await self._rest.submit_bcs_transaction(signed)
        return PendingTransaction(hash=tx_hash)

    async def _transaction(self, tx_hash: str) -> Dict[str, Any]:
        with _node_errors():
            return await self._rest.transaction_by_hash(tx_hash)

    async def wait_for_transaction(self, tx_hash: str) -> CommittedTransaction:
        try:
            with _node_errors():
                await self._rest.wait_for_transaction(tx_hash)
        except TransactionTimeout as e:
            wait = self._rest.client_config.transaction_wait_in_seconds
            raise ConfirmationTimeout(
                f"Timed out after {wait}s waiting for transaction {tx_hash}"
            ) from e
        except TransactionFailed as e:
            data = await self._transaction(tx_hash)
            raise ConfirmationError(
                f"Transaction {tx_hash} failed with an error: {data.get('vm_status', '')}"
            ) from e

        data = await self._transaction(tx_hash)
        logger.debug("Transaction %s committed at version %s", tx_hash, data.get("version"))
        version = data.get("version")
        return CommittedTransaction(
            hash=tx_hash,
            success=True,
            vm_status=str(data.get("vm_status", "")),
            version=int(version) if version is not None else None,
        )

    async def aclose(self) -> None:
        await self._rest.close()

    async def __aenter__(self) -> "AptosRestClient":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        await self.aclose()
