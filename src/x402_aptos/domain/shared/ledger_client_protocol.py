"""Protocol interfaces for the ledger and fee sponsor collaborators.

Services depend on these protocols rather than concrete classes so the
verification and settlement pipeline can run against fake collaborators.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import TracebackType
from typing import TYPE_CHECKING, Optional, Protocol, Type

if TYPE_CHECKING:
    from aptos_sdk.account_address import AccountAddress
    from aptos_sdk.authenticator import AccountAuthenticator

    from ...aptos.authenticator import PublicKeyMaterial
    from ...aptos.types import SimpleTransaction


@dataclass(frozen=True)
class SimulationOutcome:
    success: bool
    vm_status: str


@dataclass(frozen=True)
class PendingTransaction:
    hash: str


@dataclass(frozen=True)
class CommittedTransaction:
    hash: str
    success: bool
    vm_status: str
    version: Optional[int] = None


class LedgerClientProtocol(Protocol):
    """Interface to a ledger node.

    All methods suspend the calling task; concurrent calls never wait on each
    other at this layer.
    """

    async def simulate(
        self,
        transaction: "SimpleTransaction",
        signer_public_key: "PublicKeyMaterial",
    ) -> SimulationOutcome:
        """Dry-run ``transaction`` against current chain state."""
        ...

    async def submit(
        self,
        transaction: "SimpleTransaction",
        sender_authenticator: "AccountAuthenticator",
        fee_payer_authenticator: Optional["AccountAuthenticator"] = None,
    ) -> PendingTransaction:
        """Submit a signed transaction.

        Raises:
            LedgerError: If the node rejects the submission.
        """
        ...

    async def wait_for_transaction(self, tx_hash: str) -> CommittedTransaction:
        """Block until ``tx_hash`` reaches a terminal state.

        Raises:
            ConfirmationTimeout: If the transaction stays pending too long.
            ConfirmationError: If the transaction was committed but failed.
        """
        ...

    async def aclose(self) -> None:
        ...

    async def __aenter__(self: "LedgerClientProtocol") -> "LedgerClientProtocol":
        ...

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        ...


class FeePayerSignerProtocol(Protocol):
    """Fee sponsor capability bound to a fixed address."""

    @property
    def address(self) -> "AccountAddress":
        ...

    def co_sign(self, transaction: "SimpleTransaction") -> "AccountAuthenticator":
        """Sign ``transaction`` as fee payer. Its fee payer address must be ours."""
        ...
