"""Shared domain utilities.

This package is domain-accessible and should not depend on application code.
"""

from .ledger_client_protocol import (
    CommittedTransaction,
    FeePayerSignerProtocol,
    LedgerClientProtocol,
    PendingTransaction,
    SimulationOutcome,
)

__all__ = [
    "CommittedTransaction",
    "FeePayerSignerProtocol",
    "LedgerClientProtocol",
    "PendingTransaction",
    "SimulationOutcome",
]
