"""Test fixtures package."""

from .fake_ledger import FakeLedgerClient, Submission
from .transactions import build_payment, transfer_payload

__all__ = ["FakeLedgerClient", "Submission", "build_payment", "transfer_payload"]
