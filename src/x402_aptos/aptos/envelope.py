"""Decoding of the opaque ``transaction`` field of an exact-scheme payment.

Wire format: ``base64(JSON({"transaction": int[], "senderAuthenticator": int[]}))``
where both arrays are BCS byte strings.
"""

from __future__ import annotations

import base64
import binascii
import json
from dataclasses import dataclass
from typing import Annotated, List, Optional

from aptos_sdk.account_address import AccountAddress
from aptos_sdk.authenticator import AccountAuthenticator
from aptos_sdk.transactions import EntryFunction
from pydantic import BaseModel, Field, ValidationError

from ..domain.errors import DecodeError
from .authenticator import PublicKeyMaterial, decode_account_authenticator, public_key_of
from .bcs import decoding, to_bytes
from .types import SimpleTransaction

Byte = Annotated[int, Field(ge=0, le=255)]


class PaymentEnvelope(BaseModel):
    """JSON body carried inside the base64 payment transaction."""

    transaction: List[Byte]
    senderAuthenticator: List[Byte]


@dataclass
class TransferIntent:
    """Decoded payment: the transaction plus the sender's authentication proof."""

    transaction: SimpleTransaction
    sender_authenticator: AccountAuthenticator

    @property
    def sender(self) -> AccountAddress:
        return self.transaction.sender

    @property
    def entry_function(self) -> Optional[EntryFunction]:
        return self.transaction.entry_function

    @property
    def signer_public_key(self) -> PublicKeyMaterial:
        return public_key_of(self.sender_authenticator)


def decode_payment_transaction(transaction_b64: str) -> TransferIntent:
    """Decode a payment envelope into a ``TransferIntent``.

    Raises:
        DecodeError: On malformed base64 or JSON, truncated buffers, trailing
            bytes or any unknown variant tag.
    """
    try:
        raw = base64.b64decode(transaction_b64, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"Invalid base64 payment transaction: {e}") from e

    try:
        data = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise DecodeError(f"Invalid JSON payment transaction: {e}") from e

    try:
        envelope = PaymentEnvelope.model_validate(data)
    except ValidationError as e:
        raise DecodeError(f"Invalid payment envelope: {e}") from e

    with decoding("payment transaction"):
        transaction = SimpleTransaction.from_bytes(bytes(envelope.transaction))
    sender_authenticator = decode_account_authenticator(
        bytes(envelope.senderAuthenticator)
    )
    return TransferIntent(transaction, sender_authenticator)


def encode_payment_transaction(
    transaction: SimpleTransaction, sender_authenticator: AccountAuthenticator
) -> str:
    """Inverse of ``decode_payment_transaction``, used by payers and tooling."""
    envelope = {
        "transaction": list(to_bytes(transaction)),
        "senderAuthenticator": list(to_bytes(sender_authenticator)),
    }
    return base64.b64encode(json.dumps(envelope).encode("utf-8")).decode("utf-8")
