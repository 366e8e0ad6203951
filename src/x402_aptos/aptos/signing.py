from __future__ import annotations

from typing import Optional

from aptos_sdk import ed25519
from aptos_sdk.account_address import AccountAddress
from aptos_sdk.authenticator import AccountAuthenticator, Ed25519Authenticator
from aptos_sdk.transactions import FeePayerRawTransaction, SignedTransaction

from .authenticator import (
    NoAccountAuthenticator,
    PublicKeyMaterial,
    simulation_authenticator,
    transaction_authenticator,
)
from .types import SimpleTransaction

_AIP80_ED25519_PREFIX = "ed25519-priv-"


def signing_message(transaction: SimpleTransaction) -> bytes:
    """Return the exact bytes a signer signs for ``transaction``.

    Transactions with a fee payer slot are signed as ``RawTransactionWithData``
    naming the fee payer; plain transactions are signed as ``RawTransaction``.
    """
    if transaction.fee_payer_address is None:
        return transaction.raw_transaction.keyed()
    return FeePayerRawTransaction(
        transaction.raw_transaction, [], transaction.fee_payer_address
    ).keyed()


def signed_transaction(
    transaction: SimpleTransaction,
    sender_authenticator: AccountAuthenticator,
    fee_payer_authenticator: Optional[AccountAuthenticator] = None,
) -> SignedTransaction:
    """``SignedTransaction`` ready for submission."""
    return SignedTransaction(
        transaction.raw_transaction,
        transaction_authenticator(
            sender_authenticator,
            transaction.fee_payer_address,
            fee_payer_authenticator,
        ),
    )


def simulation_transaction(
    transaction: SimpleTransaction, signer_public_key: PublicKeyMaterial
) -> SignedTransaction:
    """``SignedTransaction`` with zeroed signatures for the simulate endpoint.

    A fee payer slot is simulated with a no-account fee payer authenticator.
    """
    sender = simulation_authenticator(signer_public_key)
    fee_payer = None
    if transaction.fee_payer_address is not None:
        fee_payer = NoAccountAuthenticator()
    return SignedTransaction(
        transaction.raw_transaction,
        transaction_authenticator(sender, transaction.fee_payer_address, fee_payer),
    )


def load_ed25519_private_key(private_key_hex: str) -> ed25519.PrivateKey:
    """Load an Ed25519 private key from hex, with optional ``0x`` / AIP-80 prefix."""
    value = private_key_hex.strip()
    if value.startswith(_AIP80_ED25519_PREFIX):
        value = value[len(_AIP80_ED25519_PREFIX) :]
    if value.startswith("0x"):
        value = value[2:]
    try:
        key_bytes = bytes.fromhex(value)
    except ValueError as e:
        raise ValueError(f"Private key is not valid hex: {e}") from e
    if len(key_bytes) != ed25519.PrivateKey.LENGTH:
        raise ValueError(
            f"Ed25519 private key must be {ed25519.PrivateKey.LENGTH} bytes, "
            f"got {len(key_bytes)}"
        )
    return ed25519.PrivateKey.from_hex(key_bytes)


class Ed25519FeePayerSigner:
    """Operator identity that co-signs transactions as fee payer.

    Holds a private key and never mutates, so one instance is shared by every
    concurrent request.
    """

    def __init__(self, private_key: ed25519.PrivateKey) -> None:
        self._private_key = private_key
        self._public_key = private_key.public_key()
        self._address = AccountAddress.from_key(self._public_key)

    @classmethod
    def from_hex(cls, private_key_hex: str) -> "Ed25519FeePayerSigner":
        return cls(load_ed25519_private_key(private_key_hex))

    @property
    def address(self) -> AccountAddress:
        return self._address

    @property
    def public_key(self) -> ed25519.PublicKey:
        return self._public_key

    def co_sign(self, transaction: SimpleTransaction) -> AccountAuthenticator:
        """Sign ``transaction`` as its fee payer.

        Raises:
            ValueError: If the transaction does not name this signer as fee payer.
        """
        if transaction.fee_payer_address != self._address:
            raise ValueError("Transaction fee payer address does not match the signer")
        signature = self._private_key.sign(signing_message(transaction))
        return AccountAuthenticator(Ed25519Authenticator(self._public_key, signature))
