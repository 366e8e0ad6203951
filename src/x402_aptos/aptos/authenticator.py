"""Account and transaction authenticators.

A sender proves authorization with an SDK ``AccountAuthenticator``. Only the
single Ed25519 key, generic single key and threshold multi-key variants are
accepted; any other tag is a decode error.
"""

from __future__ import annotations

from typing import Optional, Union

from aptos_sdk import asymmetric_crypto, asymmetric_crypto_wrapper, ed25519, secp256k1_ecdsa
from aptos_sdk.account_address import AccountAddress
from aptos_sdk.authenticator import (
    AccountAuthenticator,
    Authenticator,
    Ed25519Authenticator,
    FeePayerAuthenticator,
    MultiKeyAuthenticator,
    SingleKeyAuthenticator,
    SingleSenderAuthenticator,
)
from aptos_sdk.bcs import Serializer

from ..domain.errors import DecodeError
from .bcs import StrictDeserializer, decoding

# Ed25519, single key wrapper or multi key, as carried by the sender authenticator.
PublicKeyMaterial = asymmetric_crypto.PublicKey

_ACCOUNT_AUTHENTICATOR_DECODERS = {
    AccountAuthenticator.ED25519: Ed25519Authenticator.deserialize,
    AccountAuthenticator.SINGLE_KEY: SingleKeyAuthenticator.deserialize,
    AccountAuthenticator.MULTI_KEY: MultiKeyAuthenticator.deserialize,
}


def decode_account_authenticator(data: bytes) -> AccountAuthenticator:
    """Decode a sender authenticator, consuming ``data`` exactly."""
    deserializer = StrictDeserializer(data)
    with decoding("sender authenticator"):
        variant = deserializer.uleb128()
        decoder = _ACCOUNT_AUTHENTICATOR_DECODERS.get(variant)
        if decoder is None:
            raise DecodeError(f"Unsupported account authenticator variant {variant}")
        authenticator = AccountAuthenticator(decoder(deserializer))
    deserializer.finish()
    return authenticator


def public_key_of(authenticator: AccountAuthenticator) -> PublicKeyMaterial:
    return authenticator.authenticator.public_key


class NoAccountAuthenticator:
    """Placeholder for a signer that has not signed yet, used by simulation."""

    VARIANT: int = 4

    def serialize(self, serializer: Serializer) -> None:
        serializer.uleb128(self.VARIANT)


def _zero_signature(public_key: asymmetric_crypto.PublicKey) -> asymmetric_crypto.Signature:
    if isinstance(public_key, asymmetric_crypto_wrapper.PublicKey):
        public_key = public_key.public_key
    if isinstance(public_key, secp256k1_ecdsa.PublicKey):
        return secp256k1_ecdsa.Signature(bytes(secp256k1_ecdsa.Signature.LENGTH))
    return ed25519.Signature(bytes(ed25519.Signature.LENGTH))


def simulation_authenticator(public_key: PublicKeyMaterial) -> AccountAuthenticator:
    """Authenticator carrying ``public_key`` and all-zero signatures.

    The node's simulate endpoint rejects transactions with valid signatures.
    A multi key signs with its first ``threshold`` keys.
    """
    if isinstance(public_key, ed25519.PublicKey):
        return AccountAuthenticator(
            Ed25519Authenticator(public_key, _zero_signature(public_key))
        )
    if isinstance(public_key, asymmetric_crypto_wrapper.MultiPublicKey):
        signatures = [
            (index, _zero_signature(public_key.keys[index]))
            for index in range(public_key.threshold)
        ]
        return AccountAuthenticator(
            MultiKeyAuthenticator(
                public_key, asymmetric_crypto_wrapper.MultiSignature(signatures)
            )
        )
    return AccountAuthenticator(
        SingleKeyAuthenticator(public_key, _zero_signature(public_key))
    )


def transaction_authenticator(
    sender: AccountAuthenticator,
    fee_payer_address: Optional[AccountAddress] = None,
    fee_payer: Union[AccountAuthenticator, NoAccountAuthenticator, None] = None,
) -> Authenticator:
    """Wrap account authenticators into the authenticator of a signed transaction.

    With a fee payer this is ``FeePayer`` with no secondary signers. Otherwise
    an Ed25519 sender keeps the legacy ``Ed25519`` form and every other key
    goes through ``SingleSender``.
    """
    if fee_payer is not None:
        if fee_payer_address is None:
            raise ValueError("Fee payer authenticator given but no fee payer address set")
        return Authenticator(
            FeePayerAuthenticator(sender, [], (fee_payer_address, fee_payer))
        )
    if sender.variant == AccountAuthenticator.ED25519:
        return Authenticator(sender.authenticator)
    return Authenticator(SingleSenderAuthenticator(sender))
