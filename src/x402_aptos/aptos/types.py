"""Decoding of sender-signed Aptos transactions into SDK types.

Payload and type tag decoding is done here rather than through the SDK's own
``deserialize`` methods: the SDK has no vector or signer type tags, no
multisig payload and no bound on type tag nesting. Everything else is the
SDK's ``RawTransaction``, ``EntryFunction`` and friends.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from aptos_sdk import transactions
from aptos_sdk.account_address import AccountAddress
from aptos_sdk.bcs import Deserializer, Serializer
from aptos_sdk.transactions import (
    EntryFunction,
    ModuleId,
    RawTransaction,
    Script,
    ScriptArgument,
)
from aptos_sdk.type_tag import (
    AccountAddressTag,
    BoolTag,
    StructTag,
    TypeTag,
    U8Tag,
    U16Tag,
    U32Tag,
    U64Tag,
    U128Tag,
    U256Tag,
)

from ..domain.errors import DecodeError
from .bcs import StrictDeserializer, decoding, to_bytes

# Same bound the Move VM applies when it reads type tags off the wire.
MAX_TYPE_TAG_NESTING = 8

_PRIMITIVE_TAGS = {
    TypeTag.BOOL: BoolTag,
    TypeTag.U8: U8Tag,
    TypeTag.U16: U16Tag,
    TypeTag.U32: U32Tag,
    TypeTag.U64: U64Tag,
    TypeTag.U128: U128Tag,
    TypeTag.U256: U256Tag,
    TypeTag.ACCOUNT_ADDRESS: AccountAddressTag,
}


class SignerTag:
    def __eq__(self, other: object) -> bool:
        return isinstance(other, SignerTag)

    def __str__(self) -> str:
        return "signer"

    def variant(self) -> int:
        return TypeTag.SIGNER

    def serialize(self, serializer: Serializer) -> None:
        pass


class VectorTag:
    def __init__(self, element: TypeTag) -> None:
        self.element = element

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VectorTag):
            return NotImplemented
        return self.element == other.element

    def __str__(self) -> str:
        return f"vector<{self.element}>"

    def variant(self) -> int:
        return TypeTag.VECTOR

    def serialize(self, serializer: Serializer) -> None:
        serializer.struct(self.element)


def decode_type_tag(deserializer: Deserializer, depth: int = 1) -> TypeTag:
    """Read one type tag, refusing nesting deeper than ``MAX_TYPE_TAG_NESTING``."""
    if depth > MAX_TYPE_TAG_NESTING:
        raise DecodeError(f"Type tag nesting exceeds {MAX_TYPE_TAG_NESTING} levels")

    variant = deserializer.uleb128()
    primitive = _PRIMITIVE_TAGS.get(variant)
    if primitive is not None:
        return TypeTag(primitive.deserialize(deserializer))
    if variant == TypeTag.SIGNER:
        return TypeTag(SignerTag())
    if variant == TypeTag.VECTOR:
        return TypeTag(VectorTag(decode_type_tag(deserializer, depth + 1)))
    if variant == TypeTag.STRUCT:
        address = AccountAddress.deserialize(deserializer)
        module = deserializer.str()
        name = deserializer.str()
        type_args = _type_tags(deserializer, depth + 1)
        return TypeTag(StructTag(address, module, name, type_args))
    raise DecodeError(f"Unknown type tag variant {variant}")


def _type_tags(deserializer: Deserializer, depth: int = 1) -> List[TypeTag]:
    return deserializer.sequence(lambda d: decode_type_tag(d, depth))


def decode_entry_function(deserializer: Deserializer) -> EntryFunction:
    module = ModuleId.deserialize(deserializer)
    function = deserializer.str()
    type_args = _type_tags(deserializer)
    args = deserializer.sequence(Deserializer.to_bytes)
    return EntryFunction(module, function, type_args, args)


def decode_script(deserializer: Deserializer) -> Script:
    code = deserializer.to_bytes()
    type_args = _type_tags(deserializer)
    args = deserializer.sequence(ScriptArgument.deserialize)
    return Script(code, type_args, args)


class Multisig:
    """Payload executed on behalf of an on-chain multisig account."""

    # MultisigTransactionPayload::EntryFunction, its only variant.
    ENTRY_FUNCTION: int = 0

    def __init__(
        self, multisig_address: AccountAddress, entry_function: Optional[EntryFunction]
    ) -> None:
        self.multisig_address = multisig_address
        self.entry_function = entry_function

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Multisig):
            return NotImplemented
        return (
            self.multisig_address == other.multisig_address
            and self.entry_function == other.entry_function
        )

    @classmethod
    def deserialize(cls, deserializer: StrictDeserializer) -> "Multisig":
        address = AccountAddress.deserialize(deserializer)
        return cls(address, deserializer.option(_multisig_entry_function))

    def serialize(self, serializer: Serializer) -> None:
        self.multisig_address.serialize(serializer)
        if self.entry_function is None:
            serializer.bool(False)
            return
        serializer.bool(True)
        serializer.uleb128(self.ENTRY_FUNCTION)
        self.entry_function.serialize(serializer)


def _multisig_entry_function(deserializer: Deserializer) -> EntryFunction:
    variant = deserializer.uleb128()
    if variant != Multisig.ENTRY_FUNCTION:
        raise DecodeError(f"Unknown multisig payload variant {variant}")
    return decode_entry_function(deserializer)


class TransactionPayload(transactions.TransactionPayload):
    """SDK payload extended with the multisig variant."""

    MULTISIG: int = 3

    def __init__(self, payload) -> None:
        if isinstance(payload, Multisig):
            self.variant = TransactionPayload.MULTISIG
            self.value = payload
        else:
            super().__init__(payload)

    @classmethod
    def deserialize(cls, deserializer: StrictDeserializer) -> "TransactionPayload":
        variant = deserializer.uleb128()
        if variant == cls.SCRIPT:
            return cls(decode_script(deserializer))
        if variant == cls.SCRIPT_FUNCTION:
            return cls(decode_entry_function(deserializer))
        if variant == cls.MULTISIG:
            return cls(Multisig.deserialize(deserializer))
        if variant == cls.MODULE_BUNDLE:
            raise DecodeError("Unsupported transaction payload variant MODULE_BUNDLE")
        raise DecodeError(f"Unknown transaction payload variant {variant}")


def decode_raw_transaction(deserializer: StrictDeserializer) -> RawTransaction:
    """Read a ``RawTransaction`` and check it re-encodes to the bytes read.

    The sender signed those exact bytes, and every later signing message and
    submission is built from the decoded object.
    """
    start = deserializer.position
    raw_transaction = RawTransaction(
        AccountAddress.deserialize(deserializer),
        deserializer.u64(),
        TransactionPayload.deserialize(deserializer),
        deserializer.u64(),
        deserializer.u64(),
        deserializer.u64(),
        deserializer.u8(),
    )
    if to_bytes(raw_transaction) != deserializer.slice(start, deserializer.position):
        raise DecodeError("Transaction does not re-encode to the signed bytes")
    return raw_transaction


@dataclass
class SimpleTransaction:
    """A raw transaction plus the optional fee payer slot.

    ``fee_payer_address`` is the only mutable field: the settlement path sets it
    to the sponsor's address right before co-signing.
    """

    raw_transaction: RawTransaction
    fee_payer_address: Optional[AccountAddress] = None

    @classmethod
    def deserialize(cls, deserializer: StrictDeserializer) -> "SimpleTransaction":
        raw_transaction = decode_raw_transaction(deserializer)
        fee_payer_address = deserializer.option(AccountAddress.deserialize)
        return cls(raw_transaction, fee_payer_address)

    @classmethod
    def from_bytes(cls, data: bytes) -> "SimpleTransaction":
        deserializer = StrictDeserializer(data)
        transaction = cls.deserialize(deserializer)
        deserializer.finish()
        return transaction

    def serialize(self, serializer: Serializer) -> None:
        self.raw_transaction.serialize(serializer)
        if self.fee_payer_address is None:
            serializer.bool(False)
        else:
            serializer.bool(True)
            self.fee_payer_address.serialize(serializer)

    @property
    def sender(self) -> AccountAddress:
        return self.raw_transaction.sender

    @property
    def entry_function(self) -> Optional[EntryFunction]:
        payload = self.raw_transaction.payload
        if payload.variant == TransactionPayload.SCRIPT_FUNCTION:
            return payload.value
        return None


def address_argument(entry_function: EntryFunction, index: int) -> AccountAddress:
    """Decode argument ``index`` as an address, consuming its bytes exactly."""
    deserializer = StrictDeserializer(entry_function.args[index])
    with decoding(f"address argument {index}"):
        address = AccountAddress.deserialize(deserializer)
    deserializer.finish()
    return address


def u64_argument(entry_function: EntryFunction, index: int) -> int:
    deserializer = StrictDeserializer(entry_function.args[index])
    with decoding(f"u64 argument {index}"):
        value = deserializer.u64()
    deserializer.finish()
    return value


def long_form(address: AccountAddress) -> str:
    """``0x`` plus all 64 hex digits, even for special addresses."""
    return "0x" + address.address.hex()
