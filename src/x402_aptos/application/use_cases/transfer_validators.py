"""Pure validation rules for exact-scheme transfers.

Each rule raises ``PaymentRejected`` carrying exactly one reason. Rules hold no
state and never touch the ledger, so they can be tested in isolation.
"""

from __future__ import annotations

from typing import Optional

from aptos_sdk.account_address import AccountAddress
from aptos_sdk.transactions import EntryFunction

from ...aptos.envelope import TransferIntent
from ...aptos.types import address_argument, u64_argument
from ...domain.entities import PaymentPayload, PaymentRequirements
from ...domain.errors import PaymentRejected
from ...domain.reasons import InvalidReason
from ...domain.scheme import ExactSchemeConfig

ASSET_ARG = 0
RECIPIENT_ARG = 1
AMOUNT_ARG = 2


def _requirement_address(value: str) -> Optional[AccountAddress]:
    """Parse a merchant-supplied address; None when it is not an address at all."""
    try:
        return AccountAddress.from_str_relaxed(value)
    except (RuntimeError, ValueError):
        return None


def validate_scheme(
    payload: PaymentPayload,
    requirements: PaymentRequirements,
    config: ExactSchemeConfig,
) -> None:
    """Both the payer's accepted descriptor and the requirements must use our scheme."""
    if payload.accepted.scheme != config.scheme or requirements.scheme != config.scheme:
        raise PaymentRejected(InvalidReason.UNSUPPORTED_SCHEME)


def validate_network(payload: PaymentPayload, requirements: PaymentRequirements) -> None:
    """Networks are compared as exact strings, no pattern matching."""
    if payload.accepted.network != requirements.network:
        raise PaymentRejected(InvalidReason.NETWORK_MISMATCH)


def require_entry_function(intent: TransferIntent) -> EntryFunction:
    entry_function = intent.entry_function
    if entry_function is None:
        raise PaymentRejected(InvalidReason.MISSING_ENTRY_FUNCTION)
    return entry_function


def validate_function_identity(
    entry_function: EntryFunction, config: ExactSchemeConfig
) -> None:
    expected = config.function
    if (
        entry_function.module.address
        != AccountAddress.from_str_relaxed(expected.module_address)
        or entry_function.module.name != expected.module_name
        or entry_function.function != expected.function_name
    ):
        raise PaymentRejected(InvalidReason.WRONG_FUNCTION)


def validate_type_arguments(
    entry_function: EntryFunction, config: ExactSchemeConfig
) -> None:
    if len(entry_function.ty_args) != config.type_arg_count:
        raise PaymentRejected(InvalidReason.WRONG_TYPE_ARGS)


def validate_argument_count(
    entry_function: EntryFunction, config: ExactSchemeConfig
) -> None:
    if len(entry_function.args) != config.arg_count:
        raise PaymentRejected(InvalidReason.WRONG_ARGS)


def validate_asset(
    entry_function: EntryFunction, requirements: PaymentRequirements
) -> None:
    expected = _requirement_address(requirements.asset)
    if expected is None or address_argument(entry_function, ASSET_ARG) != expected:
        raise PaymentRejected(InvalidReason.ASSET_MISMATCH)


def validate_recipient(
    entry_function: EntryFunction, requirements: PaymentRequirements
) -> None:
    expected = _requirement_address(requirements.pay_to)
    if expected is None or address_argument(entry_function, RECIPIENT_ARG) != expected:
        raise PaymentRejected(InvalidReason.RECIPIENT_MISMATCH)


def validate_amount(
    entry_function: EntryFunction, requirements: PaymentRequirements
) -> None:
    """The decoded u64, rendered in base 10, must be string-identical to the requirement.

    ``"0100"`` does not match an on-chain amount of 100.
    """
    amount = str(u64_argument(entry_function, AMOUNT_ARG))
    if amount != requirements.amount:
        raise PaymentRejected(InvalidReason.AMOUNT_MISMATCH)


def validate_transfer_intent(
    intent: TransferIntent,
    requirements: PaymentRequirements,
    config: ExactSchemeConfig,
) -> None:
    """Run the structural rules in order, stopping at the first failure.

    Raises:
        PaymentRejected: With the reason of the first failing rule.
        DecodeError: If a positional argument cannot be decoded as expected.
    """
    entry_function = require_entry_function(intent)
    validate_function_identity(entry_function, config)
    validate_type_arguments(entry_function, config)
    validate_argument_count(entry_function, config)
    validate_asset(entry_function, requirements)
    validate_recipient(entry_function, requirements)
    validate_amount(entry_function, requirements)
