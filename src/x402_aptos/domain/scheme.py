"""The single payment scheme this facilitator accepts.

Rules in the verification chain are parameterized over ``ExactSchemeConfig``
rather than hardcoding literals, so another transfer identity could be
plugged in without touching the rules.
"""

from __future__ import annotations

from dataclasses import dataclass

X402_VERSION = 2
EXACT_SCHEME = "exact"
DEFAULT_NETWORK = "aptos:2"


@dataclass(frozen=True)
class FunctionIdentity:
    module_address: str
    module_name: str
    function_name: str

    def __str__(self) -> str:
        return f"{self.module_address}::{self.module_name}::{self.function_name}"


@dataclass(frozen=True)
class ExactSchemeConfig:
    scheme: str
    function: FunctionIdentity
    type_arg_count: int
    arg_count: int


EXACT_FUNGIBLE_ASSET_TRANSFER = ExactSchemeConfig(
    scheme=EXACT_SCHEME,
    function=FunctionIdentity("0x1", "primary_fungible_store", "transfer"),
    type_arg_count=1,
    arg_count=3,
)
