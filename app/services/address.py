"""Helpers for validating wallet and contract addresses."""

from __future__ import annotations

import re
from typing import Any

from eth_utils import to_checksum_address

_EVM_ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


def is_evm_address(value: Any) -> bool:
    """True for a 0x-prefixed, 20-byte hex string (checksum not enforced)."""

    if not isinstance(value, str):
        return False
    return bool(_EVM_ADDRESS_RE.fullmatch(value.strip()))


def checksum(address: str) -> str:
    """EIP-55 form of a well-formed address; raises ValueError otherwise."""

    if not is_evm_address(address):
        raise ValueError(f"Invalid address: {address!r}")
    return to_checksum_address(address.strip())


def same_address(a: str | None, b: str | None) -> bool:
    if not a or not b:
        return False
    return a.strip().lower() == b.strip().lower()


__all__ = [
    "ZERO_ADDRESS",
    "checksum",
    "is_evm_address",
    "same_address",
]
