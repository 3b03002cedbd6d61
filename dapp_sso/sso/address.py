"""Helpers for validating and normalizing wallet identities."""

from __future__ import annotations

import re
from functools import lru_cache

from eth_utils import is_checksum_address, to_checksum_address

from .errors import InvalidInput

_EVM_ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")


@lru_cache(maxsize=1024)
def is_valid_wallet(address: str) -> bool:
    """Accept all-lowercase, all-uppercase or correctly checksummed addresses."""

    if not isinstance(address, str) or not _EVM_ADDRESS_RE.fullmatch(address):
        return False
    body = address[2:]
    if body.islower() or body.isupper() or body.isdigit():
        return True
    return is_checksum_address(address)


def normalize_wallet(address: str) -> str:
    """Return the checksummed form of ``address`` or raise InvalidInput."""

    if not is_valid_wallet(address):
        raise InvalidInput(f"Invalid wallet address: {address!r}")
    return to_checksum_address(address)


__all__ = [
    "is_valid_wallet",
    "normalize_wallet",
]
