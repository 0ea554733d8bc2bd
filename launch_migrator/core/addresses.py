#!/usr/bin/env python3
"""
Address Helpers

Address normalisation, canonical currency ordering, reserved sentinels,
CREATE2 derivation and hook permission flags encoded in hook addresses.
"""

from typing import Tuple

from eth_abi import encode
from eth_utils import keccak, to_bytes, to_canonical_address, to_checksum_address, to_int

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
NATIVE_CURRENCY = ZERO_ADDRESS

# Position-manager sentinels that cannot receive positions
MSG_SENDER = "0x0000000000000000000000000000000000000001"
ADDRESS_THIS = "0x0000000000000000000000000000000000000002"
RESERVED_RECIPIENTS = frozenset({ZERO_ADDRESS, MSG_SENDER, ADDRESS_THIS})

# Hook permission flags, read from the low bits of the hook address
BEFORE_INITIALIZE_FLAG = 1 << 13
AFTER_INITIALIZE_FLAG = 1 << 12
BEFORE_ADD_LIQUIDITY_FLAG = 1 << 11
AFTER_ADD_LIQUIDITY_FLAG = 1 << 10
BEFORE_REMOVE_LIQUIDITY_FLAG = 1 << 9
AFTER_REMOVE_LIQUIDITY_FLAG = 1 << 8
BEFORE_SWAP_FLAG = 1 << 7
AFTER_SWAP_FLAG = 1 << 6
BEFORE_DONATE_FLAG = 1 << 5
AFTER_DONATE_FLAG = 1 << 4
BEFORE_SWAP_RETURNS_DELTA_FLAG = 1 << 3
AFTER_SWAP_RETURNS_DELTA_FLAG = 1 << 2
AFTER_ADD_LIQUIDITY_RETURNS_DELTA_FLAG = 1 << 1
AFTER_REMOVE_LIQUIDITY_RETURNS_DELTA_FLAG = 1 << 0
ALL_HOOK_MASK = (1 << 14) - 1


def normalize_address(address: str) -> str:
    """Checksummed form of an address; raises ValueError for malformed input"""
    return to_checksum_address(address)


def address_to_int(address: str) -> int:
    return to_int(hexstr=address)


def int_to_address(value: int) -> str:
    return to_checksum_address(value.to_bytes(20, "big"))


def is_reserved_recipient(address: str) -> bool:
    return normalize_address(address) in RESERVED_RECIPIENTS


def is_native(currency: str) -> bool:
    return normalize_address(currency) == NATIVE_CURRENCY


def sort_currencies(currency_a: str, currency_b: str) -> Tuple[str, str]:
    """Order two currencies by numeric value; the smaller one is currency0"""
    if address_to_int(currency_a) < address_to_int(currency_b):
        return normalize_address(currency_a), normalize_address(currency_b)
    return normalize_address(currency_b), normalize_address(currency_a)


def hook_permissions_of(address: str) -> int:
    return address_to_int(address) & ALL_HOOK_MASK


def has_permission(address: str, flag: int) -> bool:
    return hook_permissions_of(address) & flag != 0


def is_valid_hook_address(address: str, permissions: int) -> bool:
    """A hook address must encode exactly its permission set in its low 14 bits"""
    return hook_permissions_of(address) == permissions


def hook_address_for(permissions: int, prefix: int) -> str:
    """Deterministic address carrying the given permission bits, for simulations"""
    return int_to_address(((prefix << 14) | permissions) & ((1 << 160) - 1))


def compute_create2_address(deployer: str, salt: bytes, init_code_hash: bytes) -> str:
    """keccak256(0xff ++ deployer ++ salt ++ init_code_hash)[12:]"""
    if len(salt) != 32 or len(init_code_hash) != 32:
        raise ValueError("salt and init code hash must be 32 bytes")
    digest = keccak(b"\xff" + to_canonical_address(deployer) + salt + init_code_hash)
    return to_checksum_address(digest[12:])


def derive_salt(sender: str, salt: bytes) -> bytes:
    """Bind a salt to a sender: keccak256(abi.encode(sender, salt))"""
    return keccak(encode(["address", "bytes32"], [normalize_address(sender), salt]))


def salt_from_int(value: int) -> bytes:
    return value.to_bytes(32, "big")


def bytes32_from_hex(value: str) -> bytes:
    raw = to_bytes(hexstr=value)
    if len(raw) != 32:
        raise ValueError(f"Expected 32 bytes, got {len(raw)}")
    return raw
