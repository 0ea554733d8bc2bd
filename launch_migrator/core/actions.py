#!/usr/bin/env python3
"""
Position Manager Actions

Action codes understood by the position manager and the ABI layout of
their parameter blobs.
"""

from enum import IntEnum
from typing import List, Tuple

from eth_abi import decode, encode
from eth_utils import to_checksum_address


class Action(IntEnum):
    """Position manager action codes"""
    MINT_POSITION = 0x02
    SETTLE = 0x0B
    TAKE_PAIR = 0x11


# Amount sentinel: settle the caller-held balance of the currency
CONTRACT_BALANCE = 1 << 255
# Amount sentinel: settle exactly the open debt
OPEN_DELTA = 0

POOL_KEY_ABI = "(address,address,uint24,int24,address)"
MINT_POSITION_ABI = [POOL_KEY_ABI, "int24", "int24", "uint256", "uint128", "uint128", "address", "bytes"]
SETTLE_ABI = ["address", "uint256", "bool"]
TAKE_PAIR_ABI = ["address", "address", "address"]
UNLOCK_DATA_ABI = ["bytes", "bytes[]"]


def encode_mint_position(
    pool_key: Tuple[str, str, int, int, str],
    tick_lower: int,
    tick_upper: int,
    liquidity: int,
    amount0_max: int,
    amount1_max: int,
    owner: str,
    hook_data: bytes = b""
) -> bytes:
    return encode(
        MINT_POSITION_ABI,
        [pool_key, tick_lower, tick_upper, liquidity, amount0_max, amount1_max, owner, hook_data]
    )


def encode_settle(currency: str, amount: int, payer_is_user: bool) -> bytes:
    return encode(SETTLE_ABI, [currency, amount, payer_is_user])


def encode_take_pair(currency0: str, currency1: str, recipient: str) -> bytes:
    return encode(TAKE_PAIR_ABI, [currency0, currency1, recipient])


def encode_unlock_data(actions: bytes, params: List[bytes]) -> bytes:
    return encode(UNLOCK_DATA_ABI, [actions, params])


def decode_unlock_data(data: bytes) -> Tuple[bytes, List[bytes]]:
    actions, params = decode(UNLOCK_DATA_ABI, data)
    return bytes(actions), [bytes(p) for p in params]


def decode_mint_position(param: bytes) -> dict:
    key, tick_lower, tick_upper, liquidity, amount0_max, amount1_max, owner, hook_data = decode(
        MINT_POSITION_ABI, param
    )
    currency0, currency1, fee, tick_spacing, hooks = key
    return {
        "pool_key": (
            to_checksum_address(currency0),
            to_checksum_address(currency1),
            fee,
            tick_spacing,
            to_checksum_address(hooks),
        ),
        "tick_lower": tick_lower,
        "tick_upper": tick_upper,
        "liquidity": liquidity,
        "amount0_max": amount0_max,
        "amount1_max": amount1_max,
        "owner": to_checksum_address(owner),
        "hook_data": bytes(hook_data),
    }


def decode_settle(param: bytes) -> dict:
    currency, amount, payer_is_user = decode(SETTLE_ABI, param)
    return {"currency": to_checksum_address(currency), "amount": amount, "payer_is_user": payer_is_user}


def decode_take_pair(param: bytes) -> dict:
    currency0, currency1, recipient = decode(TAKE_PAIR_ABI, param)
    return {
        "currency0": to_checksum_address(currency0),
        "currency1": to_checksum_address(currency1),
        "recipient": to_checksum_address(recipient),
    }
