#!/usr/bin/env python3
"""
Hook Address Salt Miner

Searches CREATE2 salts until the orchestrator's deployment address encodes
the required hook permissions in its low 14 bits, optionally starting with
a vanity hex prefix.

The deploying factory binds every salt to its callers, so the salt that
reaches CREATE2 is keccak(abi.encode(token_launcher,
keccak(abi.encode(msg_sender, salt)))).
"""

import logging
from dataclasses import dataclass
from typing import Optional

from ..core.addresses import (
    ALL_HOOK_MASK, ZERO_ADDRESS, compute_create2_address, derive_salt,
    hook_permissions_of, normalize_address, salt_from_int
)
from ..core.exceptions import SaltNotFound

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITERATIONS = 1_000_000


@dataclass
class MinedSalt:
    """A salt and the address it deploys to"""
    salt: bytes
    salt_with_msg_sender: bytes
    salt_with_token_launcher: bytes
    address: str
    iterations: int

    def to_dict(self) -> dict:
        return {
            "salt": "0x" + self.salt.hex(),
            "salt_with_msg_sender": "0x" + self.salt_with_msg_sender.hex(),
            "salt_with_token_launcher": "0x" + self.salt_with_token_launcher.hex(),
            "address": self.address,
            "iterations": self.iterations
        }


def validate_vanity_prefix(prefix: str) -> str:
    if prefix:
        try:
            int(prefix, 16)
        except ValueError:
            raise ValueError(f"Invalid hex prefix: {prefix!r}")
        if len(prefix) > 40:
            raise ValueError("Vanity prefix longer than an address")
    return prefix


def fulfills_vanity(address: str, prefix: str, case_sensitive: bool = False) -> bool:
    """Case-sensitive matching compares against the checksummed form"""
    if not prefix:
        return True
    body = normalize_address(address)[2:]
    if case_sensitive:
        return body.startswith(prefix)
    return body.lower().startswith(prefix.lower())


def bind_salt(salt: bytes, msg_sender: str, token_launcher: str) -> tuple:
    """Apply the factory's caller binding: (with msg sender, with token launcher)"""
    with_msg_sender = derive_salt(msg_sender, salt)
    return with_msg_sender, derive_salt(token_launcher, with_msg_sender)


def mine_salt(
    deployer: str,
    init_code_hash: bytes,
    permissions: int,
    msg_sender: str,
    token_launcher: str,
    vanity_prefix: str = "",
    case_sensitive: bool = False,
    start: int = 0,
    max_iterations: Optional[int] = DEFAULT_MAX_ITERATIONS
) -> MinedSalt:
    """
    Find the first salt from `start` whose address carries exactly `permissions`.

    Args:
        deployer: Factory that performs the CREATE2 deployment
        init_code_hash: keccak256 of the orchestrator's init code
        permissions: Required hook flags (low 14 bits)
        msg_sender: Account calling the token launcher
        token_launcher: Launcher contract calling the factory
        vanity_prefix: Optional hex prefix for the address
        case_sensitive: Match the prefix against the checksummed address
        start: First salt value tried
        max_iterations: Give up after this many salts (None searches forever)

    Returns:
        The mined salt with its derived forms and address
    """
    for name, address in (("deployer", deployer), ("msg sender", msg_sender),
                          ("token launcher", token_launcher)):
        if normalize_address(address) == ZERO_ADDRESS:
            raise ValueError(f"Invalid {name} address")
    if len(init_code_hash) != 32 or not any(init_code_hash):
        raise ValueError("Invalid initialization code hash")
    if permissions & ~ALL_HOOK_MASK or permissions == 0:
        raise ValueError(f"Invalid hook permissions mask {permissions:#x}")
    validate_vanity_prefix(vanity_prefix)

    iterations = 0
    while max_iterations is None or iterations < max_iterations:
        salt = salt_from_int(start + iterations)
        iterations += 1

        with_msg_sender, with_token_launcher = bind_salt(salt, msg_sender, token_launcher)
        address = compute_create2_address(deployer, with_token_launcher, init_code_hash)

        if hook_permissions_of(address) == permissions and \
                fulfills_vanity(address, vanity_prefix, case_sensitive):
            logger.info("Found salt after %d iterations: %s", iterations, address)
            return MinedSalt(salt, with_msg_sender, with_token_launcher, address, iterations)

    raise SaltNotFound(iterations)
