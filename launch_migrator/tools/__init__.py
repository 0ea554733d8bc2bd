"""Deployment tooling"""

from .salt_miner import MinedSalt, mine_salt, fulfills_vanity, bind_salt

__all__ = ["MinedSalt", "mine_salt", "fulfills_vanity", "bind_salt"]
