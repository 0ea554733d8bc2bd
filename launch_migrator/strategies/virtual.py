#!/usr/bin/env python3
"""
Virtual Token Strategy

Wraps another strategy for launches that distribute a virtual token. Supply
and auction bookkeeping stay on the virtual token while the pool trades
its underlying token; reserve tokens are unwrapped right before transfer.
"""

import logging

from ..core.addresses import normalize_address
from ..core.plan import BasePositionParams
from ..core.state import MigrationData
from .base import PositionPlanStrategy

logger = logging.getLogger(__name__)


class VirtualTokenStrategy(PositionPlanStrategy):
    """Delegates planning to an inner strategy with the underlying as pool token"""

    name = "virtual"

    def __init__(self, inner: PositionPlanStrategy, virtual_token):
        self.inner = inner
        self.virtual_token = virtual_token
        # read once; the pool never sees the virtual token
        self.underlying = normalize_address(virtual_token.underlying)

    @property
    def hook_permissions(self) -> int:
        return self.inner.hook_permissions

    def pool_token(self, token: str) -> str:
        return self.underlying

    def build_plan(self, data: MigrationData, base: BasePositionParams) -> bytes:
        return self.inner.build_plan(data, base)

    def token_transfer_amount(self, data: MigrationData) -> int:
        return self.inner.token_transfer_amount(data)

    def currency_transfer_amount(self, data: MigrationData) -> int:
        return self.inner.currency_transfer_amount(data)

    def prepare_token_transfer(self, holder: str, amount: int):
        logger.debug("Unwrapping %d virtual tokens for %s", amount, holder)
        self.virtual_token.unwrap(holder, amount)

    def before_swap(self, sender: str):
        self.inner.before_swap(sender)

    def describe(self) -> dict:
        description = self.inner.describe()
        description.update({"strategy": self.name, "inner": self.inner.name, "underlying": self.underlying})
        return description
