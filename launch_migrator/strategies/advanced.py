#!/usr/bin/env python3
"""
Advanced Strategy

Full-range position plus optional one-sided positions built from the
reserve tokens and the currency the full-range position did not use.
"""

import logging

from ..core.plan import BasePositionParams, build_full_range, extend_one_sided, finalize
from ..core.state import MigrationData
from .base import PositionPlanStrategy

logger = logging.getLogger(__name__)


class AdvancedStrategy(PositionPlanStrategy):
    """
    Full range plus up to two one-sided extensions.

    Transfers are sized optimistically: the whole reserve and the whole
    currency budget are handed over whenever an extension is enabled, and
    anything the positions did not consume comes back through TAKE_PAIR
    to be swept later.
    """

    name = "advanced"

    def __init__(self, create_one_sided_token_position: bool = True,
                 create_one_sided_currency_position: bool = True):
        self.create_one_sided_token_position = create_one_sided_token_position
        self.create_one_sided_currency_position = create_one_sided_currency_position

    def _wants_token_position(self, data: MigrationData) -> bool:
        return self.create_one_sided_token_position and data.reserve_supply > data.token_amount

    def _wants_currency_position(self, data: MigrationData) -> bool:
        return self.create_one_sided_currency_position and data.leftover_currency > 0

    def build_plan(self, data: MigrationData, base: BasePositionParams) -> bytes:
        plan = build_full_range(base, data.token_amount, data.currency_amount)

        if self._wants_token_position(data):
            extended = extend_one_sided(
                base, data.unused_reserve, base.side_for(base.pool_token), plan
            )
            if extended is None:
                logger.info("One-sided token position dropped (%d tokens)", data.unused_reserve)
            else:
                plan = extended

        if self._wants_currency_position(data):
            extended = extend_one_sided(
                base, data.leftover_currency, base.side_for(base.currency), plan
            )
            if extended is None:
                logger.info("One-sided currency position dropped (%d currency)", data.leftover_currency)
            else:
                plan = extended

        return finalize(plan, base)

    def token_transfer_amount(self, data: MigrationData) -> int:
        if self._wants_token_position(data):
            return data.reserve_supply
        return data.token_amount

    def currency_transfer_amount(self, data: MigrationData) -> int:
        if self._wants_currency_position(data):
            return data.currency_amount + data.leftover_currency
        return data.currency_amount

    def describe(self) -> dict:
        description = super().describe()
        description.update({
            "create_one_sided_token_position": self.create_one_sided_token_position,
            "create_one_sided_currency_position": self.create_one_sided_currency_position
        })
        return description
