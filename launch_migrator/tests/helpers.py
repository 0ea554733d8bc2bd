"""Shared addresses and configuration builders for the test suite"""

from launch_migrator.core.addresses import hook_address_for
from launch_migrator.core.plan import BasePositionParams
from launch_migrator.core.tick_math import Q96
from launch_migrator.engine.config import MigrationConfig

TOKEN = "0x1111111111111111111111111111111111111111"
CURRENCY = "0x2222222222222222222222222222222222222222"
FACTORY = "0x3333333333333333333333333333333333333333"
RECIPIENT = "0x4444444444444444444444444444444444444444"
OPERATOR = "0x5555555555555555555555555555555555555555"
GOVERNANCE = "0x6666666666666666666666666666666666666666"
OUTSIDER = "0x7777777777777777777777777777777777777777"
TRADER = "0x8888888888888888888888888888888888888888"
NATIVE = "0x0000000000000000000000000000000000000000"

# Arbitrary address carrying only the before-initialize flag
HOOK = hook_address_for(1 << 13, 1)


def make_config(**overrides) -> MigrationConfig:
    """Small launch: 1000 tokens, half auctioned, token sorts before currency"""
    params = {
        "token": TOKEN,
        "total_supply": 1000,
        "currency": CURRENCY,
        "fee": 3000,
        "tick_spacing": 60,
        "token_split_to_auction_bps": 5000,
        "position_recipient": RECIPIENT,
        "migration_block": 200,
        "sweep_block": 300,
        "operator": OPERATOR,
        "auction_factory": FACTORY,
        "auction_parameters": {"end_block": 100},
    }
    params.update(overrides)
    return MigrationConfig.model_validate(params)


def make_base(sqrt_price_x96: int = Q96, tick_spacing: int = 60) -> BasePositionParams:
    """Position parameters for the token/currency pool hooked at HOOK"""
    return BasePositionParams(
        currency=CURRENCY,
        pool_token=TOKEN,
        fee=3000,
        tick_spacing=tick_spacing,
        initial_sqrt_price_x96=sqrt_price_x96,
        liquidity=500,
        position_recipient=RECIPIENT,
        hooks=HOOK
    )
