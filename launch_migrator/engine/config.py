#!/usr/bin/env python3
"""
Migration Configuration

Pydantic schema for everything fixed when an orchestrator is created.
Type-level bounds live here; the ordered semantic checks run in the
orchestrator constructor so their failures are reported deterministically.
"""

import json
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..core.addresses import normalize_address
from ..core.tick_math import UINT128_MAX
from ..strategies import (
    AdvancedStrategy, FullRangeStrategy, GovernedStrategy,
    PositionPlanStrategy, VirtualTokenStrategy
)

UINT24_MAX = 2 ** 24 - 1
UINT64_MAX = 2 ** 64 - 1
INT24_MIN = -(2 ** 23)
INT24_MAX = 2 ** 23 - 1

# Semantic ceilings checked by the orchestrator
MAX_LP_FEE = 1_000_000
TOKEN_SPLIT_DENOMINATOR = 10_000


class StrategyKind(str, Enum):
    """Available migration strategy variants"""
    FULL_RANGE = "full_range"
    ADVANCED = "advanced"
    GOVERNED = "governed"
    VIRTUAL = "virtual"


class AuctionParameters(BaseModel):
    """Parameters forwarded, ABI encoded, to the auction factory"""
    model_config = ConfigDict(frozen=True)

    end_block: int = Field(ge=0, le=UINT64_MAX, description="Last block of the auction")
    currency: Optional[str] = Field(None, description="Auction currency; defaults to the migration currency")
    funds_recipient: Optional[str] = Field(None, description="Raised funds recipient; defaults to the orchestrator")

    @field_validator("currency", "funds_recipient")
    @classmethod
    def validate_optional_address(cls, v):
        return normalize_address(v) if v is not None else v


class MigrationConfig(BaseModel):
    """Immutable migration configuration"""
    model_config = ConfigDict(frozen=True)

    # Assets
    token: str = Field(description="Distributed token")
    total_supply: int = Field(ge=0, le=UINT128_MAX, description="Supply handed to the orchestrator")
    currency: str = Field(description="Raised-funds asset; the zero address is the native asset")

    # Pool
    fee: int = Field(ge=0, le=UINT24_MAX, description="LP fee in parts per million")
    tick_spacing: int = Field(ge=INT24_MIN, le=INT24_MAX)
    token_split_to_auction_bps: int = Field(ge=0, le=UINT24_MAX, description="Share of supply auctioned, in bps")
    position_recipient: str
    max_currency_amount_for_lp: int = Field(UINT128_MAX, ge=0, le=UINT128_MAX)

    # Timing and roles
    migration_block: int = Field(ge=0, le=UINT64_MAX)
    sweep_block: int = Field(ge=0, le=UINT64_MAX)
    operator: str

    # Auction
    auction_factory: str
    auction_parameters: AuctionParameters
    auction_salt: int = Field(0, ge=0, le=2 ** 256 - 1)

    # Strategy
    strategy: StrategyKind = StrategyKind.FULL_RANGE
    create_one_sided_token_position: bool = False
    create_one_sided_currency_position: bool = False
    governance: Optional[str] = None

    @field_validator("token", "currency", "position_recipient", "operator", "auction_factory")
    @classmethod
    def validate_address(cls, v):
        return normalize_address(v)

    @field_validator("governance")
    @classmethod
    def validate_governance(cls, v):
        return normalize_address(v) if v is not None else v

    @model_validator(mode="after")
    def validate_strategy_settings(self):
        if self.strategy == StrategyKind.GOVERNED and self.governance is None:
            raise ValueError("governed strategy requires a governance address")
        return self

    @property
    def auction_supply(self) -> int:
        return self.total_supply * self.token_split_to_auction_bps // TOKEN_SPLIT_DENOMINATOR

    @property
    def reserve_supply(self) -> int:
        return self.total_supply - self.auction_supply

    def to_json(self) -> str:
        return self.model_dump_json(indent=2)


def load_config(path: Union[str, Path]) -> MigrationConfig:
    """Load a migration configuration from a JSON file"""
    with open(path, 'r') as f:
        return MigrationConfig.model_validate(json.load(f))


def save_config(config: MigrationConfig, path: Union[str, Path]) -> Path:
    path = Path(path)
    with open(path, 'w') as f:
        f.write(config.to_json())
    return path


def build_strategy(config: MigrationConfig, virtual_token=None) -> PositionPlanStrategy:
    """
    Construct the strategy variant selected by the configuration.

    Args:
        config: Migration configuration
        virtual_token: Virtual token contract, required for the virtual variant

    Returns:
        The strategy instance the orchestrator will hold
    """
    one_sided = config.create_one_sided_token_position or config.create_one_sided_currency_position

    if config.strategy == StrategyKind.FULL_RANGE:
        return FullRangeStrategy()

    if config.strategy == StrategyKind.ADVANCED:
        return AdvancedStrategy(
            config.create_one_sided_token_position,
            config.create_one_sided_currency_position
        )

    if config.strategy == StrategyKind.GOVERNED:
        return GovernedStrategy(config.governance)

    if config.strategy == StrategyKind.VIRTUAL:
        if virtual_token is None:
            raise ValueError("virtual strategy requires the virtual token contract")
        if one_sided:
            inner = AdvancedStrategy(
                config.create_one_sided_token_position,
                config.create_one_sided_currency_position
            )
        else:
            inner = FullRangeStrategy()
        return VirtualTokenStrategy(inner, virtual_token)

    raise ValueError(f"Unknown strategy: {config.strategy}")
