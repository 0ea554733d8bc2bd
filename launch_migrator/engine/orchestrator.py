#!/usr/bin/env python3
"""
Migration Orchestrator

Drives one token launch from funding through auction, pool migration and
the final sweep of residual balances:

    CREATED --fund--> AUCTION_LIVE --migrate--> MIGRATED --sweep--> SWEPT

The orchestrator is also the pool's hook: it must be bound to an address
encoding its strategy's hook permissions before any operation runs.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from eth_abi import encode

from ..core.actions import Action, decode_unlock_data
from ..core.addresses import (
    address_to_int, is_native, is_reserved_recipient, is_valid_hook_address,
    normalize_address, salt_from_int
)
from ..core.exceptions import (
    AddressAlreadyBound, AddressNotBound, AuctionSupplyIsZero, CurrencyAmountTooHigh,
    GovernanceError, HookAddressNotValid, InsufficientCurrency, InvalidAmountReceived,
    InvalidCurrency, InvalidEndBlock, InvalidFee, InvalidFundsRecipient, InvalidInitializer,
    InvalidPositionRecipient, InvalidStateTransition, InvalidSweepBlock, InvalidTickSpacing,
    MigrationNotAllowed, NoCurrencyRaised, NotOperator, SweepNotAllowed, TokenSplitTooHigh
)
from ..core.plan import BasePositionParams, PoolKey
from ..core.state import MigrationData, MigrationState
from ..core.tick_calculator import full_range_bounds
from ..core.tick_math import (
    MAX_TICK_SPACING, MIN_TICK_SPACING, UINT128_MAX, get_tick_at_sqrt_price
)
from ..core.token_pricing import convert_price, size_amounts, size_liquidity
from ..strategies.base import PositionPlanStrategy
from .config import MAX_LP_FEE, TOKEN_SPLIT_DENOMINATOR, MigrationConfig
from .interfaces import AuctionInterface, PoolManagerInterface, PositionManagerInterface

logger = logging.getLogger(__name__)

AUCTION_PARAMETERS_ABI = ["address", "address", "uint64"]


@dataclass
class MigrationResult:
    """Outcome of a successful migration"""
    pool_id: str
    pool_key: PoolKey
    initial_tick: int
    data: MigrationData
    token_transferred: int
    currency_transferred: int
    payload: bytes
    actions: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "pool_id": self.pool_id,
            "pool_key": list(self.pool_key.to_abi_tuple()),
            "initial_tick": self.initial_tick,
            "token_transferred": self.token_transferred,
            "currency_transferred": self.currency_transferred,
            "actions": self.actions,
            **self.data.to_dict()
        }


class MigrationOrchestrator:
    """One-shot auction-to-pool migration state machine"""

    def __init__(
        self,
        config: MigrationConfig,
        strategy: PositionPlanStrategy,
        chain,
        pool_manager: PoolManagerInterface,
        position_manager: PositionManagerInterface
    ):
        self._validate_config(config)

        self.config = config
        self.strategy = strategy
        self.chain = chain
        self.pool_manager = pool_manager
        self.position_manager = position_manager

        self.auction_supply = config.auction_supply
        self.reserve_supply = config.reserve_supply
        self.pool_token = normalize_address(strategy.pool_token(config.token))

        self.address: Optional[str] = None
        self.auction: Optional[AuctionInterface] = None
        self.state = MigrationState.CREATED

    @staticmethod
    def _validate_config(config: MigrationConfig):
        """Semantic checks, in a fixed order so the first violation always wins"""
        if config.sweep_block <= config.migration_block:
            raise InvalidSweepBlock(config.sweep_block, config.migration_block)
        if config.token_split_to_auction_bps >= TOKEN_SPLIT_DENOMINATOR:
            raise TokenSplitTooHigh(config.token_split_to_auction_bps, TOKEN_SPLIT_DENOMINATOR)
        if not MIN_TICK_SPACING <= config.tick_spacing <= MAX_TICK_SPACING:
            raise InvalidTickSpacing(config.tick_spacing, MIN_TICK_SPACING, MAX_TICK_SPACING)
        if config.fee > MAX_LP_FEE:
            raise InvalidFee(config.fee, MAX_LP_FEE)
        if is_reserved_recipient(config.position_recipient):
            raise InvalidPositionRecipient(config.position_recipient)
        if config.auction_supply == 0:
            raise AuctionSupplyIsZero(config.total_supply, config.token_split_to_auction_bps)

    # Hook identity

    def bind_address(self, address: str):
        """Attach the deployed address; it must encode the strategy's hook flags"""
        if self.address is not None:
            raise AddressAlreadyBound(self.address)
        address = normalize_address(address)
        if not is_valid_hook_address(address, self.strategy.hook_permissions):
            raise HookAddressNotValid(address, self.strategy.hook_permissions)

        self.address = address
        self.chain.register(address, self)
        logger.debug("Orchestrator bound to %s", address)

    def _require_address(self) -> str:
        if self.address is None:
            raise AddressNotBound()
        return self.address

    def snapshot(self) -> Tuple[MigrationState, Optional[AuctionInterface]]:
        return self.state, self.auction

    def restore(self, snapshot: Tuple[MigrationState, Optional[AuctionInterface]]):
        self.state, self.auction = snapshot

    # Funding

    def encode_auction_parameters(self) -> bytes:
        params = self.config.auction_parameters
        return encode(AUCTION_PARAMETERS_ABI, [
            params.currency or self.config.currency,
            params.funds_recipient or self._require_address(),
            params.end_block
        ])

    def fund(self) -> AuctionInterface:
        """
        Deploy the auction and forward its share of the supply.

        The orchestrator must already hold the full configured supply.
        """
        address = self._require_address()
        if self.state != MigrationState.CREATED:
            raise InvalidStateTransition("fund", self.state)

        balance = self.chain.balance_of(self.config.token, address)
        if balance < self.config.total_supply:
            raise InvalidAmountReceived(self.config.total_supply, balance)

        factory = self.chain.contract_at(self.config.auction_factory)

        with self.chain.atomic():
            auction = factory.initialize_distribution(
                address,
                self.config.token,
                self.auction_supply,
                self.encode_auction_parameters(),
                salt_from_int(self.config.auction_salt)
            )
            self._validate_auction(auction)

            self.chain.transfer(self.config.token, address, auction.address, self.auction_supply)
            auction.on_tokens_received()

            self.auction = auction
            self.state = MigrationState.AUCTION_LIVE

        logger.info("Auction %s created with %d tokens (reserve %d)",
                    auction.address, self.auction_supply, self.reserve_supply)
        return auction

    def _validate_auction(self, auction: AuctionInterface):
        if normalize_address(auction.funds_recipient) != self.address:
            raise InvalidFundsRecipient(auction.funds_recipient, self.address)
        if auction.end_block >= self.config.migration_block:
            raise InvalidEndBlock(auction.end_block, self.config.migration_block)
        if normalize_address(auction.currency) != self.config.currency:
            raise InvalidCurrency(auction.currency, self.config.currency)

    # Migration

    @property
    def currency_is_currency0(self) -> bool:
        return address_to_int(self.config.currency) < address_to_int(self.pool_token)

    def prepare_migration_data(self) -> MigrationData:
        """Read the auction result and derive price, amounts and liquidity"""
        raised = self.auction.currency_raised()
        if raised > UINT128_MAX:
            raise CurrencyAmountTooHigh(raised, UINT128_MAX)
        if raised == 0:
            raise NoCurrencyRaised()

        balance = self.chain.balance_of(self.config.currency, self.address)
        if balance < raised:
            raise InsufficientCurrency(raised, balance)

        price_x192, sqrt_price_x96 = convert_price(
            self.auction.clearing_price(), self.currency_is_currency0
        )

        # anything raised above the LP cap stays here for the sweep
        budget = min(raised, self.config.max_currency_amount_for_lp)
        sized = size_amounts(price_x192, budget, self.reserve_supply, self.currency_is_currency0)

        if self.currency_is_currency0:
            amount0, amount1 = sized.currency_amount, sized.token_amount
        else:
            amount0, amount1 = sized.token_amount, sized.currency_amount

        bounds = full_range_bounds(self.config.tick_spacing)
        liquidity = size_liquidity(sqrt_price_x96, bounds.lower, bounds.upper, amount0, amount1)

        return MigrationData(
            price_x192=price_x192,
            sqrt_price_x96=sqrt_price_x96,
            token_amount=sized.token_amount,
            currency_amount=sized.currency_amount,
            leftover_currency=sized.leftover_currency,
            liquidity=liquidity,
            reserve_supply=self.reserve_supply,
            raised_amount=raised
        )

    def base_position_params(self, data: MigrationData) -> BasePositionParams:
        return BasePositionParams(
            currency=self.config.currency,
            pool_token=self.pool_token,
            fee=self.config.fee,
            tick_spacing=self.config.tick_spacing,
            initial_sqrt_price_x96=data.sqrt_price_x96,
            liquidity=data.liquidity,
            position_recipient=self.config.position_recipient,
            hooks=self.address
        )

    def migrate(self) -> MigrationResult:
        """
        Initialize the pool at the clearing price and create the positions.

        Everything is computed before the first mutation; the mutations run
        in one unit of work, so a failure leaves no trace.
        """
        address = self._require_address()
        if self.state != MigrationState.AUCTION_LIVE:
            raise InvalidStateTransition("migrate", self.state)

        current_block = self.chain.block_number
        if current_block < self.config.migration_block:
            raise MigrationNotAllowed(self.config.migration_block, current_block)

        data = self.prepare_migration_data()
        base = self.base_position_params(data)
        payload = self.strategy.build_plan(data, base)
        token_amount = self.strategy.token_transfer_amount(data)
        currency_amount = self.strategy.currency_transfer_amount(data)

        with self.chain.atomic():
            initial_tick = self.pool_manager.initialize(address, base.pool_key, data.sqrt_price_x96)
            self._transfer_and_execute(payload, token_amount, currency_amount)
            self.state = MigrationState.MIGRATED

        actions, _ = decode_unlock_data(payload)
        result = MigrationResult(
            pool_id=base.pool_key.pool_id,
            pool_key=base.pool_key,
            initial_tick=initial_tick,
            data=data,
            token_transferred=token_amount,
            currency_transferred=currency_amount,
            payload=payload,
            actions=[Action(a).name for a in actions]
        )

        logger.info("Migrated to pool %s at tick %d with liquidity %d (%d actions)",
                    result.pool_id, initial_tick, data.liquidity, len(result.actions))
        return result

    def _transfer_and_execute(self, payload: bytes, token_amount: int, currency_amount: int):
        position_manager = self.position_manager

        if token_amount > 0:
            self.strategy.prepare_token_transfer(self.address, token_amount)
            self.chain.transfer(self.pool_token, self.address, position_manager.address, token_amount)

        value = 0
        if is_native(self.config.currency):
            value = currency_amount
        elif currency_amount > 0:
            self.chain.transfer(self.config.currency, self.address, position_manager.address, currency_amount)

        position_manager.modify_liquidities(self.address, payload, self.chain.timestamp, value)

    # Pool hook callbacks

    def before_initialize(self, sender: str, key: PoolKey, sqrt_price_x96: int):
        self._require_address()
        if normalize_address(sender) != self.address:
            raise InvalidInitializer(sender)

    def before_swap(self, sender: str, key: PoolKey, zero_for_one: bool, amount_specified: int):
        self.strategy.before_swap(sender)

    def approve_trading(self, caller: str):
        approve = getattr(self.strategy, "approve_trading", None)
        if approve is None:
            raise GovernanceError(f"Strategy {self.strategy.name} has no trading gate")
        approve(caller)

    # Sweeps

    def _check_sweep(self, caller: str):
        self._require_address()
        current_block = self.chain.block_number
        if current_block < self.config.sweep_block:
            raise SweepNotAllowed(self.config.sweep_block, current_block)
        if normalize_address(caller) != self.config.operator:
            raise NotOperator(caller, self.config.operator)

    def _sweep_assets(self, assets: List[str]) -> Dict[str, int]:
        swept = {}
        with self.chain.atomic():
            for asset in assets:
                balance = self.chain.balance_of(asset, self.address)
                if balance > 0:
                    self.chain.transfer(asset, self.address, self.config.operator, balance)
                swept[asset] = balance
            if self.state == MigrationState.MIGRATED:
                self.state = MigrationState.SWEPT
        return swept

    def sweep_token(self, caller: str) -> Dict[str, int]:
        """Send every remaining token (and pool-facing underlying) balance to the operator"""
        self._check_sweep(caller)
        assets = [self.config.token]
        if self.pool_token != self.config.token:
            assets.append(self.pool_token)

        swept = self._sweep_assets(assets)
        logger.info("Swept tokens to %s: %s", self.config.operator, swept)
        return swept

    def sweep_currency(self, caller: str) -> int:
        """Send the remaining currency balance to the operator"""
        self._check_sweep(caller)
        swept = self._sweep_assets([self.config.currency])[self.config.currency]
        logger.info("Swept %d currency to %s", swept, self.config.operator)
        return swept

    def get_state_summary(self) -> dict:
        return {
            "address": self.address,
            "state": self.state.value,
            "auction": self.auction.address if self.auction else None,
            "auction_supply": self.auction_supply,
            "reserve_supply": self.reserve_supply,
            "pool_token": self.pool_token,
            "strategy": self.strategy.describe()
        }
