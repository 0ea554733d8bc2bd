#!/usr/bin/env python3
"""
Migration Scenario

Wires a complete in-memory environment from a MigrationConfig and drives
the launch through funding, auction clearing, migration and sweep.
"""

import logging
from typing import Dict, List, Optional, Tuple

from eth_utils import keccak

from ..core.addresses import hook_address_for, normalize_address
from ..core.state import MigrationState
from ..engine.config import MigrationConfig, StrategyKind, build_strategy
from ..engine.orchestrator import MigrationOrchestrator, MigrationResult
from .auction import SimulatedAuction, SimulatedAuctionFactory
from .chain import SimulatedChain
from .pool_manager import SimulatedPoolManager
from .position_manager import PositionInfo, SimulatedPositionManager
from .virtual_token import SimulatedVirtualToken

logger = logging.getLogger(__name__)

POOL_MANAGER_ADDRESS = "0x000000000004444c5dc75cB358380D2e3dE08A90"
POSITION_MANAGER_ADDRESS = "0xbD216513d74C8cf14cf4747E6AaA6420FF64ee9e"
DEFAULT_UNDERLYING_ADDRESS = "0x5Ee5bf7ae06D1Be5997A1A72006FE6C607eC6DE8"

# High bits of the simulated orchestrator address; the low 14 bits carry hook flags
ORCHESTRATOR_ADDRESS_PREFIX = int.from_bytes(keccak(b"launch_migrator.orchestrator")[:18], "big")


class MigrationScenario:
    """End-to-end launch environment for one configuration"""

    def __init__(self, config: MigrationConfig, chain: Optional[SimulatedChain] = None,
                 underlying: str = DEFAULT_UNDERLYING_ADDRESS):
        self.config = config
        self.chain = chain or SimulatedChain()

        self.auction_factory = SimulatedAuctionFactory(self.chain, config.auction_factory)
        self.pool_manager = SimulatedPoolManager(self.chain, POOL_MANAGER_ADDRESS)
        self.position_manager = SimulatedPositionManager(
            self.chain, POSITION_MANAGER_ADDRESS, self.pool_manager
        )

        self.virtual_token: Optional[SimulatedVirtualToken] = None
        if config.strategy == StrategyKind.VIRTUAL:
            self.virtual_token = SimulatedVirtualToken(self.chain, config.token, underlying)

        self.strategy = build_strategy(config, self.virtual_token)
        self.orchestrator = MigrationOrchestrator(
            config, self.strategy, self.chain, self.pool_manager, self.position_manager
        )
        self.orchestrator.bind_address(
            hook_address_for(self.strategy.hook_permissions, ORCHESTRATOR_ADDRESS_PREFIX)
        )

        self.auction: Optional[SimulatedAuction] = None
        self.result: Optional[MigrationResult] = None

    @property
    def address(self) -> str:
        return self.orchestrator.address

    def supply_tokens(self, amount: Optional[int] = None):
        """Mint the launch supply straight to the orchestrator"""
        amount = self.config.total_supply if amount is None else amount
        if self.virtual_token is not None:
            self.virtual_token.mint_backed(self.address, amount)
        else:
            self.chain.mint(self.config.token, self.address, amount)

    def fund(self) -> SimulatedAuction:
        if self.chain.balance_of(self.config.token, self.address) == 0:
            self.supply_tokens()
        self.auction = self.orchestrator.fund()
        return self.auction

    def settle_auction(self, clearing_price: int, currency_raised: int):
        """Record the clearing result, end the auction and collect the proceeds"""
        self.auction.record_clearing(clearing_price, currency_raised)
        self.chain.advance_to_block(self.auction.end_block + 1)
        self.auction.sweep_currency()

    def migrate(self) -> MigrationResult:
        self.chain.advance_to_block(self.config.migration_block)
        self.result = self.orchestrator.migrate()
        return self.result

    def sweep(self) -> Dict[str, int]:
        """Sweep every residual balance to the operator"""
        self.chain.advance_to_block(self.config.sweep_block)
        swept = dict(self.orchestrator.sweep_token(self.config.operator))
        swept[self.config.currency] = self.orchestrator.sweep_currency(self.config.operator)
        return swept

    def run(self, clearing_price: int, currency_raised: int, sweep: bool = False) -> MigrationResult:
        """Fund, clear, migrate and optionally sweep in one go"""
        if self.orchestrator.state == MigrationState.CREATED:
            self.fund()
        self.settle_auction(clearing_price, currency_raised)
        result = self.migrate()
        if sweep:
            self.sweep()
        return result

    def swap(self, trader: str, zero_for_one: bool, amount_in: int) -> Tuple[int, int]:
        """Fund a trader with the input asset and swap it in the migrated pool"""
        key = self.result.pool_key
        asset_in = key.currency0 if zero_for_one else key.currency1
        self.chain.mint(asset_in, trader, amount_in)
        return self.pool_manager.swap(normalize_address(trader), key, zero_for_one, amount_in)

    @property
    def positions(self) -> List[PositionInfo]:
        return self.position_manager.positions_of(self.config.position_recipient)

    def get_balances(self) -> Dict[str, Dict[str, int]]:
        """Balances of the orchestrator and the operator in every launch asset"""
        assets = {"token": self.config.token, "currency": self.config.currency}
        if self.virtual_token is not None:
            assets["underlying"] = self.virtual_token.underlying

        holders = {"orchestrator": self.address, "operator": self.config.operator}
        return {
            holder_name: {name: self.chain.balance_of(asset, holder) for name, asset in assets.items()}
            for holder_name, holder in holders.items()
        }
