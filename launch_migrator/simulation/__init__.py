"""In-memory collaborators for running migrations end to end"""

from .chain import SimulatedChain
from .auction import SimulatedAuction, SimulatedAuctionFactory
from .pool_manager import SimulatedPoolManager, PoolState
from .position_manager import SimulatedPositionManager, PositionInfo
from .virtual_token import SimulatedVirtualToken
from .scenario import MigrationScenario

__all__ = [
    "SimulatedChain", "SimulatedAuction", "SimulatedAuctionFactory",
    "SimulatedPoolManager", "PoolState",
    "SimulatedPositionManager", "PositionInfo",
    "SimulatedVirtualToken", "MigrationScenario"
]
