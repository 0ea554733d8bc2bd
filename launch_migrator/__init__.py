"""
Launch Migrator

Settles a completed token auction into an AMM liquidity position: derives
the pool price from the clearing price, sizes the positions, builds the
bounded instruction plan and gates the auction/migration/sweep lifecycle.
"""

__version__ = "1.0.0"

# Core components
from .core.exceptions import LaunchMigratorError
from .core.plan import Plan, PoolKey, BasePositionParams
from .core.state import MigrationState, MigrationData
from .core.tick_calculator import PositionSide, TickBounds

# Strategies
from .strategies import (
    PositionPlanStrategy, FullRangeStrategy, AdvancedStrategy,
    GovernedStrategy, VirtualTokenStrategy
)

# Engine
from .engine.config import MigrationConfig, AuctionParameters, StrategyKind, load_config, build_strategy
from .engine.orchestrator import MigrationOrchestrator, MigrationResult

# Simulation
from .simulation.chain import SimulatedChain
from .simulation.scenario import MigrationScenario

__all__ = [
    # Core
    "LaunchMigratorError", "Plan", "PoolKey", "BasePositionParams",
    "MigrationState", "MigrationData", "PositionSide", "TickBounds",

    # Strategies
    "PositionPlanStrategy", "FullRangeStrategy", "AdvancedStrategy",
    "GovernedStrategy", "VirtualTokenStrategy",

    # Engine
    "MigrationConfig", "AuctionParameters", "StrategyKind", "load_config", "build_strategy",
    "MigrationOrchestrator", "MigrationResult",

    # Simulation
    "SimulatedChain", "MigrationScenario"
]
