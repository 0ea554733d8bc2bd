"""Migration engine: configuration and the orchestrating state machine"""

from .config import (
    MigrationConfig, AuctionParameters, StrategyKind,
    load_config, save_config, build_strategy
)
from .orchestrator import MigrationOrchestrator, MigrationResult

__all__ = [
    "MigrationConfig", "AuctionParameters", "StrategyKind",
    "load_config", "save_config", "build_strategy",
    "MigrationOrchestrator", "MigrationResult"
]
