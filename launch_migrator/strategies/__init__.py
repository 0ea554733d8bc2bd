"""Migration strategy variants"""

from .base import PositionPlanStrategy, FullRangeStrategy
from .advanced import AdvancedStrategy
from .governed import GovernedStrategy
from .virtual import VirtualTokenStrategy

__all__ = [
    "PositionPlanStrategy", "FullRangeStrategy",
    "AdvancedStrategy", "GovernedStrategy", "VirtualTokenStrategy"
]
