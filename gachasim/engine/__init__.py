"""
Engine module for the gacha simulator.

Contains the weighted sampler, the inventory and statistics accumulator and
the roll orchestrator.
"""

from .accumulator import Accumulator, Stats
from .orchestrator import RollOrchestrator, RollResult, RollState
from .sampler import (
    draw_item,
    group_pool,
    rarity_odds,
    sample_pool_item,
    sample_rarity,
    validate_weight_table,
)

__all__ = [
    "Accumulator",
    "Stats",
    "RollOrchestrator",
    "RollResult",
    "RollState",
    "draw_item",
    "group_pool",
    "rarity_odds",
    "sample_pool_item",
    "sample_rarity",
    "validate_weight_table",
]
