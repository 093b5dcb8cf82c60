"""High-level operations for the WETH/CLAWD position and its vesting lock"""

from .liquidity import LiquidityManager
from .pools import PoolQuery
from .vesting import VestingManager

__all__ = ["LiquidityManager", "PoolQuery", "VestingManager"]
