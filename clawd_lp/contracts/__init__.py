"""Contract wrappers for ERC20, Pool, NFPM, and LiquidityVesting interactions"""

from .erc20 import ERC20
from .nfpm import NFPM
from .pool import Pool
from .vesting import LiquidityVesting

__all__ = ["ERC20", "NFPM", "Pool", "LiquidityVesting"]
