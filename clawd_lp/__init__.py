"""
CLAWD LP - WETH/CLAWD concentrated liquidity and vesting toolkit
"""

from .core.connection import Web3Manager
from .core.config import Config
from .core.exceptions import LPError, ConfigError, ConnectionError, TransactionError

__version__ = "0.1.0"
__all__ = [
    "Web3Manager",
    "Config",
    "LPError",
    "ConfigError",
    "ConnectionError",
    "TransactionError",
]
