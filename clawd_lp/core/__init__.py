"""Core module - configuration, connection, exceptions, and shared queries"""

from .config import Config
from .connection import Web3Manager
from .exceptions import LPError, ConfigError, ConnectionError, TransactionError
from .form_cache import FormCache
from .balances import BalanceQuery

__all__ = [
    "Config",
    "Web3Manager",
    "LPError",
    "ConfigError",
    "ConnectionError",
    "TransactionError",
    "FormCache",
    "BalanceQuery",
]
