"""Utility functions for liquidity math, formatting and transactions"""

from .math import tick_to_price, tick_to_sqrt_price, price_to_tick, get_amounts_for_liquidity
from .transactions import TransactionBuilder

__all__ = [
    "tick_to_price",
    "tick_to_sqrt_price",
    "price_to_tick",
    "get_amounts_for_liquidity",
    "TransactionBuilder",
]
