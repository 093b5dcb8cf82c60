"""Custom exceptions for clawd-lp"""


class LPError(Exception):
    """Base exception for all clawd-lp errors"""
    pass


class ConfigError(LPError):
    """Configuration-related errors"""
    pass


class ConnectionError(LPError):
    """Web3 connection errors"""
    pass


class TransactionError(LPError):
    """Transaction building errors"""
    pass


class InsufficientBalanceError(LPError):
    """Insufficient token balance"""
    pass


class PositionError(LPError):
    """Position-related errors (not found, no liquidity, etc.)"""
    pass


class PoolError(LPError):
    """Pool-related errors (not initialized, price unavailable, etc.)"""
    pass


class VestingError(LPError):
    """Vesting contract errors (not locked, not owner, nothing to vest)"""
    pass
