"""Value types shared by the operations layer"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Optional


@dataclass
class PoolPrice:
    """
    Snapshot of the pool price.

    Attributes:
        sqrt_price_x96: Raw slot0 sqrtPriceX96
        sqrt_price: Float sqrt price, for amount math
        ratio: Exact token1 per token0 (CLAWD per WETH), for display
        current_tick: Tick derived from ratio, snapped to tick spacing
        pool_tick: Tick reported by slot0
        token1_usd: USD price of token1 when an ETH price is known
    """

    sqrt_price_x96: int
    sqrt_price: float
    ratio: float
    current_tick: int
    pool_tick: int
    token1_usd: Optional[float] = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class FormState:
    """
    Lock-up form state persisted between CLI runs.

    last_edited names the amount field the user typed last ("weth" or
    "clawd"); range edits recompute the other field from it.
    """

    tick_lower: int = 0
    tick_upper: int = 0
    weth_input: str = ""
    clawd_input: str = ""
    vest_days: int = 30
    last_edited: str = ""
    ts: float = 0.0

    @property
    def is_empty(self) -> bool:
        return not (self.tick_lower or self.tick_upper or self.weth_input or self.clawd_input)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> FormState:
        return cls(
            tick_lower=int(data.get("tick_lower", 0)),
            tick_upper=int(data.get("tick_upper", 0)),
            weth_input=str(data.get("weth_input", "")),
            clawd_input=str(data.get("clawd_input", "")),
            vest_days=int(data.get("vest_days", 30)),
            last_edited=str(data.get("last_edited", "")),
            ts=float(data.get("ts", 0.0)),
        )


@dataclass
class MintParams:
    """NonfungiblePositionManager.mint parameters, amounts in base units"""

    token0: str
    token1: str
    fee: int
    tick_lower: int
    tick_upper: int
    amount0_desired: int
    amount1_desired: int
    amount0_min: int
    amount1_min: int
    recipient: str
    deadline: int

    def to_tuple(self) -> tuple:
        """Convert to tuple for ABI encoding"""
        return (
            self.token0,
            self.token1,
            self.fee,
            self.tick_lower,
            self.tick_upper,
            self.amount0_desired,
            self.amount1_desired,
            self.amount0_min,
            self.amount1_min,
            self.recipient,
            self.deadline,
        )

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class LockUpParams:
    """LiquidityVesting.lockUp arguments, amounts in base units"""

    amount0: int
    amount1: int
    vest_duration: int
    tick_lower: int
    tick_upper: int
    amount0_min: int
    amount1_min: int

    def to_args(self) -> tuple:
        """Positional arguments in contract order"""
        return (
            self.amount0,
            self.amount1,
            self.vest_duration,
            self.tick_lower,
            self.tick_upper,
            self.amount0_min,
            self.amount1_min,
        )

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class VestingStatus:
    """
    Vesting contract state with derived percentages (0-100).

    Attributes:
        vested_percent: Share of the lock vested so far
        withdrawn_percent: Share already withdrawn via vest()
        available_percent: Share that can be withdrawn now
    """

    is_locked: bool
    owner: Optional[str]
    token_id: int
    lock_start: int
    vest_duration: int
    vested_percent_raw: int
    initial_liquidity: int
    vested_liquidity: int
    vested_percent: float
    withdrawn_percent: float
    available_percent: float

    @property
    def total_vested_percent(self) -> float:
        return self.withdrawn_percent + self.available_percent

    def to_dict(self) -> dict:
        data = asdict(self)
        data["total_vested_percent"] = self.total_vested_percent
        return data


@dataclass
class PositionQuote:
    """
    Sized position for a range and one anchor amount.

    Float amounts are human units; *_wei fields are 18-decimal base units
    and the minimums carry the slippage buffer.
    """

    tick_lower: int
    tick_upper: int
    current_tick: int
    position_type: str
    anchor: str
    weth_amount: float
    clawd_amount: float
    weth_wei: int
    clawd_wei: int
    weth_min: int
    clawd_min: int

    def to_dict(self) -> dict:
        return asdict(self)
