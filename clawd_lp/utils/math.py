"""Concentrated-liquidity math for Uniswap V3 positions.

Everything in this module is pure and never raises on missing or
not-yet-loaded inputs: a zero price, a zero amount or an inverted range
degrade to a zero result.

There are two price conversion paths:

* ``sqrt_price_x96_to_sqrt_price`` gives a float sqrt-price for amount math.
* ``sqrt_price_x96_to_ratio`` squares the Q96 integer exactly and is used
  for the headline token1-per-token0 figure.
"""

import math
from decimal import Decimal, ROUND_DOWN

Q96 = 2 ** 96
Q192 = 2 ** 192

TICK_BASE = 1.0001
MIN_TICK = -887272
MAX_TICK = 887272

# ln(price)/ln(1.0001) carries ~1e-10 of float noise at the tick bounds
TICK_EPSILON = 1e-9

BPS_DENOMINATOR = 10000
DEFAULT_SLIPPAGE_BPS = 500

BELOW_RANGE = "below_range"
IN_RANGE = "in_range"
ABOVE_RANGE = "above_range"


def tick_to_price(tick):
    """Price (token1 per token0) at a tick: 1.0001 ** tick"""
    return TICK_BASE ** tick


def tick_to_sqrt_price(tick):
    """Convert tick to sqrt price (not X96 format)"""
    return TICK_BASE ** (tick / 2)


def snap_tick_to_spacing(tick, spacing):
    """
    Snap a tick to the nearest multiple of spacing, halves rounding up.

    Args:
        tick: Integer tick
        spacing: Tick spacing for the fee tier

    Returns:
        Nearest valid tick
    """
    if spacing <= 1:
        return int(tick)
    return ((2 * int(tick) + spacing) // (2 * spacing)) * spacing


def round_tick_to_spacing(tick, spacing):
    """
    Round tick down to a valid tick for given spacing.

    Args:
        tick: Raw tick value
        spacing: Tick spacing for fee tier

    Returns:
        Valid tick aligned to spacing, never above the input
    """
    if spacing <= 1:
        return int(tick)
    return (int(tick) // spacing) * spacing


def price_to_tick(price, tick_spacing=1):
    """
    Convert a price to a usable tick.

    The raw log-price is floored first and the result is then snapped to the
    nearest multiple of ``tick_spacing``. Every caller in the package goes
    through this function so the rounding order is the same everywhere.

    Args:
        price: Price as token1/token0
        tick_spacing: Tick spacing to snap to (1 = no snapping)

    Returns:
        Tick aligned to spacing, or 0 for a missing/non-positive price
    """
    if not price or price <= 0:
        return 0
    raw = math.floor(math.log(price) / math.log(TICK_BASE) + TICK_EPSILON)
    return snap_tick_to_spacing(raw, tick_spacing)


def sqrt_price_x96_to_sqrt_price(sqrt_price_x96):
    """Float sqrt price from sqrtPriceX96, for amount estimation"""
    if not sqrt_price_x96:
        return 0.0
    return sqrt_price_x96 / Q96


def sqrt_price_x96_to_ratio(sqrt_price_x96, scale=10 ** 18):
    """
    Exact token1/token0 ratio from sqrtPriceX96.

    Squares the integer before any float conversion, so no bits of the
    160-bit value are lost. The result is truncated to 1/scale.
    """
    if not sqrt_price_x96:
        return 0.0
    ratio_scaled = sqrt_price_x96 * sqrt_price_x96 * scale // Q192
    return ratio_scaled / scale


def tick_to_sqrt_price_x96(tick):
    """Tick to sqrtPriceX96 integer (float precision, floored)"""
    return int(math.floor(tick_to_sqrt_price(tick) * Q96))


def liquidity_for_amount0(amount0, sqrt_price_a, sqrt_price_b):
    """Liquidity backed by amount0 between two sqrt prices"""
    if sqrt_price_a > sqrt_price_b:
        sqrt_price_a, sqrt_price_b = sqrt_price_b, sqrt_price_a
    if not amount0 or amount0 <= 0 or sqrt_price_a <= 0 or sqrt_price_a == sqrt_price_b:
        return 0.0
    return amount0 * sqrt_price_a * sqrt_price_b / (sqrt_price_b - sqrt_price_a)


def liquidity_for_amount1(amount1, sqrt_price_a, sqrt_price_b):
    """Liquidity backed by amount1 between two sqrt prices"""
    if sqrt_price_a > sqrt_price_b:
        sqrt_price_a, sqrt_price_b = sqrt_price_b, sqrt_price_a
    if not amount1 or amount1 <= 0 or sqrt_price_a == sqrt_price_b:
        return 0.0
    return amount1 / (sqrt_price_b - sqrt_price_a)


def amount0_for_liquidity(weth_amount, sqrt_price_current, sqrt_price_lower, sqrt_price_upper):
    """
    Token1 amount that pairs with a token0 (WETH) amount.

    The current price is clipped to the range, the implied liquidity is
    taken from the token0 side and the token1 side is sized from it.

    Args:
        weth_amount: Desired token0 amount (human readable)
        sqrt_price_current: Current sqrt price (float)
        sqrt_price_lower: sqrt price at tick_lower
        sqrt_price_upper: sqrt price at tick_upper

    Returns:
        Matching token1 amount; 0 when no token1 is needed or inputs are missing
    """
    if not weth_amount or weth_amount <= 0 or not sqrt_price_current or sqrt_price_current <= 0:
        return 0.0
    if sqrt_price_lower >= sqrt_price_upper:
        return 0.0
    if sqrt_price_current <= sqrt_price_lower:
        return 0.0

    sp = min(sqrt_price_current, sqrt_price_upper)
    # At or above the range no token0 can be deposited
    if sp >= sqrt_price_upper:
        return 0.0

    liquidity = liquidity_for_amount0(weth_amount, sp, sqrt_price_upper)
    return liquidity * (sp - sqrt_price_lower)


def amount1_for_liquidity(clawd_amount, sqrt_price_current, sqrt_price_lower, sqrt_price_upper):
    """
    Token0 amount that pairs with a token1 (CLAWD) amount.

    Inverse of amount0_for_liquidity at the same price and range.

    Returns:
        Matching token0 amount; 0 when no token0 is needed or inputs are missing
    """
    if not clawd_amount or clawd_amount <= 0 or not sqrt_price_current or sqrt_price_current <= 0:
        return 0.0
    if sqrt_price_lower >= sqrt_price_upper:
        return 0.0
    if sqrt_price_current >= sqrt_price_upper:
        return 0.0

    sp = max(sqrt_price_current, sqrt_price_lower)
    if sp <= sqrt_price_lower:
        return 0.0

    liquidity = liquidity_for_amount1(clawd_amount, sqrt_price_lower, sp)
    return liquidity * (sqrt_price_upper - sp) / (sp * sqrt_price_upper)


def get_amounts_for_liquidity(sqrt_price_current, tick_lower, tick_upper, liquidity):
    """
    Calculate token amounts held by a liquidity value.

    Args:
        sqrt_price_current: Current sqrt price (float)
        tick_lower: Position lower tick
        tick_upper: Position upper tick
        liquidity: Position liquidity

    Returns:
        (amount0, amount1) in the same unit scale as liquidity
    """
    if not liquidity or liquidity <= 0:
        return 0.0, 0.0
    if not sqrt_price_current or sqrt_price_current <= 0 or tick_lower >= tick_upper:
        return 0.0, 0.0

    sqrt_pl = tick_to_sqrt_price(tick_lower)
    sqrt_pu = tick_to_sqrt_price(tick_upper)

    if sqrt_price_current <= sqrt_pl:
        # Price below range: all token0
        amount0 = liquidity * (sqrt_pu - sqrt_pl) / (sqrt_pl * sqrt_pu)
        amount1 = 0.0
    elif sqrt_price_current < sqrt_pu:
        amount0 = liquidity * (sqrt_pu - sqrt_price_current) / (sqrt_price_current * sqrt_pu)
        amount1 = liquidity * (sqrt_price_current - sqrt_pl)
    else:
        # Price above range: all token1
        amount0 = 0.0
        amount1 = liquidity * (sqrt_pu - sqrt_pl)

    return amount0, amount1


def get_amounts_for_liquidity_x96(sqrt_price_x96, tick_lower, tick_upper, liquidity):
    """
    Integer variant of get_amounts_for_liquidity working on Q96 values.

    Used for reading on-chain positions, where liquidity and the resulting
    amounts are base-unit integers.

    Returns:
        (amount0, amount1) as integers
    """
    if not liquidity or liquidity <= 0:
        return 0, 0
    if not sqrt_price_x96 or sqrt_price_x96 <= 0 or tick_lower >= tick_upper:
        return 0, 0

    sqrt_lower = tick_to_sqrt_price_x96(tick_lower)
    sqrt_upper = tick_to_sqrt_price_x96(tick_upper)

    if sqrt_price_x96 <= sqrt_lower:
        return liquidity * (sqrt_upper - sqrt_lower) * Q96 // sqrt_lower // sqrt_upper, 0
    if sqrt_price_x96 < sqrt_upper:
        amount0 = liquidity * (sqrt_upper - sqrt_price_x96) * Q96 // sqrt_price_x96 // sqrt_upper
        amount1 = liquidity * (sqrt_price_x96 - sqrt_lower) // Q96
        return amount0, amount1
    return 0, liquidity * (sqrt_upper - sqrt_lower) // Q96


def position_type(sqrt_price_current, sqrt_price_lower, sqrt_price_upper):
    """Where the current price sits relative to a range"""
    if sqrt_price_current <= sqrt_price_lower:
        return BELOW_RANGE
    if sqrt_price_current >= sqrt_price_upper:
        return ABOVE_RANGE
    return IN_RANGE


def default_range(current_tick, tick_spacing, half_width_steps=50):
    """Initial range: current tick +/- half_width_steps spacings"""
    width = half_width_steps * tick_spacing
    return current_tick - width, current_tick + width


def clamp_range(tick_lower, tick_upper, tick_spacing):
    """
    Align a range to spacing and keep tick_lower < tick_upper.

    When the bounds meet or cross, the upper bound is placed one spacing
    above the lower bound.
    """
    tick_lower = round_tick_to_spacing(tick_lower, tick_spacing)
    tick_upper = round_tick_to_spacing(tick_upper, tick_spacing)
    if tick_lower >= tick_upper:
        tick_upper = tick_lower + max(tick_spacing, 1)
    return tick_lower, tick_upper


def to_base_units(amount, decimals=18):
    """
    Convert a human amount (float or decimal string) to base units.

    Excess precision is truncated, never rounded up.
    """
    if amount in (None, ""):
        return 0
    value = Decimal(str(amount)) * (Decimal(10) ** decimals)
    if value <= 0:
        return 0
    return int(value.to_integral_value(rounding=ROUND_DOWN))


def from_base_units(amount, decimals=18):
    """Convert base units to a human-readable float"""
    return amount / (10 ** decimals)


def apply_slippage(amount, slippage_bps=DEFAULT_SLIPPAGE_BPS):
    """Minimum acceptable base-unit amount after slippage"""
    return amount * (BPS_DENOMINATOR - slippage_bps) // BPS_DENOMINATOR


def calculate_slippage_amounts(amount0, amount1, slippage_bps=DEFAULT_SLIPPAGE_BPS):
    """
    Calculate minimum amounts with slippage protection.

    Args:
        amount0: Desired amount0 in wei
        amount1: Desired amount1 in wei
        slippage_bps: Slippage in basis points (500 = 5%)

    Returns:
        (amount0_min, amount1_min) in wei
    """
    return apply_slippage(amount0, slippage_bps), apply_slippage(amount1, slippage_bps)
