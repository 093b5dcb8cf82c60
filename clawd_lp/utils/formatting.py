"""Display helpers built on the liquidity math"""

from .math import tick_to_price, from_base_units

MISSING = "—"


def format_usd_price(usd):
    """Format a USD price with precision scaled to its magnitude"""
    if usd >= 1:
        return f"${usd:.2f}"
    if usd >= 0.01:
        return f"${usd:.4f}"
    if usd >= 0.0001:
        return f"${usd:.6f}"
    return f"${usd:.8f}"


def price_to_usd(tick, reference_price):
    """
    USD price of token1 at a tick, given the USD price of token0.

    Args:
        tick: Tick to price
        reference_price: USD price of one token0 (e.g. ETH/USD)

    Returns:
        Formatted string, or an em dash when no reference price is known
    """
    if not reference_price:
        return MISSING
    return format_usd_price(reference_price / tick_to_price(tick))


def format_multiplier(tick, current_ratio):
    """How far a tick's token1 USD price is from the current one, e.g. '2.50x'"""
    if not current_ratio:
        return ""
    return f"{current_ratio / tick_to_price(tick):.2f}x"


def format_usd_value(amount_wei, price_per_token, decimals=18):
    """Parenthesised USD value of a base-unit amount, e.g. '($12.34)'"""
    if not amount_wei or not price_per_token:
        return ""
    value = from_base_units(amount_wei, decimals) * price_per_token
    if value < 0.01:
        return f"(${value:.4f})"
    return f"(${value:.2f})"


def format_weth(amount_wei, decimals=18):
    """WETH amount with 9 decimals and trailing zeros stripped"""
    text = f"{from_base_units(amount_wei, decimals):.9f}"
    return text.rstrip("0").rstrip(".")


def format_clawd_input(amount):
    """Counterpart CLAWD amount as written back into the form"""
    return f"{amount:.2f}" if amount > 0 else "0"


def format_weth_input(amount):
    """Counterpart WETH amount as written back into the form"""
    return f"{amount:.8f}" if amount > 0 else "0"


def format_time_remaining(lock_start, vest_duration, now, is_locked=True):
    """
    Countdown until a lock is fully vested.

    Args:
        lock_start: Lock start (unix seconds)
        vest_duration: Vesting duration in seconds
        now: Current unix time
        is_locked: Whether the contract currently holds a lock

    Returns:
        "{d}d {h}h {m}m", "Fully vested" or "N/A"
    """
    if not lock_start or not vest_duration or not is_locked:
        return "N/A"
    remaining = int(lock_start) + int(vest_duration) - int(now)
    if remaining <= 0:
        return "Fully vested"
    days = remaining // 86400
    hours = (remaining % 86400) // 3600
    mins = (remaining % 3600) // 60
    return f"{days}d {hours}h {mins}m"
