"""Vesting status, previews and claim / vest call building"""

import time
import logging

from ..core.connection import Web3Manager
from ..core.config import Config
from ..core.exceptions import VestingError
from ..contracts.nfpm import NFPM
from ..contracts.vesting import LiquidityVesting
from ..types import VestingStatus
from ..utils.gas import GasManager
from ..utils.formatting import format_time_remaining
from ..utils.math import apply_slippage, from_base_units, get_amounts_for_liquidity_x96
from .pools import PoolQuery

logger = logging.getLogger(__name__)

# vestedPercent() scale: 1e18 = 100%
PERCENT_SCALE = 10 ** 18


def vested_percent_from_raw(raw):
    """vestedPercent() value as a 0-100 percentage"""
    return raw * 100 / PERCENT_SCALE


def withdrawn_percent(vested_liquidity, initial_liquidity):
    """Share of the initial liquidity already withdrawn, 2 decimals truncated"""
    if not initial_liquidity:
        return 0.0
    return vested_liquidity * 10000 // initial_liquidity / 100


def liquidity_to_vest(vested_percent_raw, initial_liquidity, vested_liquidity):
    """Liquidity a vest() call would remove now (never negative)"""
    target = vested_percent_raw * initial_liquidity // PERCENT_SCALE
    return max(0, target - vested_liquidity)


class VestingManager:
    """Read the LiquidityVesting contract and build its owner calls"""

    def __init__(self, manager=None, vesting=None, nfpm=None, pool_query=None,
                 maxFeePerGas=None, maxPriorityFeePerGas=None, clock=time.time):
        """
        Args:
            manager: Web3Manager instance (created if None)
            vesting: LiquidityVesting wrapper (created from config if None)
            nfpm: NFPM wrapper (created if None)
            pool_query: PoolQuery for price snapshots (created if None)
            maxFeePerGas: Maximum fee per gas in Gwei (None = use config/no limit)
            maxPriorityFeePerGas: Priority fee in Gwei (None = use config)
            clock: Callable returning unix time, for the countdown
        """
        self.manager = manager or Web3Manager()
        self.config = Config()
        self.gas_manager = GasManager(self.manager, maxFeePerGas, maxPriorityFeePerGas)
        self.vesting = vesting or LiquidityVesting(self.manager, gas_manager=self.gas_manager)
        self.nfpm = nfpm or NFPM(self.manager, self.gas_manager)
        self.pool_query = pool_query or PoolQuery(self.manager)
        self.clock = clock

    def status(self):
        """
        Current vesting state with derived percentages.

        Returns:
            VestingStatus
        """
        state = self.vesting.read_state()
        vested_pct = vested_percent_from_raw(state["vested_percent"])
        withdrawn_pct = withdrawn_percent(state["vested_liquidity"], state["initial_liquidity"])

        return VestingStatus(
            is_locked=state["is_locked"],
            owner=state["owner"],
            token_id=state["token_id"],
            lock_start=state["lock_start"],
            vest_duration=state["vest_duration"],
            vested_percent_raw=state["vested_percent"],
            initial_liquidity=state["initial_liquidity"],
            vested_liquidity=state["vested_liquidity"],
            vested_percent=vested_pct,
            withdrawn_percent=withdrawn_pct,
            available_percent=max(0.0, vested_pct - withdrawn_pct),
        )

    def time_remaining(self, status=None):
        status = status or self.status()
        return format_time_remaining(status.lock_start, status.vest_duration, self.clock(),
                                     status.is_locked)

    def locked_amounts(self, status=None, price=None):
        """
        Token amounts still held by the locked position.

        Returns:
            Dict with the position range, liquidity and amounts (wei and human)
        """
        status = status or self.status()
        if not status.is_locked or not status.token_id:
            return {"liquidity": 0, "amount0": 0, "amount1": 0, "weth": 0.0, "clawd": 0.0}

        position = self.nfpm.get_position(status.token_id)
        price = price or self.pool_query.get_price()
        amount0, amount1 = get_amounts_for_liquidity_x96(
            price.sqrt_price_x96, position["tick_lower"], position["tick_upper"], position["liquidity"])

        return {
            "token_id": status.token_id,
            "tick_lower": position["tick_lower"],
            "tick_upper": position["tick_upper"],
            "liquidity": position["liquidity"],
            "amount0": amount0,
            "amount1": amount1,
            "weth": from_base_units(amount0),
            "clawd": from_base_units(amount1),
        }

    def vest_preview(self, status=None, price=None, slippage_bps=None):
        """
        Amounts a vest() call would withdraw now, with minimums.

        Returns:
            Dict with liquidity to remove, expected amounts and minimums
        """
        status = status or self.status()
        to_vest = liquidity_to_vest(status.vested_percent_raw, status.initial_liquidity,
                                    status.vested_liquidity)
        preview = {"liquidity": to_vest, "amount0": 0, "amount1": 0, "amount0_min": 0, "amount1_min": 0}
        if not status.is_locked or to_vest == 0:
            return preview

        position = self.nfpm.get_position(status.token_id)
        price = price or self.pool_query.get_price()
        amount0, amount1 = get_amounts_for_liquidity_x96(
            price.sqrt_price_x96, position["tick_lower"], position["tick_upper"], to_vest)

        bps = self.config.slippage_bps if slippage_bps is None else slippage_bps
        preview.update({
            "amount0": amount0,
            "amount1": amount1,
            "amount0_min": apply_slippage(amount0, bps),
            "amount1_min": apply_slippage(amount1, bps),
        })
        return preview

    def claim_preview(self, status=None):
        """
        Fees a claim() would collect, simulated from the owner.

        Returns:
            Dict with amount0/amount1 in wei and human units
        """
        status = status or self.status()
        if not status.is_locked:
            return {"amount0": 0, "amount1": 0, "weth": 0.0, "clawd": 0.0}
        amount0, amount1 = self.vesting.preview_claim(status.owner)
        return {
            "amount0": amount0,
            "amount1": amount1,
            "weth": from_base_units(amount0),
            "clawd": from_base_units(amount1),
        }

    def _require_owner(self, status):
        if not status.is_locked:
            raise VestingError("No position is locked")
        sender = self.manager.address
        if not sender or not status.owner or sender.lower() != status.owner.lower():
            raise VestingError(f"Only the vesting owner ({status.owner}) can do this")

    def build_claim(self):
        """Build an unsigned claim() transaction"""
        status = self.status()
        self._require_owner(status)
        return {"step": "claim", "tx": self.vesting.build_claim()}

    def build_vest(self, slippage_bps=None):
        """Build an unsigned vest() transaction with minimums from the preview"""
        status = self.status()
        self._require_owner(status)
        preview = self.vest_preview(status, slippage_bps=slippage_bps)
        if preview["liquidity"] == 0:
            raise VestingError("Nothing has vested since the last withdrawal")
        tx = self.vesting.build_vest(preview["amount0_min"], preview["amount1_min"])
        return {"step": "vest", "preview": preview, "tx": tx}

    def build_claim_and_vest(self, slippage_bps=None):
        """Build an unsigned claimAndVest() transaction with minimums from the preview"""
        status = self.status()
        self._require_owner(status)
        preview = self.vest_preview(status, slippage_bps=slippage_bps)
        if preview["liquidity"] == 0:
            raise VestingError("Nothing has vested since the last withdrawal")
        tx = self.vesting.build_claim_and_vest(preview["amount0_min"], preview["amount1_min"])
        return {"step": "claimAndVest", "preview": preview, "tx": tx}
