"""Liquidity sizing and lock-up / mint call building"""

import time
import logging
from dataclasses import replace

from ..core.connection import Web3Manager
from ..core.config import Config
from ..core.exceptions import ConfigError, InsufficientBalanceError
from ..contracts.nfpm import NFPM
from ..contracts.erc20 import ERC20
from ..contracts.vesting import LiquidityVesting
from ..types import LockUpParams, MintParams, PositionQuote
from ..utils.gas import GasManager
from ..utils.formatting import format_clawd_input, format_weth_input
from ..utils.math import (
    amount0_for_liquidity,
    amount1_for_liquidity,
    calculate_slippage_amounts,
    default_range,
    position_type,
    round_tick_to_spacing,
    tick_to_sqrt_price,
    to_base_units,
)
from .pools import PoolQuery

logger = logging.getLogger(__name__)

ANCHOR_WETH = "weth"
ANCHOR_CLAWD = "clawd"

STEP_APPROVE_WETH = "approve_weth"
STEP_APPROVE_CLAWD = "approve_clawd"

SECONDS_PER_DAY = 86400


def _parse_amount(text):
    """Form field to float; blank or malformed input counts as 0"""
    if text in (None, ""):
        return 0.0
    try:
        value = float(text)
    except (TypeError, ValueError):
        return 0.0
    return value if value > 0 else 0.0


class LiquidityManager:
    """Size WETH/CLAWD positions and build the calls that open them"""

    def __init__(self, manager=None, pool_query=None, maxFeePerGas=None, maxPriorityFeePerGas=None,
                 clock=time.time):
        """
        Args:
            manager: Web3Manager instance (created if None)
            pool_query: PoolQuery for price snapshots (created if None)
            maxFeePerGas: Maximum fee per gas in Gwei (None = use config/no limit)
            maxPriorityFeePerGas: Priority fee in Gwei (None = use config)
            clock: Callable returning unix time, for deadlines
        """
        self.manager = manager or Web3Manager()
        self.config = Config()
        self.gas_manager = GasManager(self.manager, maxFeePerGas, maxPriorityFeePerGas)
        self.pool_query = pool_query or PoolQuery(self.manager)
        self.clock = clock

        self.weth = ERC20(self.manager, self.config.weth_address, self.gas_manager)
        self.clawd = ERC20(self.manager, self.config.clawd_address, self.gas_manager)
        if int(self.weth.address, 16) > int(self.clawd.address, 16):
            raise ConfigError("WETH must sort below CLAWD to be token0 of the pool")

        self._nfpm = None
        self._vesting = None

    @property
    def nfpm(self):
        if self._nfpm is None:
            self._nfpm = NFPM(self.manager, self.gas_manager)
        return self._nfpm

    @property
    def vesting(self):
        if self._vesting is None:
            self._vesting = LiquidityVesting(self.manager, gas_manager=self.gas_manager)
        return self._vesting

    @property
    def tick_spacing(self):
        return self.config.tick_spacing

    def default_range(self, price=None):
        """Initial (tick_lower, tick_upper) around the current tick"""
        price = price or self.pool_query.get_price()
        return default_range(price.current_tick, self.tick_spacing, self.config.range_half_width_steps)

    def quote(self, tick_lower, tick_upper, weth_amount=None, clawd_amount=None, price=None,
              slippage_bps=None):
        """
        Size a position from one anchor amount.

        Given a tick range and exactly one of the two amounts, compute the
        counterpart at the current pool price. The ticks are aligned to the
        spacing first, the same way build_lock_up and build_mint align them,
        so the quote is for the range that would actually be locked.

        Args:
            tick_lower: Lower tick bound
            tick_upper: Upper tick bound
            weth_amount: WETH to deposit (human readable)
            clawd_amount: CLAWD to deposit (human readable)
            price: PoolPrice snapshot (read from the pool if None)
            slippage_bps: Slippage in basis points (config value if None)

        Returns:
            PositionQuote

        Raises:
            ValueError: If the aligned range is empty or both/neither amounts are given

        Note:
            Out of range, the counterpart is 0: below the range only WETH
            is deposited, above it only CLAWD.
        """
        if (weth_amount is None) == (clawd_amount is None):
            raise ValueError("Must specify exactly one of weth_amount or clawd_amount")

        tick_lower, tick_upper = self.align_range(tick_lower, tick_upper)
        price = price or self.pool_query.get_price()
        sqrt_lower = tick_to_sqrt_price(tick_lower)
        sqrt_upper = tick_to_sqrt_price(tick_upper)

        if weth_amount is not None:
            anchor = ANCHOR_WETH
            weth_amount = float(weth_amount)
            clawd_amount = amount0_for_liquidity(weth_amount, price.sqrt_price, sqrt_lower, sqrt_upper)
        else:
            anchor = ANCHOR_CLAWD
            clawd_amount = float(clawd_amount)
            weth_amount = amount1_for_liquidity(clawd_amount, price.sqrt_price, sqrt_lower, sqrt_upper)

        weth_wei = to_base_units(weth_amount, self.weth.decimals)
        clawd_wei = to_base_units(clawd_amount, self.clawd.decimals)
        bps = self.config.slippage_bps if slippage_bps is None else slippage_bps
        weth_min, clawd_min = calculate_slippage_amounts(weth_wei, clawd_wei, bps)

        return PositionQuote(
            tick_lower=tick_lower,
            tick_upper=tick_upper,
            current_tick=price.current_tick,
            position_type=position_type(price.sqrt_price, sqrt_lower, sqrt_upper),
            anchor=anchor,
            weth_amount=weth_amount,
            clawd_amount=clawd_amount,
            weth_wei=weth_wei,
            clawd_wei=clawd_wei,
            weth_min=weth_min,
            clawd_min=clawd_min,
        )

    def recalculate(self, anchor, form, price=None):
        """
        Refresh the counterpart field of a form after an edit.

        The returned form carries ticks aligned to the spacing and records
        anchor as the last edited field. A blank or non-positive anchor
        amount, or an empty range, leaves the counterpart as it was.

        Args:
            anchor: Field the user edited last, "weth" or "clawd"
            form: FormState with the current inputs
            price: PoolPrice snapshot (read from the pool if None)

        Returns:
            New FormState with the non-anchor amount recomputed
        """
        if anchor not in (ANCHOR_WETH, ANCHOR_CLAWD):
            raise ValueError(f"Unknown anchor: {anchor}")

        updated = replace(form, last_edited=anchor)
        spacing = self.tick_spacing
        updated.tick_lower = round_tick_to_spacing(form.tick_lower, spacing)
        updated.tick_upper = round_tick_to_spacing(form.tick_upper, spacing)
        if updated.tick_lower >= updated.tick_upper:
            return updated

        if anchor == ANCHOR_WETH:
            weth = _parse_amount(form.weth_input)
            if weth:
                q = self.quote(updated.tick_lower, updated.tick_upper, weth_amount=weth, price=price)
                updated.clawd_input = format_clawd_input(q.clawd_amount)
        else:
            clawd = _parse_amount(form.clawd_input)
            if clawd:
                q = self.quote(updated.tick_lower, updated.tick_upper, clawd_amount=clawd, price=price)
                updated.weth_input = format_weth_input(q.weth_amount)
        return updated

    def edit_form(self, form, tick_lower=None, tick_upper=None, weth=None, clawd=None, vest_days=None,
                  price=None):
        """
        Apply one round of edits to the lock-up form and recompute.

        A new WETH or CLAWD amount becomes the anchor. Range-only edits
        recompute from the form's last edited amount.

        Args:
            form: Current FormState
            tick_lower: New lower tick
            tick_upper: New upper tick
            weth: New WETH amount
            clawd: New CLAWD amount
            vest_days: New vesting duration in days
            price: PoolPrice snapshot (read from the pool if None)

        Returns:
            Updated FormState
        """
        if weth is not None and clawd is not None:
            raise ValueError("Edit one of weth or clawd at a time")

        price = price or self.pool_query.get_price()
        form = replace(form)
        if not (form.tick_lower or form.tick_upper):
            form.tick_lower, form.tick_upper = self.default_range(price)
        if tick_lower is not None:
            form.tick_lower = tick_lower
        if tick_upper is not None:
            form.tick_upper = tick_upper
        if vest_days is not None:
            form.vest_days = vest_days

        if weth is not None:
            form.weth_input, anchor = str(weth), ANCHOR_WETH
        elif clawd is not None:
            form.clawd_input, anchor = str(clawd), ANCHOR_CLAWD
        elif form.last_edited in (ANCHOR_WETH, ANCHOR_CLAWD):
            anchor = form.last_edited
        else:
            anchor = ANCHOR_CLAWD if form.clawd_input and not form.weth_input else ANCHOR_WETH

        return self.recalculate(anchor, form, price)

    def align_range(self, tick_lower, tick_upper):
        """Align ticks to spacing and require tick_lower < tick_upper"""
        spacing = self.tick_spacing
        tick_lower = round_tick_to_spacing(tick_lower, spacing)
        tick_upper = round_tick_to_spacing(tick_upper, spacing)
        if tick_lower >= tick_upper:
            raise ValueError(f"Invalid tick range: {tick_lower} >= {tick_upper}")
        return tick_lower, tick_upper

    def _check_balances(self, weth_wei, clawd_wei):
        if self.weth.balance_of() < weth_wei:
            raise InsufficientBalanceError(f"Insufficient {self.weth.symbol} balance")
        if self.clawd.balance_of() < clawd_wei:
            raise InsufficientBalanceError(f"Insufficient {self.clawd.symbol} balance")

    def next_step(self, spender, weth_wei, clawd_wei, action):
        """
        Next write call in the sequence approve WETH -> approve CLAWD -> action.

        Returns:
            "approve_weth", "approve_clawd" or action
        """
        if self.weth.needs_approval(spender, weth_wei):
            return STEP_APPROVE_WETH
        if self.clawd.needs_approval(spender, clawd_wei):
            return STEP_APPROVE_CLAWD
        return action

    def _build_sequence(self, spender, weth_wei, clawd_wei, action, build_action):
        """Build pending approvals and the action with consecutive nonces"""
        nonce = self.manager.get_nonce()
        steps = []

        for step, token, amount in ((STEP_APPROVE_WETH, self.weth, weth_wei),
                                    (STEP_APPROVE_CLAWD, self.clawd, clawd_wei)):
            tx = token.build_approve(spender, amount, nonce=nonce)
            if tx is not None:
                steps.append({"step": step, "tx": tx})
                nonce += 1

        steps.append({"step": action, "tx": build_action(nonce)})
        logger.info("Built %d transaction(s): %s", len(steps), ", ".join(s["step"] for s in steps))
        return steps

    def _amounts_wei(self, weth_amount, clawd_amount):
        weth_wei = to_base_units(weth_amount, self.weth.decimals)
        clawd_wei = to_base_units(clawd_amount, self.clawd.decimals)
        if weth_wei == 0 and clawd_wei == 0:
            raise ValueError("Nothing to deposit: both amounts are zero")
        return weth_wei, clawd_wei

    def build_lock_up(self, tick_lower, tick_upper, weth_amount, clawd_amount, vest_days=None,
                      slippage_bps=None, check_balances=True):
        """
        Build the unsigned transactions that lock a new position in the vesting contract.

        Args:
            tick_lower: Lower tick bound
            tick_upper: Upper tick bound
            weth_amount: WETH to deposit (human readable)
            clawd_amount: CLAWD to deposit (human readable)
            vest_days: Vesting duration in days (config default if None)
            slippage_bps: Slippage tolerance in basis points (config value if None)
            check_balances: Verify the sender holds both amounts

        Returns:
            Dict with lockUp params, the next step and the transaction list
        """
        tick_lower, tick_upper = self.align_range(tick_lower, tick_upper)
        vest_days = self.config.default_vest_days if vest_days is None else int(vest_days)
        if vest_days <= 0:
            raise ValueError(f"Vesting duration must be positive, got {vest_days} days")

        weth_wei, clawd_wei = self._amounts_wei(weth_amount, clawd_amount)
        if check_balances:
            self._check_balances(weth_wei, clawd_wei)

        bps = self.config.slippage_bps if slippage_bps is None else slippage_bps
        weth_min, clawd_min = calculate_slippage_amounts(weth_wei, clawd_wei, bps)

        params = LockUpParams(
            amount0=weth_wei,
            amount1=clawd_wei,
            vest_duration=vest_days * SECONDS_PER_DAY,
            tick_lower=tick_lower,
            tick_upper=tick_upper,
            amount0_min=weth_min,
            amount1_min=clawd_min,
        )

        spender = self.vesting.address
        next_step = self.next_step(spender, weth_wei, clawd_wei, "lockUp")
        steps = self._build_sequence(
            spender, weth_wei, clawd_wei, "lockUp",
            lambda nonce: self.vesting.build_lock_up(params, nonce=nonce),
        )

        return {
            "contract": spender,
            "params": params.to_dict(),
            "vest_days": vest_days,
            "next_step": next_step,
            "transactions": steps,
        }

    def build_mint(self, tick_lower, tick_upper, weth_amount, clawd_amount, slippage_bps=None,
                   recipient=None, check_balances=True):
        """
        Build the unsigned transactions that mint a position directly on the NFPM.

        Args:
            tick_lower: Lower tick bound
            tick_upper: Upper tick bound
            weth_amount: WETH to deposit (human readable)
            clawd_amount: CLAWD to deposit (human readable)
            slippage_bps: Slippage tolerance in basis points (config value if None)
            recipient: Position NFT recipient (sender if None)
            check_balances: Verify the sender holds both amounts

        Returns:
            Dict with mint params, the next step and the transaction list
        """
        tick_lower, tick_upper = self.align_range(tick_lower, tick_upper)
        weth_wei, clawd_wei = self._amounts_wei(weth_amount, clawd_amount)
        if check_balances:
            self._check_balances(weth_wei, clawd_wei)

        bps = self.config.slippage_bps if slippage_bps is None else slippage_bps
        weth_min, clawd_min = calculate_slippage_amounts(weth_wei, clawd_wei, bps)

        params = MintParams(
            token0=self.weth.address,
            token1=self.clawd.address,
            fee=self.config.fee,
            tick_lower=tick_lower,
            tick_upper=tick_upper,
            amount0_desired=weth_wei,
            amount1_desired=clawd_wei,
            amount0_min=weth_min,
            amount1_min=clawd_min,
            recipient=self.manager.checksum(recipient) if recipient else self.manager.address,
            deadline=int(self.clock()) + self.config.deadline_seconds,
        )

        spender = self.nfpm.address
        next_step = self.next_step(spender, weth_wei, clawd_wei, "mint")
        steps = self._build_sequence(
            spender, weth_wei, clawd_wei, "mint",
            lambda nonce: self.nfpm.build_mint(params, nonce=nonce),
        )

        return {
            "contract": spender,
            "params": params.to_dict(),
            "next_step": next_step,
            "transactions": steps,
        }
