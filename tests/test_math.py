"""
Liquidity math tests

Pure functions only, no chain access.
"""

import math

import pytest

from clawd_lp.utils.math import (
    Q96,
    ABOVE_RANGE,
    BELOW_RANGE,
    IN_RANGE,
    amount0_for_liquidity,
    amount1_for_liquidity,
    apply_slippage,
    calculate_slippage_amounts,
    clamp_range,
    default_range,
    get_amounts_for_liquidity,
    get_amounts_for_liquidity_x96,
    liquidity_for_amount0,
    liquidity_for_amount1,
    position_type,
    price_to_tick,
    round_tick_to_spacing,
    snap_tick_to_spacing,
    sqrt_price_x96_to_ratio,
    sqrt_price_x96_to_sqrt_price,
    tick_to_price,
    tick_to_sqrt_price,
    tick_to_sqrt_price_x96,
    to_base_units,
    from_base_units,
)


class TestTickToPrice:

    def test_tick_zero(self):
        assert tick_to_price(0) == 1.0
        assert tick_to_sqrt_price(0) == 1.0

    def test_one_tick_is_one_basis_point(self):
        assert tick_to_price(1) == pytest.approx(1.0001)
        assert tick_to_price(-1) == pytest.approx(1 / 1.0001)

    def test_sqrt_price_squares_to_price(self):
        for tick in (-50000, -200, 0, 200, 180000):
            assert tick_to_sqrt_price(tick) ** 2 == pytest.approx(tick_to_price(tick), rel=1e-12)

    @pytest.mark.parametrize("tick", [-887200, -100000, -201, 0, 199, 100000, 887000])
    def test_monotonic(self, tick):
        assert tick_to_price(tick) < tick_to_price(tick + 1)
        assert tick_to_sqrt_price(tick) < tick_to_sqrt_price(tick + 1)


class TestPriceToTick:

    @pytest.mark.parametrize("spacing", [1, 10, 60, 200])
    def test_round_trip_on_spacing_grid(self, spacing):
        for step in range(-1900, 1901, 97):
            tick = step * spacing
            assert price_to_tick(tick_to_price(tick), spacing) == tick

    def test_non_positive_price(self):
        assert price_to_tick(0, 200) == 0
        assert price_to_tick(-5.0, 200) == 0
        assert price_to_tick(None, 200) == 0

    def test_floor_before_snap(self):
        # Between ticks 99 and 100: floors to 99, which snaps down to 0
        price = math.sqrt(tick_to_price(99) * tick_to_price(100))
        assert price_to_tick(price, 1) == 99
        assert price_to_tick(price, 200) == 0

    def test_half_rounds_up(self):
        assert price_to_tick(tick_to_price(100), 200) == 200
        assert price_to_tick(tick_to_price(-100), 200) == 0
        assert price_to_tick(tick_to_price(-101), 200) == -200

    def test_high_price(self):
        # ~500M CLAWD per WETH
        tick = price_to_tick(5e8, 200)
        assert tick % 200 == 0
        assert abs(tick_to_price(tick) / 5e8 - 1) < 0.011


class TestSpacing:

    @pytest.mark.parametrize("tick,expected", [
        (0, 0), (99, 0), (100, 200), (299, 200), (-99, 0), (-100, 0), (-101, -200),
    ])
    def test_snap(self, tick, expected):
        assert snap_tick_to_spacing(tick, 200) == expected

    @pytest.mark.parametrize("tick,expected", [
        (0, 0), (199, 0), (200, 200), (-1, -200), (-200, -200),
    ])
    def test_round_down(self, tick, expected):
        assert round_tick_to_spacing(tick, 200) == expected

    def test_spacing_one_is_identity(self):
        assert snap_tick_to_spacing(-77, 1) == -77
        assert round_tick_to_spacing(-77, 1) == -77

    def test_default_range(self):
        assert default_range(1000, 200) == (-9000, 11000)
        assert default_range(0, 200, 2) == (-400, 400)

    def test_clamp_range_keeps_order(self):
        assert clamp_range(400, 400, 200) == (400, 600)
        assert clamp_range(600, 200, 200) == (600, 800)
        assert clamp_range(-150, 250, 200) == (-200, 200)


class TestPriceConversions:

    def test_q96_one(self):
        assert sqrt_price_x96_to_sqrt_price(Q96) == 1.0
        assert sqrt_price_x96_to_ratio(Q96) == 1.0

    def test_zero(self):
        assert sqrt_price_x96_to_sqrt_price(0) == 0.0
        assert sqrt_price_x96_to_ratio(0) == 0.0

    @pytest.mark.parametrize("tick", [-20000, 0, 150000, 200000])
    def test_exact_ratio_matches_float_path(self, tick):
        x96 = tick_to_sqrt_price_x96(tick)
        float_ratio = sqrt_price_x96_to_sqrt_price(x96) ** 2
        assert sqrt_price_x96_to_ratio(x96) == pytest.approx(float_ratio, rel=1e-12)

    def test_ratio_uses_full_integer(self):
        # Above 2**53 a float square would lose the low bits
        x96 = 3 * Q96 + 1
        assert sqrt_price_x96_to_ratio(x96, scale=1) == x96 * x96 // 2 ** 192


class TestCounterpartAmounts:
    """Worked example: tick 0, range -100..100"""

    sqrt_lower = tick_to_sqrt_price(-100)
    sqrt_upper = tick_to_sqrt_price(100)

    def test_weth_anchor_is_positive(self):
        clawd = amount0_for_liquidity(1.0, 1.0, self.sqrt_lower, self.sqrt_upper)
        assert clawd > 0
        assert math.isfinite(clawd)
        # Symmetric range around price 1: almost 1:1
        assert clawd == pytest.approx(1.0, rel=1e-3)

    def test_amounts_for_implied_liquidity(self):
        sp = 1.0
        clawd = amount0_for_liquidity(1.0, sp, self.sqrt_lower, self.sqrt_upper)
        liquidity = liquidity_for_amount0(1.0, sp, self.sqrt_upper)
        amount0, amount1 = get_amounts_for_liquidity(sp, -100, 100, liquidity)
        assert amount0 == pytest.approx(1.0)
        assert amount1 == pytest.approx(clawd)

    @pytest.mark.parametrize("tick", [-3000, -150, 0, 150, 3000])
    def test_symmetry(self, tick):
        sqrt_lower = tick_to_sqrt_price(-4000)
        sqrt_upper = tick_to_sqrt_price(4000)
        sp = tick_to_sqrt_price(tick)
        clawd = amount0_for_liquidity(2.5, sp, sqrt_lower, sqrt_upper)
        assert amount1_for_liquidity(clawd, sp, sqrt_lower, sqrt_upper) == pytest.approx(2.5, rel=1e-9)

    def test_below_range_needs_no_clawd(self):
        sp = tick_to_sqrt_price(-200)
        assert amount0_for_liquidity(1.0, sp, self.sqrt_lower, self.sqrt_upper) == 0
        assert amount1_for_liquidity(1000.0, sp, self.sqrt_lower, self.sqrt_upper) == 0

    def test_above_range_needs_no_weth(self):
        sp = tick_to_sqrt_price(200)
        assert amount0_for_liquidity(1.0, sp, self.sqrt_lower, self.sqrt_upper) == 0
        assert amount1_for_liquidity(1000.0, sp, self.sqrt_lower, self.sqrt_upper) == 0

    @pytest.mark.parametrize("amount", [0, -1.0, None])
    def test_missing_amount(self, amount):
        assert amount0_for_liquidity(amount, 1.0, self.sqrt_lower, self.sqrt_upper) == 0
        assert amount1_for_liquidity(amount, 1.0, self.sqrt_lower, self.sqrt_upper) == 0

    def test_price_not_loaded(self):
        assert amount0_for_liquidity(1.0, 0, self.sqrt_lower, self.sqrt_upper) == 0
        assert amount1_for_liquidity(1.0, 0, self.sqrt_lower, self.sqrt_upper) == 0

    def test_inverted_range(self):
        assert amount0_for_liquidity(1.0, 1.0, self.sqrt_upper, self.sqrt_lower) == 0
        assert amount1_for_liquidity(1.0, 1.0, self.sqrt_upper, self.sqrt_lower) == 0


class TestGetAmountsForLiquidity:

    def test_zero_liquidity(self):
        assert get_amounts_for_liquidity(1.0, -100, 100, 0) == (0, 0)

    def test_invalid_inputs(self):
        assert get_amounts_for_liquidity(0, -100, 100, 10 ** 18) == (0, 0)
        assert get_amounts_for_liquidity(1.0, 100, 100, 10 ** 18) == (0, 0)
        assert get_amounts_for_liquidity(1.0, 200, -200, 10 ** 18) == (0, 0)

    def test_below_range_is_all_token0(self):
        amount0, amount1 = get_amounts_for_liquidity(tick_to_sqrt_price(-1000), -100, 100, 10 ** 6)
        assert amount0 > 0
        assert amount1 == 0

    def test_above_range_is_all_token1(self):
        amount0, amount1 = get_amounts_for_liquidity(tick_to_sqrt_price(1000), -100, 100, 10 ** 6)
        assert amount0 == 0
        assert amount1 > 0

    def test_in_range_has_both(self):
        amount0, amount1 = get_amounts_for_liquidity(1.0, -100, 100, 10 ** 6)
        assert amount0 > 0
        assert amount1 > 0

    def test_at_lower_bound(self):
        amount0, amount1 = get_amounts_for_liquidity(tick_to_sqrt_price(-100), -100, 100, 10 ** 6)
        assert amount1 == 0

    @pytest.mark.parametrize("tick", [-5000, -100, 0, 99, 100, 5000])
    def test_non_negative(self, tick):
        amount0, amount1 = get_amounts_for_liquidity(tick_to_sqrt_price(tick), -100, 100, 10 ** 9)
        assert amount0 >= 0
        assert amount1 >= 0

    @pytest.mark.parametrize("tick", [-5000, -60, 0, 60, 5000])
    def test_integer_variant_agrees(self, tick):
        liquidity = 10 ** 22
        amount0, amount1 = get_amounts_for_liquidity(tick_to_sqrt_price(tick), -200, 200, liquidity)
        int0, int1 = get_amounts_for_liquidity_x96(tick_to_sqrt_price_x96(tick), -200, 200, liquidity)
        assert isinstance(int0, int) and isinstance(int1, int)
        assert int0 == pytest.approx(amount0, rel=1e-6, abs=1)
        assert int1 == pytest.approx(amount1, rel=1e-6, abs=1)

    def test_integer_variant_zero_cases(self):
        assert get_amounts_for_liquidity_x96(Q96, -100, 100, 0) == (0, 0)
        assert get_amounts_for_liquidity_x96(0, -100, 100, 10 ** 18) == (0, 0)


class TestClosedFormAmounts:
    """Exact amounts for range -100..100 against the Uniswap V3 formulas"""

    liquidity = 10 ** 22
    sqrt_lower = tick_to_sqrt_price(-100)
    sqrt_upper = tick_to_sqrt_price(100)

    def test_below_range(self):
        L, sl, su = self.liquidity, self.sqrt_lower, self.sqrt_upper
        amount0, amount1 = get_amounts_for_liquidity(tick_to_sqrt_price(-1000), -100, 100, L)
        assert amount0 == pytest.approx(L * (su - sl) / (sl * su), rel=1e-12)
        assert amount1 == 0

    def test_above_range(self):
        L, sl, su = self.liquidity, self.sqrt_lower, self.sqrt_upper
        amount0, amount1 = get_amounts_for_liquidity(tick_to_sqrt_price(1000), -100, 100, L)
        assert amount0 == 0
        assert amount1 == pytest.approx(L * (su - sl), rel=1e-12)

    def test_at_upper_bound(self):
        L, sl, su = self.liquidity, self.sqrt_lower, self.sqrt_upper
        amount0, amount1 = get_amounts_for_liquidity(su, -100, 100, L)
        assert amount0 == 0
        assert amount1 == pytest.approx(L * (su - sl), rel=1e-12)

    def test_in_range(self):
        L, sl, su = self.liquidity, self.sqrt_lower, self.sqrt_upper
        sp = tick_to_sqrt_price(40)
        amount0, amount1 = get_amounts_for_liquidity(sp, -100, 100, L)
        assert amount0 == pytest.approx(L * (su - sp) / (sp * su), rel=1e-12)
        assert amount1 == pytest.approx(L * (sp - sl), rel=1e-12)

    def test_integer_below_range(self):
        L = self.liquidity
        sl, su = tick_to_sqrt_price_x96(-100), tick_to_sqrt_price_x96(100)
        amount0, amount1 = get_amounts_for_liquidity_x96(tick_to_sqrt_price_x96(-1000), -100, 100, L)
        assert amount0 == L * (su - sl) * Q96 // sl // su
        assert amount0 == pytest.approx(L * (self.sqrt_upper - self.sqrt_lower)
                                        / (self.sqrt_lower * self.sqrt_upper), rel=1e-9)
        assert amount1 == 0

    def test_integer_above_range(self):
        L = self.liquidity
        sl, su = tick_to_sqrt_price_x96(-100), tick_to_sqrt_price_x96(100)
        amount0, amount1 = get_amounts_for_liquidity_x96(tick_to_sqrt_price_x96(1000), -100, 100, L)
        assert amount0 == 0
        assert amount1 == L * (su - sl) // Q96
        assert amount1 == pytest.approx(L * (self.sqrt_upper - self.sqrt_lower), rel=1e-9)

    def test_integer_at_upper_bound(self):
        L = self.liquidity
        sl, su = tick_to_sqrt_price_x96(-100), tick_to_sqrt_price_x96(100)
        assert get_amounts_for_liquidity_x96(su, -100, 100, L) == (0, L * (su - sl) // Q96)

    def test_liquidity_halves_accept_either_order(self):
        sl, su = self.sqrt_lower, self.sqrt_upper
        assert liquidity_for_amount0(1.0, sl, su) == liquidity_for_amount0(1.0, su, sl)
        assert liquidity_for_amount0(1.0, sl, su) == pytest.approx(sl * su / (su - sl))
        assert liquidity_for_amount1(1.0, su, sl) == pytest.approx(1 / (su - sl))


class TestPositionType:

    def test_regimes(self):
        lower, upper = tick_to_sqrt_price(-100), tick_to_sqrt_price(100)
        assert position_type(tick_to_sqrt_price(-200), lower, upper) == BELOW_RANGE
        assert position_type(1.0, lower, upper) == IN_RANGE
        assert position_type(tick_to_sqrt_price(200), lower, upper) == ABOVE_RANGE


class TestUnitsAndSlippage:

    def test_to_base_units_truncates(self):
        assert to_base_units("0.1") == 10 ** 17
        assert to_base_units(1.5, 6) == 1500000
        assert to_base_units("0.0000000000000000019") == 1

    @pytest.mark.parametrize("amount", [None, "", 0, -3])
    def test_to_base_units_empty(self, amount):
        assert to_base_units(amount) == 0

    def test_from_base_units(self):
        assert from_base_units(25 * 10 ** 17) == 2.5

    def test_default_slippage_is_five_percent(self):
        assert apply_slippage(10 ** 18) == 95 * 10 ** 16
        assert apply_slippage(101) == 95

    def test_slippage_pair(self):
        assert calculate_slippage_amounts(1000, 2000, 50) == (995, 1990)
        assert calculate_slippage_amounts(0, 2000) == (0, 1900)
