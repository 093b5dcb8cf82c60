"""Pool query operations"""

import logging

from ..core.connection import Web3Manager
from ..core.config import Config
from ..core.exceptions import PoolError
from ..contracts.pool import Pool
from ..contracts.erc20 import ERC20
from ..types import PoolPrice
from ..utils.math import price_to_tick, sqrt_price_x96_to_sqrt_price, sqrt_price_x96_to_ratio

logger = logging.getLogger(__name__)


class PoolQuery:
    """Query the WETH/CLAWD Uniswap V3 pool"""

    def __init__(self, manager=None, pool_address=None):
        """
        Args:
            manager: Web3Manager instance (created if None)
            pool_address: Pool address (config value if None)
        """
        self.manager = manager or Web3Manager()
        self.config = Config()
        self.pool = Pool(self.manager, pool_address or self.config.pool_address)
        self._static = None

    def get_price(self, eth_usd=None):
        """
        Read slot0 and derive both price views.

        The float sqrt price feeds the amount math; the ratio comes from
        the exact integer path and drives the current tick and display.

        Args:
            eth_usd: USD price of one WETH, for the CLAWD USD price

        Returns:
            PoolPrice
        """
        slot0 = self.pool.slot0()
        sqrt_price_x96, pool_tick = slot0[0], slot0[1]
        if sqrt_price_x96 <= 0:
            raise PoolError(f"Pool {self.pool.address} is not initialized")

        ratio = sqrt_price_x96_to_ratio(sqrt_price_x96)
        current_tick = price_to_tick(ratio, self.config.tick_spacing)
        token1_usd = eth_usd / ratio if eth_usd and ratio > 0 else None

        logger.debug("sqrtPriceX96=%d ratio=%s tick=%d (pool tick %d)",
                     sqrt_price_x96, ratio, current_tick, pool_tick)

        return PoolPrice(
            sqrt_price_x96=sqrt_price_x96,
            sqrt_price=sqrt_price_x96_to_sqrt_price(sqrt_price_x96),
            ratio=ratio,
            current_tick=current_tick,
            pool_tick=pool_tick,
            token1_usd=token1_usd,
        )

    def _get_static_info(self):
        """Token and fee data, fetched once per query object"""
        if self._static is not None:
            return self._static

        token0 = ERC20(self.manager, self.pool.token0)
        token1 = ERC20(self.manager, self.pool.token1)
        fee = self.pool.fee

        self._static = {
            "pool_name": f"{token0.symbol}_{token1.symbol}_{fee // 100}",
            "address": self.pool.address,
            "token0": token0.info,
            "token1": token1.info,
            "pair": f"{token0.symbol}/{token1.symbol}",
            "fee": fee,
            "fee_percent": f"{fee / 10000}%",
            "tick_spacing": self.config.tick_spacing,
        }
        return self._static

    def get_pool_info(self, eth_usd=None):
        """
        Get pool details with the current price.

        Returns:
            Dict with static pool data and a fresh price snapshot
        """
        static = self._get_static_info()
        price = self.get_price(eth_usd)

        return {
            **static,
            "sqrt_price_x96": str(price.sqrt_price_x96),
            "current_tick": price.current_tick,
            "pool_tick": price.pool_tick,
            "current_price": price.ratio,
            "price_formatted": f"{price.ratio:.6f} {static['token1']['symbol']}/{static['token0']['symbol']}",
            "token1_usd": price.token1_usd,
            "liquidity": self.pool.liquidity,
        }
