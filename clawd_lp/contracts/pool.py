"""Uniswap V3 Pool contract wrapper"""


class Pool:
    """Wrapper for Uniswap V3 Pool reads"""

    def __init__(self, manager, address):
        """
        Args:
            manager: Web3Manager instance
            address: Pool contract address
        """
        self.manager = manager
        self.address = manager.checksum(address)
        self.contract = manager.get_contract(address, "pool")

    def slot0(self):
        """
        Get slot0 data (current state).
        Returns: (sqrtPriceX96, tick, observationIndex, ...)
        """
        return self.contract.functions.slot0().call()

    @property
    def fee(self):
        """Pool fee tier"""
        return self.contract.functions.fee().call()

    @property
    def token0(self):
        return self.contract.functions.token0().call()

    @property
    def token1(self):
        return self.contract.functions.token1().call()

    @property
    def liquidity(self):
        """Current in-range pool liquidity"""
        return self.contract.functions.liquidity().call()

