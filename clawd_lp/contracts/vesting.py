"""LiquidityVesting contract wrapper"""

import logging

from ..core.config import Config
from ..core.exceptions import VestingError
from ..utils.gas import GasManager
from ..utils.transactions import TransactionBuilder

logger = logging.getLogger(__name__)

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


class LiquidityVesting:
    """
    Wrapper for the LiquidityVesting contract.

    The contract owns one Uniswap V3 position created by lockUp() and
    releases its liquidity linearly over the vesting duration.
    """

    def __init__(self, manager, address=None, gas_manager=None):
        """
        Args:
            manager: Web3Manager instance
            address: Vesting contract address (config value if None)
            gas_manager: GasManager for built transactions (created if None)
        """
        self.manager = manager
        self.config = Config()
        self.address = manager.checksum(address or self.config.vesting_address)
        self.contract = manager.get_contract(self.address, "vesting")

        self.gas_manager = gas_manager or GasManager(manager)
        self.tx_builder = TransactionBuilder(manager, self.gas_manager)

    def owner(self):
        addr = self.contract.functions.owner().call()
        return None if addr == ZERO_ADDRESS else addr

    def is_locked(self):
        return self.contract.functions.isLocked().call()

    def token_id(self):
        return self.contract.functions.tokenId().call()

    def lock_start(self):
        return self.contract.functions.lockStart().call()

    def vest_duration(self):
        return self.contract.functions.vestDuration().call()

    def vested_percent(self):
        """Vested share scaled by 1e18 (1e18 = 100%)"""
        return self.contract.functions.vestedPercent().call()

    def initial_liquidity(self):
        return self.contract.functions.initialLiquidity().call()

    def vested_liquidity(self):
        """Liquidity already withdrawn through vest()"""
        return self.contract.functions.vestedLiquidity().call()

    def read_state(self):
        """All vesting reads in one dict"""
        return {
            "is_locked": self.is_locked(),
            "owner": self.owner(),
            "token_id": self.token_id(),
            "lock_start": self.lock_start(),
            "vest_duration": self.vest_duration(),
            "vested_percent": self.vested_percent(),
            "initial_liquidity": self.initial_liquidity(),
            "vested_liquidity": self.vested_liquidity(),
        }

    def preview_claim(self, owner=None):
        """
        Simulate claim() from the owner.

        Returns:
            (amount0, amount1) fees that a claim would collect
        """
        sender = owner or self.owner()
        if not sender:
            raise VestingError("Vesting contract has no owner")
        try:
            amount0, amount1 = self.contract.functions.claim().call({"from": sender})
        except Exception as e:
            raise VestingError(f"claim() simulation failed: {e}") from e
        return amount0, amount1

    def build_lock_up(self, params, nonce=None):
        """Build an unsigned lockUp transaction from LockUpParams"""
        logger.debug("Building lockUp %s", params)
        contract_func = self.contract.functions.lockUp(*params.to_args())
        return self.tx_builder.build(contract_func, operation_type="lockUp", nonce=nonce)

    def build_claim(self, nonce=None):
        """Build an unsigned claim transaction"""
        contract_func = self.contract.functions.claim()
        return self.tx_builder.build(contract_func, operation_type="claim", nonce=nonce)

    def build_vest(self, amount0_min, amount1_min, nonce=None):
        """Build an unsigned vest transaction"""
        contract_func = self.contract.functions.vest(amount0_min, amount1_min)
        return self.tx_builder.build(contract_func, operation_type="vest", nonce=nonce)

    def build_claim_and_vest(self, amount0_min, amount1_min, nonce=None):
        """Build an unsigned claimAndVest transaction"""
        contract_func = self.contract.functions.claimAndVest(amount0_min, amount1_min)
        return self.tx_builder.build(contract_func, operation_type="claimAndVest", nonce=nonce)
