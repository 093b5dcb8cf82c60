"""ERC20 token contract wrapper"""

import logging

from ..utils.gas import GasManager
from ..utils.transactions import TransactionBuilder
from ..utils.math import from_base_units

logger = logging.getLogger(__name__)


class ERC20:
    """Wrapper for ERC20 token interactions"""

    def __init__(self, manager, address, gas_manager=None):
        """
        Args:
            manager: Web3Manager instance
            address: Token contract address
            gas_manager: GasManager for built transactions (created if None)
        """
        self.manager = manager
        self.address = manager.checksum(address)
        self.contract = manager.get_contract(address, "erc20")
        self._info = None

        self.gas_manager = gas_manager or GasManager(manager)
        self.tx_builder = TransactionBuilder(manager, self.gas_manager)

    @property
    def info(self):
        """Get token info (cached)"""
        if self._info is None:
            self._info = {
                "address": self.address,
                "symbol": self._get_symbol(),
                "decimals": self.contract.functions.decimals().call(),
            }
        return self._info

    def _get_symbol(self):
        """Get token symbol, handling bytes32 symbols"""
        raw = self.contract.functions.symbol().call()
        if isinstance(raw, bytes):
            return raw.rstrip(b'\x00').decode('utf-8')
        return str(raw)

    @property
    def symbol(self):
        return self.info["symbol"]

    @property
    def decimals(self):
        return self.info["decimals"]

    def balance_of(self, address=None):
        """Get token balance in wei"""
        addr = address or self.manager.address
        return self.contract.functions.balanceOf(addr).call()

    def allowance(self, spender, owner=None):
        """Get allowance for spender"""
        owner_addr = owner or self.manager.address
        return self.contract.functions.allowance(owner_addr, self.manager.checksum(spender)).call()

    def from_wei(self, amount):
        """Convert wei to human amount"""
        return from_base_units(amount, self.decimals)

    def needs_approval(self, spender, amount_wei, owner=None):
        """True when the current allowance does not cover amount_wei"""
        if amount_wei <= 0:
            return False
        return self.allowance(spender, owner) < amount_wei

    def build_approve(self, spender, amount_wei, nonce=None):
        """
        Build an unsigned approve transaction. Returns None if already approved.
        """
        if not self.needs_approval(spender, amount_wei):
            return None

        logger.debug("Building approve of %d for %s on %s", amount_wei, spender, self.address)
        contract_func = self.contract.functions.approve(self.manager.checksum(spender), amount_wei)
        return self.tx_builder.build(contract_func, operation_type="approve", nonce=nonce)
