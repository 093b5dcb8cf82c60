"""Uniswap V3 NonfungiblePositionManager contract wrapper"""

import logging

from ..core.config import Config
from ..core.exceptions import PositionError
from ..utils.gas import GasManager
from ..utils.transactions import TransactionBuilder

logger = logging.getLogger(__name__)


class NFPM:
    """Wrapper for NonfungiblePositionManager interactions"""

    def __init__(self, manager, gas_manager=None):
        """
        Args:
            manager: Web3Manager instance
            gas_manager: GasManager for built transactions (created if None)
        """
        self.manager = manager
        self.config = Config()
        self.address = manager.checksum(self.config.nfpm_address)
        self.contract = manager.get_contract(self.address, "nfpm")

        self.gas_manager = gas_manager or GasManager(manager)
        self.tx_builder = TransactionBuilder(manager, self.gas_manager)

    def get_position(self, token_id):
        """
        Get position data by token ID.
        Returns dict with position fields.
        """
        try:
            pos = self.contract.functions.positions(token_id).call()
        except Exception as e:
            raise PositionError(f"Position {token_id} not found: {e}") from e

        return {
            "nonce": pos[0],
            "operator": pos[1],
            "token0": pos[2],
            "token1": pos[3],
            "fee": pos[4],
            "tick_lower": pos[5],
            "tick_upper": pos[6],
            "liquidity": pos[7],
            "fee_growth_inside_0_last": pos[8],
            "fee_growth_inside_1_last": pos[9],
            "tokens_owed_0": pos[10],
            "tokens_owed_1": pos[11],
        }

    def build_mint(self, params, nonce=None, gas_buffer=1.2):
        """
        Build an unsigned mint transaction.

        Args:
            params: MintParams
            nonce: Explicit nonce (for queuing after approvals)
            gas_buffer: multiplier for gas estimate
        """
        logger.debug("Building mint %s", params)
        contract_func = self.contract.functions.mint(params.to_tuple())
        return self.tx_builder.build(
            contract_func,
            operation_type="mint",
            gas_buffer=gas_buffer,
            nonce=nonce,
        )
