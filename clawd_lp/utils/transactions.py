"""Unsigned EIP-1559 transaction building"""

from .gas import GasManager
from ..core.exceptions import TransactionError


class TransactionBuilder:
    """Build EIP-1559 transactions for an external signer"""

    def __init__(self, manager, gas_manager=None):
        """
        Args:
            manager: Web3Manager instance
            gas_manager: GasManager instance (created if None, loads from gas_config.json)
        """
        self.manager = manager
        self.gas_manager = gas_manager or GasManager(manager)

    def build(self, contract_func, operation_type=None, gas_buffer=1.2, value=0, nonce=None):
        """
        Build an unsigned EIP-1559 transaction for a contract function.

        Args:
            contract_func: Contract function to call
            operation_type: Type of operation for gas limit lookup
            gas_buffer: Multiplier for gas limit (default 1.2 = +20%)
            value: ETH value to send in wei (default 0)
            nonce: Explicit nonce (for queuing dependent transactions)

        Returns:
            Transaction dictionary ready for signing

        Raises:
            TransactionError: If no sender address is configured
            ConnectionError: If the RPC serves a different chain than configured
            GasPriceTooHighError: If base fee exceeds maxFeePerGas
        """
        sender = self.manager.address
        if not sender:
            raise TransactionError("No sender address: set PUBLIC_KEY or pass --from")

        gas_params = self.gas_manager.getGasParams(operation_type, gas_buffer=1.0)
        estimated_gas = self.gas_manager.estimateGas(contract_func, sender, operation_type)

        tx = {
            "from": sender,
            "nonce": self.manager.get_nonce() if nonce is None else nonce,
            "gas": int(estimated_gas * gas_buffer),
            "maxFeePerGas": gas_params["maxFeePerGas"],
            "maxPriorityFeePerGas": gas_params["maxPriorityFeePerGas"],
            "chainId": self.manager.check_network(),
            "type": 2,  # EIP-1559 transaction type
        }

        if value > 0:
            tx["value"] = value

        return contract_func.build_transaction(tx)


def format_gas_cost(gas, max_fee_per_gas):
    """Maximum gas cost in ETH"""
    return gas * max_fee_per_gas / 1e18
