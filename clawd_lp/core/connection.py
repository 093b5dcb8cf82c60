"""Web3 connection management"""

import os
import logging

from web3 import Web3
from dotenv import load_dotenv

from .config import Config
from .exceptions import ConnectionError, ConfigError

logger = logging.getLogger(__name__)


class Web3Manager:
    """Manages the Web3 connection and the (read-only) sender address"""

    def __init__(self, address=None, w3=None):
        """
        Initialize Web3 connection.

        Args:
            address: Sender/owner address (defaults to PUBLIC_KEY from wallet.env)
            w3: Existing Web3 instance (connects to RPC_URL if None)
        """
        load_dotenv()
        load_dotenv("wallet.env")

        self.config = Config()
        self._address = address
        if w3 is not None:
            self.w3 = w3
        else:
            self._setup_web3()

    def _setup_web3(self):
        """Setup Web3 connection"""
        rpc_url = os.getenv("RPC_URL") or self.config.rpc_url
        if not rpc_url:
            raise ConfigError("RPC_URL not found in environment")

        self.w3 = Web3(Web3.HTTPProvider(rpc_url))

        if not self.w3.is_connected():
            raise ConnectionError(f"Failed to connect to {rpc_url}")
        logger.debug("Connected to %s", rpc_url)

    @property
    def address(self):
        """Sender address (explicit, or PUBLIC_KEY in wallet.env)"""
        addr = self._address or os.getenv("PUBLIC_KEY")
        return self.checksum(addr) if addr else None

    @property
    def chain_id(self):
        """Get current chain ID"""
        return self.w3.eth.chain_id

    def check_network(self):
        """Return the chain ID, raising if it differs from the configured one"""
        chain_id = self.chain_id
        if chain_id != self.config.chain_id:
            raise ConnectionError(
                f"Wrong network: connected to chain {chain_id}, expected {self.config.chain_id}")
        return chain_id

    def get_balance(self, address=None):
        """Get ETH balance in wei"""
        addr = address or self.address
        if not addr:
            raise ValueError("No address provided")
        return self.w3.eth.get_balance(addr)

    def get_nonce(self, address=None):
        """Get transaction count (nonce)"""
        addr = address or self.address
        if not addr:
            raise ValueError("No address provided")
        return self.w3.eth.get_transaction_count(addr)

    def get_contract(self, address, abi_name):
        """Create contract instance"""
        abi = self.config.get_abi(abi_name)
        return self.w3.eth.contract(
            address=Web3.to_checksum_address(address),
            abi=abi
        )

    def checksum(self, address):
        """Convert address to checksum format"""
        return Web3.to_checksum_address(address)
