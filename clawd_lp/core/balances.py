"""Token balance query operations"""

from .connection import Web3Manager
from .config import Config
from ..contracts.erc20 import ERC20
from ..utils.formatting import format_usd_value, format_weth


class BalanceQuery:
    """Query ETH, WETH and CLAWD balances for an address"""

    def __init__(self, manager=None):
        """
        Args:
            manager: Web3Manager instance (created if None)
        """
        self.manager = manager or Web3Manager()
        self.config = Config()

    def _resolve(self, address):
        addr = self.manager.checksum(address) if address else self.manager.address
        if not addr:
            raise ValueError("No address provided: set PUBLIC_KEY or pass --address")
        return addr

    def get_eth_balance(self, address=None, usd_price=None):
        """Get ETH balance for address"""
        addr = self._resolve(address)
        balance_wei = self.manager.get_balance(addr)
        return {
            "symbol": "ETH",
            "address": None,
            "balance": format_weth(balance_wei),
            "balance_wei": str(balance_wei),
            "decimals": 18,
            "usd": format_usd_value(balance_wei, usd_price),
        }

    def get_token_balance(self, token_address, address=None, usd_price=None):
        """Get ERC20 token balance for address"""
        addr = self._resolve(address)
        token = ERC20(self.manager, token_address)
        balance_wei = token.balance_of(addr)
        return {
            "symbol": token.symbol,
            "address": token.address,
            "balance": token.from_wei(balance_wei),
            "balance_wei": str(balance_wei),
            "decimals": token.decimals,
            "usd": format_usd_value(balance_wei, usd_price, token.decimals),
        }

    def get_all_balances(self, address=None, eth_usd=None, clawd_usd=None):
        """
        Get ETH and configured token balances.

        Args:
            address: Address to query (uses manager address if None)
            eth_usd: USD price of ETH/WETH for valuations
            clawd_usd: USD price of CLAWD for valuations

        Returns:
            Dict with address and list of balances
        """
        addr = self._resolve(address)
        prices = {"WETH": eth_usd, "CLAWD": clawd_usd}

        balances = [self.get_eth_balance(addr, eth_usd)]
        for symbol, token_address in self.config.common_tokens.items():
            try:
                balances.append(self.get_token_balance(token_address, addr, prices.get(symbol)))
            except Exception as e:
                balances.append({
                    "symbol": symbol,
                    "address": token_address,
                    "error": str(e),
                })

        return {
            "address": addr,
            "balances": balances,
        }
