"""Shared fixtures: isolated configuration and in-process chain fakes"""

from types import SimpleNamespace

import pytest

from clawd_lp.core.config import Config
from clawd_lp.core.connection import Web3Manager
from clawd_lp.types import PoolPrice
from clawd_lp.utils.math import tick_to_sqrt_price, tick_to_sqrt_price_x96, sqrt_price_x96_to_ratio

SENDER = "0x1111111111111111111111111111111111111111"
VESTING = "0x2222222222222222222222222222222222222222"
WETH = "0x4200000000000000000000000000000000000006"
CLAWD = "0x9f86dB9fc6f7c9408e8Fda3Ff8ce4e78ac7a6b07"
POOL = "0xCD55381a53da35Ab1D7Bc5e3fE5F76cac976FAc3"
NFPM = "0x03a520b32C04BF3bEEf7BEb72E919cf822Ed34f1"

ENV_VARS = [
    "CLAWD_LP_CONFIG_DIR",
    "VESTING_ADDRESS",
    "TICK_SPACING",
    "SLIPPAGE_BPS",
    "CHAIN_ID",
    "PUBLIC_KEY",
    "RPC_URL",
    "ETH_USD_PRICE",
]


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Fresh Config per test, no user files or environment overrides"""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)
    Config.reset()
    yield
    Config.reset()


class FakeFunction:
    """Bound contract function: call, estimate_gas and build_transaction"""

    def __init__(self, contract, name, args):
        self.contract = contract
        self.name = name
        self.args = args

    def call(self, tx=None):
        self.contract.calls.append((self.name, self.args, tx))
        value = self.contract.values[self.name]
        return value(*self.args) if callable(value) else value

    def estimate_gas(self, tx):
        return 100000

    def build_transaction(self, tx):
        return {**tx, "to": self.contract.address, "data": self.name, "args": self.args}


class FakeContract:
    """Contract whose read results come from a name -> value (or callable) map"""

    def __init__(self, address, values=None):
        self.address = address
        self.values = values or {}
        self.calls = []

    @property
    def functions(self):
        return self

    def __getattr__(self, name):
        if name.startswith("_") or name in ("address", "values", "calls"):
            raise AttributeError(name)
        return lambda *args: FakeFunction(self, name, args)


class FakeManager(Web3Manager):
    """Web3Manager on a fake w3, with contracts served from FakeContracts"""

    def __init__(self, contracts, address=SENDER, nonce=7, base_fee=10 ** 8, chain_id=8453):
        eth = SimpleNamespace(chain_id=chain_id, get_block=lambda _: {"baseFeePerGas": base_fee})
        super().__init__(address=address, w3=SimpleNamespace(eth=eth))
        self.contracts = {addr.lower(): c for addr, c in contracts.items()}
        self.nonce = nonce

    def checksum(self, address):
        return address

    def get_contract(self, address, abi_name):
        return self.contracts[address.lower()]

    def get_nonce(self, address=None):
        return self.nonce

    def get_balance(self, address=None):
        return 0


class FakePoolQuery:
    def __init__(self, price):
        self.price = price

    def get_price(self, eth_usd=None):
        return self.price


def make_price(tick):
    """PoolPrice snapshot with the pool sitting exactly at tick"""
    sqrt_price_x96 = tick_to_sqrt_price_x96(tick)
    return PoolPrice(
        sqrt_price_x96=sqrt_price_x96,
        sqrt_price=tick_to_sqrt_price(tick),
        ratio=sqrt_price_x96_to_ratio(sqrt_price_x96),
        current_tick=tick,
        pool_tick=tick,
    )


def make_token(symbol, balance=10 ** 24, allowances=None):
    allowances = {} if allowances is None else allowances
    return FakeContract(None, {
        "symbol": symbol,
        "decimals": 18,
        "balanceOf": lambda owner: balance,
        "allowance": lambda owner, spender: allowances.get(spender, 0),
    })


@pytest.fixture
def vesting_env(monkeypatch):
    monkeypatch.setenv("VESTING_ADDRESS", VESTING)
    return VESTING


@pytest.fixture
def chain(vesting_env):
    """Fake chain with WETH, CLAWD, NFPM and vesting contracts"""
    weth_allowances = {}
    clawd_allowances = {}
    contracts = {
        WETH: make_token("WETH", allowances=weth_allowances),
        CLAWD: make_token("CLAWD", allowances=clawd_allowances),
        NFPM: FakeContract(None, {}),
        VESTING: FakeContract(None, {}),
    }
    for addr, contract in contracts.items():
        contract.address = addr
    manager = FakeManager(contracts)
    return SimpleNamespace(
        manager=manager,
        contracts=contracts,
        weth=contracts[WETH],
        clawd=contracts[CLAWD],
        nfpm=contracts[NFPM],
        vesting=contracts[VESTING],
        weth_allowances=weth_allowances,
        clawd_allowances=clawd_allowances,
    )
