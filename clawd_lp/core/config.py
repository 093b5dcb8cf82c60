"""Configuration loading and management"""

import os
import json
import logging
from pathlib import Path

from dotenv import load_dotenv

from .exceptions import ConfigError

logger = logging.getLogger(__name__)


class Config:
    """Centralized configuration manager for the WETH/CLAWD deployment"""

    _instance = None
    _data = None
    _abis = None

    # Package files (not user-configurable)
    PACKAGE_DEFAULTS = Path(__file__).parent.parent / "defaults.json"
    PACKAGE_ABIS = Path(__file__).parent.parent / "abis.json"

    USER_CONFIG_FILE = "clawd_lp.json"

    # Fee tier to tick spacing mapping
    TICK_SPACING = {
        100: 1,
        500: 10,
        3000: 60,
        10000: 200,
    }

    # Environment variable -> (config key, type)
    ENV_OVERRIDES = {
        "VESTING_ADDRESS": ("vesting", str),
        "TICK_SPACING": ("tick_spacing", int),
        "SLIPPAGE_BPS": ("slippage_bps", int),
        "CHAIN_ID": ("chain_id", int),
    }

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if Config._data is None:
            self._load()

    @classmethod
    def reset(cls):
        """Drop the loaded configuration so the next Config() reloads it"""
        cls._instance = None
        cls._data = None
        cls._abis = None

    def _find_config_dir(self):
        """Find user config directory"""
        env_path = os.getenv("CLAWD_LP_CONFIG_DIR")
        if env_path:
            path = Path(env_path)
            if path.exists():
                return path

        locations = [
            Path.cwd() / "config",
            Path.home() / ".clawd-lp" / "config",
        ]

        for path in locations:
            if path.exists():
                return path

        return None

    def _load(self):
        """Load package defaults, user overrides and environment overrides"""
        load_dotenv()

        if not self.PACKAGE_DEFAULTS.exists():
            raise ConfigError(f"Package defaults not found: {self.PACKAGE_DEFAULTS}")
        with open(self.PACKAGE_DEFAULTS) as f:
            data = json.load(f)

        if not self.PACKAGE_ABIS.exists():
            raise ConfigError(f"Package ABIs not found: {self.PACKAGE_ABIS}")
        with open(self.PACKAGE_ABIS) as f:
            Config._abis = json.load(f)

        config_dir = self._find_config_dir()
        if config_dir:
            user_file = config_dir / self.USER_CONFIG_FILE
            if user_file.exists():
                logger.debug("Loading user config from %s", user_file)
                with open(user_file) as f:
                    try:
                        user = json.load(f)
                    except json.JSONDecodeError as e:
                        raise ConfigError(f"Invalid JSON in {user_file}: {e}") from e
                self._merge(data, user)

        for env_name, (key, cast) in self.ENV_OVERRIDES.items():
            value = os.getenv(env_name)
            if not value:
                continue
            try:
                value = cast(value)
            except ValueError:
                raise ConfigError(f"{env_name} must be {cast.__name__}, got {value!r}")
            if key in data.get("contracts", {}):
                data["contracts"][key] = value
            else:
                data[key] = value

        Config._data = data

    @staticmethod
    def _merge(base, override):
        """Merge override into base, one level deep for nested sections"""
        for key, value in override.items():
            if isinstance(value, dict) and isinstance(base.get(key), dict):
                base[key].update(value)
            else:
                base[key] = value

    @property
    def chain_id(self):
        return Config._data["chain_id"]

    @property
    def rpc_url(self):
        """Default RPC endpoint (RPC_URL in the environment takes precedence)"""
        return Config._data.get("rpc_url")

    @property
    def common_tokens(self):
        """Token symbol -> address mapping"""
        return Config._data.get("tokens", {})

    @property
    def contracts(self):
        return Config._data.get("contracts", {})

    @property
    def weth_address(self):
        return self.get_token_address("WETH")

    @property
    def clawd_address(self):
        return self.get_token_address("CLAWD")

    @property
    def pool_address(self):
        """WETH/CLAWD Uniswap V3 pool address"""
        return self._require_contract("pool")

    @property
    def nfpm_address(self):
        """NonfungiblePositionManager address"""
        return self._require_contract("nfpm")

    @property
    def vesting_address(self):
        """LiquidityVesting contract address"""
        return self._require_contract("vesting")

    @property
    def fee(self):
        """Pool fee tier"""
        return Config._data["fee"]

    @property
    def tick_spacing(self):
        """Explicit tick spacing, or the spacing of the configured fee tier"""
        spacing = Config._data.get("tick_spacing")
        if spacing:
            if spacing < 1:
                raise ConfigError(f"Invalid tick spacing: {spacing}")
            return spacing
        return self.get_tick_spacing(self.fee)

    @property
    def slippage_bps(self):
        bps = Config._data.get("slippage_bps", 500)
        if not 0 <= bps < 10000:
            raise ConfigError(f"Invalid slippage: {bps} bps")
        return bps

    @property
    def deadline_seconds(self):
        return Config._data.get("deadline_seconds", 300)

    @property
    def range_half_width_steps(self):
        return Config._data.get("range_half_width_steps", 50)

    @property
    def default_vest_days(self):
        return Config._data.get("default_vest_days", 30)

    @property
    def form_cache_ttl_seconds(self):
        return Config._data.get("form_cache_ttl_seconds", 300)

    def _require_contract(self, name):
        address = self.contracts.get(name)
        if not address:
            raise ConfigError(f"{name} address not configured")
        return address

    def get_abi(self, name):
        """Get ABI by name"""
        if name in Config._abis:
            return Config._abis[name]
        raise ConfigError(f"ABI not found: {name}")

    def get_token_address(self, symbol_or_address):
        """Resolve token symbol to address, or validate address"""
        token = symbol_or_address.upper()

        if token in self.common_tokens:
            return self.common_tokens[token]

        if symbol_or_address.startswith("0x") and len(symbol_or_address) == 42:
            return symbol_or_address

        raise ConfigError(f"Unknown token: {symbol_or_address}")

    def get_tick_spacing(self, fee):
        """Get tick spacing for fee tier"""
        if fee not in self.TICK_SPACING:
            raise ConfigError(f"Invalid fee tier: {fee}. Valid: {list(self.TICK_SPACING.keys())}")
        return self.TICK_SPACING[fee]
