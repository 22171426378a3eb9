"""
lopext TOML Configuration Loader

Loads lopext.toml with environment variable overrides. Every section is a
dataclass with ``from_dict`` and ``apply_env``.

Environment variable mapping:
    [network] chain_id              → LOPEXT_CHAIN_ID
    [network] rpc_url               → LOPEXT_RPC_URL
    [network] limit_order_protocol  → LOPEXT_LIMIT_ORDER_PROTOCOL
    [network] timeout               → LOPEXT_RPC_TIMEOUT
    [extensions] <name>             → LOPEXT_<NAME>_ADDRESS

Defaults for chain id and RPC URL come from .env (see lopext.constants).
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional

try:
    import tomllib as tomli  # Python 3.11+
except ImportError:
    import tomli  # type: ignore[no-redef]

from .. import constants
from ..crypto.address import is_valid_address, normalize_address
from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# [network]
# ---------------------------------------------------------------------------


@dataclass
class NetworkConfig:
    """[network] section."""
    chain_id: int = field(default_factory=lambda: int(constants.LOPEXT_CHAIN_ID))
    rpc_url: str = field(default_factory=lambda: str(constants.LOPEXT_RPC_URL))
    limit_order_protocol: str = constants.LIMIT_ORDER_PROTOCOL_ADDRESS
    timeout: float = 10.0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NetworkConfig":
        defaults = cls()
        return cls(
            chain_id=int(data.get("chain_id", defaults.chain_id)),
            rpc_url=data.get("rpc_url", defaults.rpc_url),
            limit_order_protocol=data.get("limit_order_protocol", defaults.limit_order_protocol),
            timeout=float(data.get("timeout", defaults.timeout)),
        )

    def apply_env(self) -> None:
        """Override from environment variables."""
        if v := os.environ.get("LOPEXT_CHAIN_ID"):
            self.chain_id = int(v)
        if v := os.environ.get("LOPEXT_RPC_URL"):
            self.rpc_url = v
        if v := os.environ.get("LOPEXT_LIMIT_ORDER_PROTOCOL"):
            self.limit_order_protocol = v
        if v := os.environ.get("LOPEXT_RPC_TIMEOUT"):
            self.timeout = float(v)


# ---------------------------------------------------------------------------
# [extensions]
# ---------------------------------------------------------------------------


@dataclass
class ExtensionAddresses:
    """
    [extensions] section: deployed contract per module. An empty string means
    the module is not deployed on this network.
    """
    gas_station: str = ""
    vesting_control: str = ""
    oneinch_calculator: str = ""
    uniswap_calculator: str = ""
    chainlink_calculator: str = "0x644ea330f200a1cfde1558e0ebb2e12a642f1900"
    dutch_auction_calculator: str = "0xb4a98c55aA4A179516e98e12b3042CF95e739cD0"
    range_amount_calculator: str = "0x98e58a8fCb283F69Ad5eA97E618A589A284c0210"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExtensionAddresses":
        names = {f.name for f in fields(cls)}
        unknown = set(data) - names
        if unknown:
            raise ConfigurationError(f"Unknown extensions in config: {sorted(unknown)}")
        return cls(**{name: data[name] for name in names if name in data})

    def apply_env(self) -> None:
        for f in fields(self):
            if v := os.environ.get(f"LOPEXT_{f.name.upper()}_ADDRESS"):
                setattr(self, f.name, v)

    def address_for(self, name: str) -> str:
        """
        Deployed address of `name`.

        Raises:
            ConfigurationError: If the module has no deployment configured
        """
        address = getattr(self, name, None)
        if address is None:
            raise ConfigurationError(f"Unknown extension: {name}")
        if not address:
            raise ConfigurationError(
                f"No deployed address configured for {name} "
                f"(set [extensions] {name} or LOPEXT_{name.upper()}_ADDRESS)"
            )
        return normalize_address(address)

    def validate(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if value and not is_valid_address(value):
                raise ConfigurationError(f"Invalid address for {f.name}: {value!r}")


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


@dataclass
class LopExtConfig:
    network: NetworkConfig = field(default_factory=NetworkConfig)
    extensions: ExtensionAddresses = field(default_factory=ExtensionAddresses)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LopExtConfig":
        return cls(
            network=NetworkConfig.from_dict(data.get("network", {})),
            extensions=ExtensionAddresses.from_dict(data.get("extensions", {})),
        )

    @classmethod
    def from_file(cls, config_path: str) -> "LopExtConfig":
        """
        Load configuration from a TOML file, falling back to defaults when
        the file does not exist. Environment overrides are applied last.
        """
        path = Path(config_path)
        if not path.exists():
            logger.warning("Config file not found: %s, using defaults", config_path)
            cfg = cls()
            cfg.apply_env()
            return cfg

        with open(path, "rb") as f:
            try:
                raw = tomli.load(f)
            except tomli.TOMLDecodeError as e:
                raise ConfigurationError(f"Invalid TOML in {config_path}: {e}") from e

        cfg = cls.from_dict(raw)
        cfg.apply_env()
        return cfg

    def apply_env(self) -> None:
        self.network.apply_env()
        self.extensions.apply_env()

    def validate(self) -> bool:
        """
        Raises:
            ConfigurationError: on invalid config
        """
        if self.network.chain_id < 1:
            raise ConfigurationError("chain_id must be >= 1")
        if not is_valid_address(self.network.limit_order_protocol):
            raise ConfigurationError(
                f"Invalid limit order protocol address: {self.network.limit_order_protocol!r}"
            )
        if self.network.timeout <= 0:
            raise ConfigurationError("timeout must be positive")
        self.extensions.validate()
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "network": {
                "chain_id": self.network.chain_id,
                "rpc_url": self.network.rpc_url,
                "limit_order_protocol": self.network.limit_order_protocol,
                "timeout": self.network.timeout,
            },
            "extensions": {f.name: getattr(self.extensions, f.name) for f in fields(self.extensions)},
        }


# -----------------------------------------------------------------------
# Convenience function
# -----------------------------------------------------------------------

def load_config(path: Optional[str] = None) -> LopExtConfig:
    """
    Load configuration.

    Resolution order:
        1. Explicit *path* argument
        2. LOPEXT_CONFIG env var
        3. ./lopext.toml in current directory
        4. Defaults (with env overrides)
    """
    if path is None:
        path = os.environ.get("LOPEXT_CONFIG", "lopext.toml")

    cfg = LopExtConfig.from_file(path)
    cfg.validate()
    return cfg
