"""
lopext Configuration

Loads lopext.toml. Environment variables override TOML values.
"""

from .loader import (
    NetworkConfig,
    ExtensionAddresses,
    LopExtConfig,
    load_config,
)

__all__ = [
    "NetworkConfig",
    "ExtensionAddresses",
    "LopExtConfig",
    "load_config",
]
