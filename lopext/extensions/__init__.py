"""
lopext Extensions Module

Extension wrappers for the limit order protocol's four hook slots:
- Wrapper factory (schemas + build function + target)
- Gas station, vesting control
- Dutch auction, range, aggregator, AMM and oracle calculators
- Registry of stable keys to wrapper constructors
"""

from .factory import (
    BuildContext,
    ExtensionPayload,
    ExtensionWrapper,
    WrapperMeta,
    create_wrapper,
    slot_payload,
)
from .gas_station import gas_station_wrapper
from .vesting_control import vesting_control_wrapper
from .dutch_auction import dutch_auction_wrapper
from .range_amount import range_amount_wrapper
from .oneinch import oneinch_wrapper
from .uniswap import uniswap_wrapper
from .chainlink import chainlink_single_wrapper, chainlink_double_wrapper
from .registry import (
    ExtensionKind,
    WRAPPER_CONSTRUCTORS,
    available_extensions,
    get_wrapper,
    resolve_kind,
)

__all__ = [
    # Factory
    "BuildContext",
    "ExtensionPayload",
    "ExtensionWrapper",
    "WrapperMeta",
    "create_wrapper",
    "slot_payload",
    # Wrappers
    "gas_station_wrapper",
    "vesting_control_wrapper",
    "dutch_auction_wrapper",
    "range_amount_wrapper",
    "oneinch_wrapper",
    "uniswap_wrapper",
    "chainlink_single_wrapper",
    "chainlink_double_wrapper",
    # Registry
    "ExtensionKind",
    "WRAPPER_CONSTRUCTORS",
    "available_extensions",
    "get_wrapper",
    "resolve_kind",
]
