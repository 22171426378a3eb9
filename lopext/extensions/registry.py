"""
lopext Extension Registry

Closed set of available extension modules. Each kind has a stable string key
and a constructor taking the deployed target address, which is resolved from
an explicit ExtensionAddresses configuration.
"""

from enum import Enum
from types import MappingProxyType
from typing import List, Optional, Union

from ..config.loader import ExtensionAddresses
from ..exceptions import ConfigurationError
from ..logger import get_logger
from .chainlink import chainlink_double_wrapper, chainlink_single_wrapper
from .dutch_auction import dutch_auction_wrapper
from .factory import ExtensionWrapper
from .gas_station import gas_station_wrapper
from .oneinch import oneinch_wrapper
from .range_amount import range_amount_wrapper
from .uniswap import uniswap_wrapper
from .vesting_control import vesting_control_wrapper

logger = get_logger(__name__)


class ExtensionKind(str, Enum):
    GAS_STATION = "gas_station"
    VESTING_CONTROL = "vesting_control"
    DUTCH_AUCTION_CALCULATOR = "dutch_auction_calculator"
    RANGE_AMOUNT_CALCULATOR = "range_amount_calculator"
    ONEINCH_CALCULATOR = "oneinch_calculator"
    UNISWAP_CALCULATOR = "uniswap_calculator"
    CHAINLINK_SINGLE_CALCULATOR = "chainlink_single_calculator"
    CHAINLINK_DOUBLE_CALCULATOR = "chainlink_double_calculator"

    def __str__(self) -> str:
        return self.value


# kind -> (constructor, ExtensionAddresses field)
WRAPPER_CONSTRUCTORS = MappingProxyType({
    ExtensionKind.GAS_STATION: (gas_station_wrapper, "gas_station"),
    ExtensionKind.VESTING_CONTROL: (vesting_control_wrapper, "vesting_control"),
    ExtensionKind.DUTCH_AUCTION_CALCULATOR: (dutch_auction_wrapper, "dutch_auction_calculator"),
    ExtensionKind.RANGE_AMOUNT_CALCULATOR: (range_amount_wrapper, "range_amount_calculator"),
    ExtensionKind.ONEINCH_CALCULATOR: (oneinch_wrapper, "oneinch_calculator"),
    ExtensionKind.UNISWAP_CALCULATOR: (uniswap_wrapper, "uniswap_calculator"),
    ExtensionKind.CHAINLINK_SINGLE_CALCULATOR: (chainlink_single_wrapper, "chainlink_calculator"),
    ExtensionKind.CHAINLINK_DOUBLE_CALCULATOR: (chainlink_double_wrapper, "chainlink_calculator"),
})


def available_extensions() -> List[str]:
    return [kind.value for kind in ExtensionKind]


def resolve_kind(key: Union[str, ExtensionKind]) -> ExtensionKind:
    try:
        return ExtensionKind(key)
    except ValueError:
        raise ConfigurationError(
            f"Unknown extension '{key}'. Available: {', '.join(available_extensions())}"
        ) from None


def get_wrapper(
    key: Union[str, ExtensionKind],
    addresses: Optional[ExtensionAddresses] = None,
    target: Optional[str] = None,
) -> ExtensionWrapper:
    """
    Construct the wrapper for `key`.

    Args:
        key: Stable extension key, e.g. "dutch_auction_calculator"
        addresses: Deployment configuration (defaults to the built-in one)
        target: Explicit target address, overriding `addresses`

    Raises:
        ConfigurationError: Unknown key or no deployed address
    """
    kind = resolve_kind(key)
    constructor, address_field = WRAPPER_CONSTRUCTORS[kind]
    if target is None:
        target = (addresses or ExtensionAddresses()).address_for(address_field)
    wrapper = constructor(target)
    logger.debug("Created %s wrapper targeting %s", kind, wrapper.target)
    return wrapper
