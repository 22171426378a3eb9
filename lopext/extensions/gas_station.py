"""
Gas Station extension wrapper.

Gasless trading: a maker holding only stablecoins sells for WETH while the
taker fronts gas and is reimbursed through a flash loan, swap and repayment.
The module claims all four slots and takes no parameters.
"""

from ..hooks import HookSlot
from ..schema import HookSchema
from .factory import ExtensionWrapper, create_wrapper, slot_payload

# Amounts are computed by the contract's view functions; the blob is a marker.
GAS_STATION_BLOB = b"\x00"


def gas_station_wrapper(target: str) -> ExtensionWrapper:
    def build(params, context):
        data = slot_payload(target, GAS_STATION_BLOB)
        return {slot: data for slot in HookSlot}

    return create_wrapper(
        name="Gas Station",
        description=(
            "Enables gasless trading where makers can trade stablecoins to WETH "
            "without owning ETH for gas fees"
        ),
        hooks={slot: HookSchema(hint="Gas Station does not accept any parameters") for slot in HookSlot},
        build=build,
        target=target,
    )
