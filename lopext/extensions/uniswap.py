"""
Uniswap Calculator extension wrapper.

Prices the order from a Uniswap V3 pool's spot price with a spread in the
maker's favour. The fee tier defaults to 3000 (0.3%).
"""

from ..calculators.spread import maker_spread, taker_spread
from ..calculators.uniswap import SUPPORTED_FEE_TIERS, UniswapBlob
from ..constants import DEFAULT_UNISWAP_FEE_TIER
from ..hooks import HookSlot
from ..schema import ChoiceType, HookSchema, PercentageType, SchemaField
from .factory import ExtensionWrapper, create_wrapper, slot_payload

UNISWAP_SCHEMA = HookSchema(
    fields={
        "spread": SchemaField(
            PercentageType(min_value="0.1", max_value=100),
            label="Spread",
            hint="Spread in %, e.g. 5 (range: 0.1% to 100%)",
            required=True,
        ),
        "fee_tier": SchemaField(
            ChoiceType(SUPPORTED_FEE_TIERS),
            label="Fee Tier",
            hint="Uniswap V3 fee tier: 500 (0.05%), 3000 (0.3%), or 10000 (1%)",
        ),
    },
)


def uniswap_wrapper(target: str) -> ExtensionWrapper:
    def build(params, context):
        config = params[HookSlot.MAKER_AMOUNT]
        fee_tier = config.get("fee_tier", DEFAULT_UNISWAP_FEE_TIER)
        making = UniswapBlob(spread=maker_spread(config["spread"]), fee_tier=fee_tier)
        taking = UniswapBlob(spread=taker_spread(config["spread"]), fee_tier=fee_tier)
        return {
            HookSlot.MAKER_AMOUNT: slot_payload(target, making.encode()),
            HookSlot.TAKER_AMOUNT: slot_payload(target, taking.encode()),
        }

    return create_wrapper(
        name="Uniswap Calculator",
        description=(
            "Enables real-time price discovery using Uniswap V3 Factory and pools "
            "for dynamic amount calculations with configurable spread"
        ),
        hooks={HookSlot.MAKER_AMOUNT: UNISWAP_SCHEMA, HookSlot.TAKER_AMOUNT: HookSchema()},
        build=build,
        target=target,
    )
