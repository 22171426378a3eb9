"""
Chainlink Calculator extension wrappers.

Single feed: one oracle quoting the taker asset per maker asset (or the
reverse with ``inverse``). Double feed: two oracles quoting the maker and
taker assets in a common currency, with a signed decimals adjustment for
the tokens' precision difference.

The engine uses the same conversion for both directions, so the making blob
is the mirror image of the taking blob: inverted flag or swapped oracles,
negated decimals scale and the opposite spread multiplier.
"""

from ..calculators.chainlink import DoubleFeedBlob, SingleFeedBlob
from ..calculators.spread import maker_spread, taker_spread
from ..hooks import HookSlot
from ..schema import HookSchema, SchemaField, address, boolean, int256, spread
from .factory import ExtensionWrapper, create_wrapper, slot_payload

SINGLE_FEED_SCHEMA = HookSchema(
    fields={
        "oracle": SchemaField(address, "Oracle", "Chainlink aggregator address", required=True),
        "inverse": SchemaField(boolean, "Inverse", "Set when the feed quotes maker asset per taker asset"),
        "spread": SchemaField(spread, "Spread", "Spread in %, e.g. 0.5 (max: 100)", required=True),
    },
    hint="Chainlink oracle configuration",
)

DOUBLE_FEED_SCHEMA = HookSchema(
    fields={
        "oracle1": SchemaField(address, "Oracle #1", "Aggregator pricing the maker asset", required=True),
        "oracle2": SchemaField(address, "Oracle #2", "Aggregator pricing the taker asset", required=True),
        "decimals_scale": SchemaField(int256, "Decimals Scale", "Decimal scaling factor (can be negative)"),
        "spread": SchemaField(spread, "Spread", "Spread in %, e.g. 0.5 (max: 100)", required=True),
    },
    hint="Chainlink oracle configuration",
)


def chainlink_single_wrapper(target: str) -> ExtensionWrapper:
    def build(params, context):
        config = params[HookSlot.MAKER_AMOUNT]
        inverse = config.get("inverse", False)
        making = SingleFeedBlob(config["oracle"], maker_spread(config["spread"]), inverse=not inverse)
        taking = SingleFeedBlob(config["oracle"], taker_spread(config["spread"]), inverse=inverse)
        return {
            HookSlot.MAKER_AMOUNT: slot_payload(target, making.encode()),
            HookSlot.TAKER_AMOUNT: slot_payload(target, taking.encode()),
        }

    return create_wrapper(
        name="Chainlink ETH <-> ERC20 Price Calculator",
        description="Dynamic pricing using a single Chainlink oracle feed",
        hooks={HookSlot.MAKER_AMOUNT: SINGLE_FEED_SCHEMA, HookSlot.TAKER_AMOUNT: HookSchema()},
        build=build,
        target=target,
    )


def chainlink_double_wrapper(target: str) -> ExtensionWrapper:
    def build(params, context):
        config = params[HookSlot.MAKER_AMOUNT]
        scale = config.get("decimals_scale", 0)
        making = DoubleFeedBlob(config["oracle2"], config["oracle1"], -scale, maker_spread(config["spread"]))
        taking = DoubleFeedBlob(config["oracle1"], config["oracle2"], scale, taker_spread(config["spread"]))
        return {
            HookSlot.MAKER_AMOUNT: slot_payload(target, making.encode()),
            HookSlot.TAKER_AMOUNT: slot_payload(target, taking.encode()),
        }

    return create_wrapper(
        name="Chainlink ERC20 <-> ERC20 Price Calculator",
        description="Dynamic pricing using two Chainlink oracle feeds priced in a common currency",
        hooks={HookSlot.MAKER_AMOUNT: DOUBLE_FEED_SCHEMA, HookSlot.TAKER_AMOUNT: HookSchema()},
        build=build,
        target=target,
    )
