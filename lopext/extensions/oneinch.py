"""
OneInch Calculator extension wrapper.

Prices the order from the aggregation router's live quote with a spread in
the maker's favour.
"""

from ..calculators.oneinch import OneInchBlob
from ..calculators.spread import maker_spread, taker_spread
from ..hooks import HookSlot
from ..schema import HookSchema, SchemaField, spread
from .factory import ExtensionWrapper, create_wrapper, slot_payload

SPREAD_SCHEMA = HookSchema(
    fields={
        "spread": SchemaField(spread, label="Spread", hint="Spread in %, e.g. 0.5 (max: 100)", required=True),
    },
)


def oneinch_wrapper(target: str) -> ExtensionWrapper:
    def build(params, context):
        value = params[HookSlot.MAKER_AMOUNT]["spread"]
        making = OneInchBlob(context.maker_asset, context.taker_asset, maker_spread(value))
        taking = OneInchBlob(context.maker_asset, context.taker_asset, taker_spread(value))
        return {
            HookSlot.MAKER_AMOUNT: slot_payload(target, making.encode()),
            HookSlot.TAKER_AMOUNT: slot_payload(target, taking.encode()),
        }

    return create_wrapper(
        name="OneInch Calculator",
        description=(
            "Enables real-time price discovery using 1inch Aggregation Router for "
            "dynamic amount calculations with configurable spread"
        ),
        hooks={HookSlot.MAKER_AMOUNT: SPREAD_SCHEMA, HookSlot.TAKER_AMOUNT: HookSchema()},
        build=build,
        target=target,
    )
