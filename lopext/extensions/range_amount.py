"""
Range Amount Calculator extension wrapper.

Range limit orders: the price rises linearly from price start to price end
as the order fills.
"""

from ..calculators.range_amount import RangeBlob
from ..hooks import HookSlot
from ..schema import HookSchema, SchemaField, taker_token_amount, to_decimal
from .factory import ExtensionWrapper, create_wrapper, slot_payload


def _validate_range(params) -> None:
    start = to_decimal(params["price_start"])
    if start == 0:
        raise ValueError("Price Start cannot be zero")
    if to_decimal(params["price_end"]) <= start:
        raise ValueError("Price End must be greater than Price Start")


RANGE_SCHEMA = HookSchema(
    fields={
        "price_start": SchemaField(
            taker_token_amount,
            label="Price Start",
            hint="Starting price (lower bound) in taker asset units per maker asset unit",
            required=True,
        ),
        "price_end": SchemaField(
            taker_token_amount,
            label="Price End",
            hint="Ending price (upper bound) in taker asset units per maker asset unit",
            required=True,
        ),
    },
    validate=_validate_range,
    hint="Range pricing configuration for maker amount calculation",
)


def range_amount_wrapper(target: str) -> ExtensionWrapper:
    def build(params, context):
        config = params[HookSlot.MAKER_AMOUNT]
        blob = RangeBlob(price_start=config["price_start"], price_end=config["price_end"]).encode()
        data = slot_payload(target, blob)
        return {HookSlot.MAKER_AMOUNT: data, HookSlot.TAKER_AMOUNT: data}

    return create_wrapper(
        name="Range Amount Calculator",
        description="Linear price progression within a specified range as the order gets filled",
        hooks={HookSlot.MAKER_AMOUNT: RANGE_SCHEMA, HookSlot.TAKER_AMOUNT: HookSchema()},
        build=build,
        target=target,
    )
