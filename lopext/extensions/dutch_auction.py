"""
Dutch Auction Calculator extension wrapper.

Time-based price decay: the taking amount falls linearly from start amount
to end amount between the start and end times.
"""

from ..calculators.dutch_auction import DutchAuctionBlob
from ..hooks import HookSlot
from ..schema import HookSchema, SchemaField, timestamp, to_integer, uint256
from .factory import ExtensionWrapper, create_wrapper, slot_payload


def _validate_auction(params) -> None:
    if to_integer(params["start_time"]) >= to_integer(params["end_time"]):
        raise ValueError("Auction start time must be before end time")
    if to_integer(params["start_amount"]) <= to_integer(params["end_amount"]):
        raise ValueError("Start amount must be greater than end amount for price decay")


DUTCH_AUCTION_SCHEMA = HookSchema(
    fields={
        "start_time": SchemaField(timestamp, "Start Time", "Auction start timestamp (Unix timestamp)", True),
        "end_time": SchemaField(timestamp, "End Time", "Auction end timestamp (Unix timestamp)", True),
        "start_amount": SchemaField(uint256, "Start Amount", "Starting taker amount (highest price for taker)", True),
        "end_amount": SchemaField(uint256, "End Amount", "Ending taker amount (lowest price for taker)", True),
    },
    validate=_validate_auction,
    hint="Dutch auction configuration for maker amount calculation",
)


def dutch_auction_wrapper(target: str) -> ExtensionWrapper:
    def build(params, context):
        config = params[HookSlot.MAKER_AMOUNT]
        blob = DutchAuctionBlob(
            start_time=config["start_time"],
            end_time=config["end_time"],
            start_amount=int(config["start_amount"]),
            end_amount=int(config["end_amount"]),
        ).encode()
        data = slot_payload(target, blob)
        return {HookSlot.MAKER_AMOUNT: data, HookSlot.TAKER_AMOUNT: data}

    return create_wrapper(
        name="Dutch Auction Calculator",
        description=(
            "Time-based price decay from start price to end price, "
            "implementing Dutch auction mechanics"
        ),
        hooks={
            HookSlot.MAKER_AMOUNT: DUTCH_AUCTION_SCHEMA,
            HookSlot.TAKER_AMOUNT: HookSchema(
                hint="Maker amount configuration is used for taker amount calculation"
            ),
        },
        build=build,
        target=target,
    )
