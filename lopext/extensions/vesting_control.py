"""
Vesting Control extension wrapper.

Periodic unlocks with an optional cliff (a start time in the future). The
schedule is checked by the pre-interaction on every fill.
"""

import time

from ..calculators.vesting import VestingSchedule
from ..constants import MAX_VESTING_DURATION
from ..hooks import HookSlot
from ..schema import HookSchema, SchemaField, timestamp, to_decimal, total_periods, vesting_period
from .factory import ExtensionWrapper, create_wrapper, slot_payload


def _validate_schedule(params) -> None:
    duration = to_decimal(params["vesting_period"]) * to_decimal(params["total_periods"])
    if duration > MAX_VESTING_DURATION:
        raise ValueError("Total vesting duration cannot exceed 20 years")
    if to_decimal(params["start_time"]) + duration > int(time.time()) + MAX_VESTING_DURATION:
        raise ValueError("Vesting end time is too far in the future")


VESTING_SCHEMA = HookSchema(
    fields={
        "vesting_period": SchemaField(
            vesting_period,
            label="Vesting Period",
            hint="Duration between each unlock in seconds (e.g., 2592000 for 30 days)",
            required=True,
        ),
        "total_periods": SchemaField(
            total_periods,
            label="Total Periods",
            hint="Total number of unlock periods (e.g., 12 for monthly unlocks over 1 year)",
            required=True,
        ),
        "start_time": SchemaField(
            timestamp,
            label="Start Time",
            hint="When vesting begins (Unix timestamp). Set to current time + cliff duration.",
            required=True,
        ),
    },
    validate=_validate_schedule,
    hint="Vesting schedule configuration for validation and unlock timing",
)


def vesting_control_wrapper(target: str) -> ExtensionWrapper:
    def build(params, context):
        config = params[HookSlot.PRE_INTERACTION]
        schedule = VestingSchedule(
            vesting_period=config["vesting_period"],
            total_periods=config["total_periods"],
            start_time=config["start_time"],
        )
        return {HookSlot.PRE_INTERACTION: slot_payload(target, schedule.encode())}

    return create_wrapper(
        name="Vesting Control",
        description=(
            "Enables token vesting with configurable cliff periods and periodic unlocks, "
            "ensuring fills respect timing and amount constraints"
        ),
        hooks={HookSlot.PRE_INTERACTION: VESTING_SCHEMA},
        build=build,
        target=target,
    )
