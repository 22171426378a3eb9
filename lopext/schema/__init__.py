"""
lopext Schema Module

Field types and per-slot hook schemas used to validate and parse extension
parameters.
"""

from .types import (
    FieldType,
    AsyncFieldType,
    AddressType,
    Uint256Type,
    Int256Type,
    BooleanType,
    TimestampType,
    PercentageType,
    ChoiceType,
    TokenAmountType,
    VestingPeriodType,
    TotalPeriodsType,
    address,
    uint256,
    int256,
    boolean,
    timestamp,
    spread,
    maker_token_amount,
    taker_token_amount,
    vesting_period,
    total_periods,
    parse_units,
    to_decimal,
    to_integer,
)
from .schema import SCHEMA_ERROR_KEY, SchemaField, HookSchema

__all__ = [
    # Field type classes
    "FieldType",
    "AsyncFieldType",
    "AddressType",
    "Uint256Type",
    "Int256Type",
    "BooleanType",
    "TimestampType",
    "PercentageType",
    "ChoiceType",
    "TokenAmountType",
    "VestingPeriodType",
    "TotalPeriodsType",
    # Shared instances
    "address",
    "uint256",
    "int256",
    "boolean",
    "timestamp",
    "spread",
    "maker_token_amount",
    "taker_token_amount",
    "vesting_period",
    "total_periods",
    # Helpers
    "parse_units",
    "to_decimal",
    "to_integer",
    # Schemas
    "SCHEMA_ERROR_KEY",
    "SchemaField",
    "HookSchema",
]
