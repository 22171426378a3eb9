"""
lopext Extension Wrapper Factory

`create_wrapper` binds a named pricing or gating module to its per-slot hook
schemas and a build function. The wrapper validates caller parameters
synchronously, then parses them (awaiting token-amount lookups) and asks the
build function for one payload per slot. Each non-empty payload starts with
the 20-byte target contract address.
"""

import inspect
from collections.abc import Mapping
from dataclasses import dataclass, fields
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, Optional, Union

from ..constants import ADDRESS_LENGTH
from ..crypto.address import address_to_bytes, normalize_address
from ..exceptions import ConfigurationError
from ..hooks import HookSlot
from ..schema.schema import HookSchema

if TYPE_CHECKING:
    from ..rpc import TokenReader

SlotPayloads = Mapping
BuildFunction = Callable[[Dict[HookSlot, Dict[str, Any]], "BuildContext"], Union[SlotPayloads, Awaitable[SlotPayloads]]]


@dataclass(frozen=True)
class WrapperMeta:
    name: str
    description: str
    version: str = "1.0.0"


@dataclass(frozen=True)
class BuildContext:
    """Order information handed to field parsers and wrapper build functions."""
    maker: str
    maker_asset: str
    taker_asset: str
    making_amount: int
    taking_amount: int
    token_reader: Optional["TokenReader"] = None

    def asset(self, side: str) -> str:
        if side == "maker":
            return self.maker_asset
        if side == "taker":
            return self.taker_asset
        raise ValueError(f"Unknown asset side: {side!r}")

    async def asset_decimals(self, side: str) -> int:
        if self.token_reader is None:
            raise ConfigurationError("A token reader is required to resolve token decimals")
        return await self.token_reader.decimals(self.asset(side))


@dataclass(frozen=True)
class ExtensionPayload:
    """Per-slot bytes produced by one wrapper."""
    maker_amount: bytes = b""
    taker_amount: bytes = b""
    pre_interaction: bytes = b""
    post_interaction: bytes = b""

    _FIELDS = MappingProxyType({
        HookSlot.MAKER_AMOUNT: "maker_amount",
        HookSlot.TAKER_AMOUNT: "taker_amount",
        HookSlot.PRE_INTERACTION: "pre_interaction",
        HookSlot.POST_INTERACTION: "post_interaction",
    })

    def for_slot(self, slot: HookSlot) -> bytes:
        return getattr(self, self._FIELDS[HookSlot(slot)])

    def items(self):
        """(slot, data) for every non-empty slot."""
        return [(slot, self.for_slot(slot)) for slot in HookSlot if self.for_slot(slot)]

    def __bool__(self) -> bool:
        return any(getattr(self, f.name) for f in fields(self))


class ExtensionWrapper:
    """
    Immutable binding of a module's metadata, hook schemas and build function.

    Use `create_wrapper` to construct one.
    """

    __slots__ = ("_meta", "_schemas", "_build", "_target")

    def __init__(self, meta: WrapperMeta, schemas: Mapping, build: BuildFunction, target: Optional[str] = None):
        object.__setattr__(self, "_meta", meta)
        object.__setattr__(self, "_schemas", MappingProxyType(dict(schemas)))
        object.__setattr__(self, "_build", build)
        object.__setattr__(self, "_target", target)

    def __setattr__(self, name, value):
        raise AttributeError("ExtensionWrapper is immutable")

    @property
    def meta(self) -> WrapperMeta:
        return self._meta

    @property
    def name(self) -> str:
        return self._meta.name

    @property
    def schemas(self) -> Mapping:
        return self._schemas

    @property
    def target(self) -> Optional[str]:
        return self._target

    def validate(self, all_params: Optional[Mapping] = None) -> Optional[Dict[str, Any]]:
        """
        Validate parameters for every declared slot.

        Returns:
            None when every slot is clean, else slot name -> schema errors
        """
        all_params = all_params or {}
        errors: Dict[str, Any] = {}
        for slot, schema in self._schemas.items():
            slot_errors = schema.validate(all_params.get(slot.value))
            if slot_errors:
                errors[slot.value] = slot_errors
        return errors or None

    async def build(self, all_params: Optional[Mapping], context: BuildContext) -> ExtensionPayload:
        """Parse present slots and run the module's build function."""
        all_params = all_params or {}
        parsed: Dict[HookSlot, Dict[str, Any]] = {}
        for slot, schema in self._schemas.items():
            raw = all_params.get(slot.value)
            if raw is not None:
                parsed[slot] = await schema.parse(raw, context)
        result = self._build(parsed, context)
        if inspect.isawaitable(result):
            result = await result
        return self._to_payload(result)

    def _to_payload(self, result: Any) -> ExtensionPayload:
        if not isinstance(result, Mapping):
            raise ConfigurationError(f"'{self.name}' build must return a mapping of slot payloads")
        payload: Dict[str, bytes] = {}
        for key, data in result.items():
            try:
                slot = HookSlot(key)
            except ValueError:
                raise ConfigurationError(f"'{self.name}' emitted data for unknown slot {key!r}") from None
            if slot not in self._schemas:
                raise ConfigurationError(f"'{self.name}' emitted data for undeclared slot {slot}")
            if not isinstance(data, (bytes, bytearray)):
                raise ConfigurationError(f"'{self.name}' payload for {slot} must be bytes")
            if data and len(data) < ADDRESS_LENGTH:
                raise ConfigurationError(f"'{self.name}' payload for {slot} is missing its target address")
            payload[ExtensionPayload._FIELDS[slot]] = bytes(data)
        return ExtensionPayload(**payload)

    def __repr__(self) -> str:
        slots = ", ".join(slot.value for slot in self._schemas)
        return f"ExtensionWrapper({self.name!r}, slots=[{slots}])"


def slot_payload(target: str, blob: bytes) -> bytes:
    """Prefix a module blob with its 20-byte target address."""
    return address_to_bytes(target) + bytes(blob)


def create_wrapper(
    name: str,
    description: str,
    hooks: Mapping,
    build: BuildFunction,
    version: str = "1.0.0",
    target: Optional[str] = None,
) -> ExtensionWrapper:
    """
    Create an extension wrapper.

    Args:
        name: Display name, used in collision and validation errors
        description: What the module does
        hooks: HookSlot (or its string value) -> HookSchema
        build: ``build(parsed_params, context)`` returning slot -> bytes, sync or async
        version: Module version
        target: Deployed contract address the payloads call into

    Raises:
        ConfigurationError: If any argument is malformed
    """
    if not isinstance(name, str) or not name.strip():
        raise ConfigurationError("name is required and must be a non-empty string")
    if not isinstance(description, str) or not description.strip():
        raise ConfigurationError("description is required and must be a non-empty string")
    if not callable(build):
        raise ConfigurationError("build must be callable")
    if not isinstance(hooks, Mapping):
        raise ConfigurationError("hooks must be a mapping of HookSlot to HookSchema")

    schemas: Dict[HookSlot, HookSchema] = {}
    for key, schema in hooks.items():
        try:
            slot = HookSlot(key)
        except ValueError:
            raise ConfigurationError(f"Unknown hook slot: {key!r}") from None
        if not isinstance(schema, HookSchema):
            raise ConfigurationError(f"Schema for {slot} must be a HookSchema")
        schemas[slot] = schema

    if target is not None:
        try:
            target = normalize_address(target)
        except ValueError as e:
            raise ConfigurationError(f"Invalid target for '{name}': {e}") from e

    return ExtensionWrapper(WrapperMeta(name, description, version), schemas, build, target)
