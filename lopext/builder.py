"""
lopext Order Builder

Composes extension wrappers onto a draft order, then validates, builds,
hashes and signs it.

Key features:
- Hook collision detection: each of the four slots belongs to at most one wrapper
- All wrapper parameters validated, and every failure reported, before any
  token lookup, wrapper build or signer call
- Maker traits extension flags derived from the payloads actually produced
- Salt committed to the extension, EIP-712 order hash and signature
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from .constants import LIMIT_ORDER_PROTOCOL_ADDRESS, UINT256_MAX
from .crypto.address import normalize_address
from .crypto.signing import Signer, compact_signature
from .exceptions import ConfigurationError, FieldValidationError, HookCollisionError, ValidationError
from .extension import Extension
from .extensions.factory import BuildContext, ExtensionWrapper
from .hooks import HookSlot
from .logger import get_logger
from .order import Order, build_salt
from .rpc import TokenReader
from .schema.types import parse_units, to_decimal
from .traits import MakerTraits

logger = get_logger(__name__)

Amount = Union[int, str, Decimal]

ORDER_ERROR_KEY = "order"


@dataclass(frozen=True)
class SignedOrder:
    order: Order
    signature: bytes
    extension: Extension
    order_hash: bytes

    @property
    def compact_signature(self) -> Tuple[bytes, bytes]:
        """(r, vs) pair for the engine's fillOrder entrypoint."""
        return compact_signature(self.signature)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "order": self.order.to_dict(),
            "orderHash": "0x" + self.order_hash.hex(),
            "signature": "0x" + self.signature.hex(),
            "extension": "0x" + self.extension.encode().hex(),
        }


class OrderBuilder:
    """
    Builder for a single limit order.

    Amounts given as ``int`` are base units. Strings and Decimals are
    human-readable and are scaled with the asset's decimals from the token
    reader passed to `build`.

    Args:
        maker_asset: Asset offered by the maker
        making_amount: Amount of maker asset offered
        taker_asset: Asset requested from the taker
        taking_amount: Amount of taker asset requested
        receiver: Address receiving the taker asset (defaults to the maker)
        maker_traits: Initial traits; extension flags are derived at build time
        chain_id: Chain the order is signed for
        verifying_contract: Settlement engine address in the EIP-712 domain
        salt_base: Upper 96 salt bits (random when omitted)
    """

    def __init__(
        self,
        maker_asset: str,
        making_amount: Amount,
        taker_asset: str,
        taking_amount: Amount,
        receiver: Optional[str] = None,
        maker_traits: Optional[MakerTraits] = None,
        chain_id: int = 1,
        verifying_contract: str = LIMIT_ORDER_PROTOCOL_ADDRESS,
        salt_base: Optional[int] = None,
    ):
        self.maker_asset = maker_asset
        self.making_amount = making_amount
        self.taker_asset = taker_asset
        self.taking_amount = taking_amount
        self.receiver = receiver
        self.maker_traits = maker_traits or MakerTraits.default()
        self.chain_id = chain_id
        self.verifying_contract = verifying_contract
        self.salt_base = salt_base
        self._extensions: List[ExtensionWrapper] = []
        self._used_hooks: Dict[HookSlot, str] = {}

    @property
    def extensions(self) -> Tuple[ExtensionWrapper, ...]:
        return tuple(self._extensions)

    @property
    def used_hooks(self) -> Dict[HookSlot, str]:
        """Claimed slot -> name of the wrapper holding it."""
        return dict(self._used_hooks)

    def add_extension(self, wrapper: ExtensionWrapper) -> "OrderBuilder":
        """
        Attach a wrapper, claiming every slot it declares.

        Raises:
            HookCollisionError: If a slot is already claimed; nothing is recorded
        """
        for slot in wrapper.schemas:
            if slot in self._used_hooks:
                logger.warning(
                    "Hook collision on %s: '%s' vs '%s'", slot, self._used_hooks[slot], wrapper.name
                )
                raise HookCollisionError(str(slot), self._used_hooks[slot], wrapper.name)
        for slot in wrapper.schemas:
            self._used_hooks[slot] = wrapper.name
        self._extensions.append(wrapper)
        logger.info(
            "Extension attached: '%s' -> %s", wrapper.name, ", ".join(str(s) for s in wrapper.schemas)
        )
        return self

    # --- validation -------------------------------------------------------

    def _validate_order(self) -> Dict[str, str]:
        errors: Dict[str, str] = {}
        for name in ("maker_asset", "taker_asset", "receiver"):
            value = getattr(self, name)
            if value is None and name == "receiver":
                continue
            try:
                normalize_address(value)
            except ValueError as e:
                errors[name] = str(e)
        for name in ("making_amount", "taking_amount"):
            value = getattr(self, name)
            try:
                if isinstance(value, int) and not isinstance(value, bool):
                    number = value
                else:
                    number = to_decimal(value)
            except FieldValidationError as e:
                errors[name] = str(e)
                continue
            if number <= 0:
                errors[name] = "Amount must be positive"
            elif isinstance(number, int) and number > UINT256_MAX:
                errors[name] = "Amount exceeds uint256"
        return errors

    def validate(self, params: Optional[Mapping] = None) -> Optional[Dict[str, Any]]:
        """
        Validate the draft order and every attached wrapper's parameters.

        Returns:
            None when valid, else wrapper name (or "order") -> errors
        """
        params = params or {}
        errors: Dict[str, Any] = {}
        order_errors = self._validate_order()
        if order_errors:
            errors[ORDER_ERROR_KEY] = order_errors
        for wrapper in self._extensions:
            wrapper_errors = wrapper.validate(params)
            if wrapper_errors:
                errors[wrapper.name] = wrapper_errors
        return errors or None

    # --- build ------------------------------------------------------------

    @staticmethod
    async def _resolve_amount(
        name: str, amount: Amount, asset: str, token_reader: Optional[TokenReader]
    ) -> int:
        if isinstance(amount, int):
            return amount
        if token_reader is None:
            raise ConfigurationError("A token reader is required for human-readable amounts")
        try:
            scaled = parse_units(amount, await token_reader.decimals(asset))
        except FieldValidationError as e:
            raise ValidationError({ORDER_ERROR_KEY: {name: str(e)}}) from None
        if not 0 < scaled <= UINT256_MAX:
            logger.warning("Scaled %s out of uint256 range", name)
            raise ValidationError({ORDER_ERROR_KEY: {name: "Scaled amount out of uint256 range"}})
        return scaled

    async def _combine_extensions(self, params: Mapping, context: BuildContext) -> Extension:
        extension = Extension()
        for wrapper in self._extensions:
            payload = await wrapper.build(params, context)
            for slot, data in payload.items():
                extension = extension.with_slot(slot, data)
        return extension

    async def build(
        self,
        signer: Signer,
        params: Optional[Mapping] = None,
        token_reader: Optional[TokenReader] = None,
    ) -> SignedOrder:
        """
        Validate, compose, hash and sign the order.

        Args:
            signer: Provides the maker address and signs the order hash
            params: Hook slot name -> parameters, shared by all wrappers
            token_reader: Decimals lookup for human-readable amounts

        Raises:
            ValidationError: One or more parameter sets are invalid
            ConfigurationError: A wrapper or collaborator is misconfigured
        """
        params = params or {}
        errors = self.validate(params)
        if errors:
            logger.warning("Order validation failed for %d component(s)", len(errors))
            raise ValidationError(errors)

        maker = normalize_address(signer.address)
        maker_asset = normalize_address(self.maker_asset)
        taker_asset = normalize_address(self.taker_asset)
        making_amount = await self._resolve_amount(
            "making_amount", self.making_amount, maker_asset, token_reader
        )
        taking_amount = await self._resolve_amount(
            "taking_amount", self.taking_amount, taker_asset, token_reader
        )

        context = BuildContext(
            maker=maker,
            maker_asset=maker_asset,
            taker_asset=taker_asset,
            making_amount=making_amount,
            taking_amount=taking_amount,
            token_reader=token_reader,
        )
        extension = await self._combine_extensions(params, context)

        traits = self.maker_traits.with_extension_slots(
            has_extension=not extension.is_empty(),
            has_pre=bool(extension.pre_interaction),
            has_post=bool(extension.post_interaction),
        )
        order = Order(
            salt=build_salt(extension, self.salt_base),
            maker=maker,
            receiver=self.receiver or maker,
            maker_asset=maker_asset,
            taker_asset=taker_asset,
            making_amount=making_amount,
            taking_amount=taking_amount,
            maker_traits=traits.as_int(),
        )
        order_hash = order.hash(self.chain_id, self.verifying_contract)
        signature = await signer.sign(order_hash)
        logger.info("Order signed: 0x%s", order_hash.hex())
        return SignedOrder(order=order, signature=signature, extension=extension, order_hash=order_hash)
