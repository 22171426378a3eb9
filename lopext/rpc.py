"""
lopext JSON-RPC Collaborator

The only network-facing part of the toolkit. It reads token decimals,
executes read-only calls and previews amounts from a deployed calculator by
calling its ``getMakingAmount`` / ``getTakingAmount`` view.
"""

import itertools
import time
from typing import Any, List, Optional, Protocol

import httpx
from eth_abi import decode, encode

from .crypto.address import normalize_address
from .crypto.hashing import function_selector
from .exceptions import RpcError
from .extension import Extension, split_target
from .logger import get_logger
from .order import Order

logger = get_logger(__name__)

ORDER_TUPLE = "(uint256,uint256,uint256,uint256,uint256,uint256,uint256,uint256)"
GET_MAKING_AMOUNT = (
    f"getMakingAmount({ORDER_TUPLE},bytes,bytes32,address,uint256,uint256,bytes)"
)
GET_TAKING_AMOUNT = (
    f"getTakingAmount({ORDER_TUPLE},bytes,bytes32,address,uint256,uint256,bytes)"
)
AMOUNT_GETTER_ARGS = [ORDER_TUPLE, "bytes", "bytes32", "address", "uint256", "uint256", "bytes"]


class TokenReader(Protocol):
    """Reads an asset's decimal precision."""

    async def decimals(self, asset: str) -> int: ...


class RpcClient:
    """
    Minimal async Ethereum JSON-RPC client over httpx.

    Args:
        url: Node endpoint
        timeout: Request timeout in seconds
        client: Shared httpx.AsyncClient; created (and owned) when omitted
    """

    def __init__(self, url: str, timeout: float = 10.0, client: Optional[httpx.AsyncClient] = None):
        self.url = url
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._ids = itertools.count(1)

    @classmethod
    def from_config(cls, network, client: Optional[httpx.AsyncClient] = None) -> "RpcClient":
        return cls(network.rpc_url, timeout=network.timeout, client=client)

    async def __aenter__(self) -> "RpcClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # --- transport --------------------------------------------------------

    async def request(self, method: str, params: List[Any]) -> Any:
        """
        Send one JSON-RPC request and return its result.

        Raises:
            RpcError: On transport failure, HTTP error or a JSON-RPC error object
        """
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        start_time = time.time()
        logger.debug("--> %s", method)
        try:
            response = await self._client.post(self.url, json=payload)
            response.raise_for_status()
            body = response.json()
        except httpx.RequestError as e:
            logger.warning("<-- %s NETWORK_ERROR (%.3fs)", method, time.time() - start_time)
            raise RpcError(f"{method} failed: {e}") from e
        except (httpx.HTTPStatusError, ValueError) as e:
            logger.warning("<-- %s ERROR (%.3fs): %s", method, time.time() - start_time, e)
            raise RpcError(f"{method} failed: {e}") from e

        logger.debug("<-- %s (%.3fs)", method, time.time() - start_time)
        if "error" in body:
            error = body["error"]
            raise RpcError(f"{method} returned error {error.get('code')}: {error.get('message')}")
        return body.get("result")

    # --- collaborator surface --------------------------------------------

    async def chain_id(self) -> int:
        return int(await self.request("eth_chainId", []), 16)

    async def call_view(self, target: str, calldata: bytes, block: str = "latest") -> bytes:
        """Execute a read-only call against `target`."""
        result = await self.request(
            "eth_call",
            [{"to": normalize_address(target), "data": "0x" + calldata.hex()}, block],
        )
        if not isinstance(result, str):
            raise RpcError(f"eth_call returned non-hex result: {result!r}")
        return bytes.fromhex(result[2:] if result.startswith("0x") else result)

    async def decimals(self, asset: str) -> int:
        raw = await self.call_view(asset, function_selector("decimals()"))
        if len(raw) < 32:
            raise RpcError(f"decimals() on {asset} returned {len(raw)} bytes")
        (value,) = decode(["uint8"], raw[:32])
        return value

    # --- amount previews --------------------------------------------------

    async def _preview(
        self,
        signature: str,
        slot_data: bytes,
        order: Order,
        extension: Extension,
        chain_id: int,
        taker: str,
        amount: int,
        remaining_making_amount: Optional[int],
    ) -> int:
        if not slot_data:
            raise RpcError("Extension has no amount data for this direction")
        target, blob = split_target(slot_data)
        if remaining_making_amount is None:
            remaining_making_amount = order.making_amount
        calldata = function_selector(signature) + encode(
            AMOUNT_GETTER_ARGS,
            [
                order.as_tuple(),
                extension.encode(),
                order.hash(chain_id),
                normalize_address(taker),
                amount,
                remaining_making_amount,
                blob,
            ],
        )
        raw = await self.call_view(target, calldata)
        if len(raw) < 32:
            raise RpcError(f"{signature.split('(')[0]} on {target} returned {len(raw)} bytes")
        (value,) = decode(["uint256"], raw[:32])
        return value

    async def preview_making_amount(
        self,
        order: Order,
        extension: Extension,
        chain_id: int,
        taker: str,
        taking_amount: int,
        remaining_making_amount: Optional[int] = None,
    ) -> int:
        """Maker amount the engine will compute for `taking_amount`."""
        return await self._preview(
            GET_MAKING_AMOUNT, extension.making_amount_data, order, extension,
            chain_id, taker, taking_amount, remaining_making_amount,
        )

    async def preview_taking_amount(
        self,
        order: Order,
        extension: Extension,
        chain_id: int,
        taker: str,
        making_amount: int,
        remaining_making_amount: Optional[int] = None,
    ) -> int:
        """Taker amount the engine will compute for `making_amount`."""
        return await self._preview(
            GET_TAKING_AMOUNT, extension.taking_amount_data, order, extension,
            chain_id, taker, making_amount, remaining_making_amount,
        )
