"""
JSON-RPC collaborator tests (httpx.MockTransport, no network).

Run with:
    pytest tests/test_rpc.py -v
"""

import json

import httpx
import pytest
from eth_abi import decode, encode

from lopext.config import NetworkConfig
from lopext.crypto import function_selector
from lopext.exceptions import RpcError
from lopext.extension import Extension
from lopext.order import Order, build_salt
from lopext.rpc import AMOUNT_GETTER_ARGS, GET_MAKING_AMOUNT, GET_TAKING_AMOUNT, RpcClient

URL = "http://node.test"
TOKEN = "0x" + "0c" * 20
CALCULATOR = "0x" + "ca" * 20
MAKER = "0x" + "01" * 20
TAKER = "0x" + "99" * 20


def client_for(handler):
    transport = httpx.MockTransport(handler)
    return RpcClient(URL, client=httpx.AsyncClient(transport=transport))


def result(request, value):
    body = json.loads(request.content)
    return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": value})


def word(value):
    return "0x" + encode(["uint256"], [value]).hex()


def make_order_and_extension(blob=b"\x42" * 64):
    data = bytes.fromhex(CALCULATOR[2:]) + blob
    extension = Extension(making_amount_data=data, taking_amount_data=data)
    order = Order(
        salt=build_salt(extension, base=0),
        maker=MAKER,
        receiver=MAKER,
        maker_asset=TOKEN,
        taker_asset="0x" + "0d" * 20,
        making_amount=1000,
        taking_amount=2000,
        maker_traits=1 << 249,
    )
    return order, extension


class TestTransport:

    @pytest.mark.asyncio
    async def test_chain_id(self):
        requests = []

        def handler(request):
            requests.append(json.loads(request.content))
            return result(request, "0x89")

        async with client_for(handler) as rpc:
            assert await rpc.chain_id() == 137
        assert requests[0]["method"] == "eth_chainId"
        assert requests[0]["jsonrpc"] == "2.0"

    @pytest.mark.asyncio
    async def test_request_ids_increment(self):
        ids = []

        def handler(request):
            ids.append(json.loads(request.content)["id"])
            return result(request, "0x1")

        async with client_for(handler) as rpc:
            await rpc.chain_id()
            await rpc.chain_id()
        assert ids == [1, 2]

    @pytest.mark.asyncio
    async def test_error_object(self):
        def handler(request):
            return httpx.Response(200, json={
                "jsonrpc": "2.0", "id": 1, "error": {"code": 3, "message": "execution reverted"},
            })

        async with client_for(handler) as rpc:
            with pytest.raises(RpcError, match="execution reverted"):
                await rpc.chain_id()

    @pytest.mark.asyncio
    async def test_http_error(self):
        async with client_for(lambda request: httpx.Response(502, text="bad gateway")) as rpc:
            with pytest.raises(RpcError, match="eth_chainId failed"):
                await rpc.chain_id()

    @pytest.mark.asyncio
    async def test_network_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with client_for(handler) as rpc:
            with pytest.raises(RpcError, match="connection refused"):
                await rpc.chain_id()

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        async with client_for(lambda request: httpx.Response(200, text="not json")) as rpc:
            with pytest.raises(RpcError):
                await rpc.chain_id()

    def test_from_config(self):
        rpc = RpcClient.from_config(NetworkConfig(rpc_url=URL, timeout=2.0))
        assert rpc.url == URL


class TestTokenDecimals:

    @pytest.mark.asyncio
    async def test_decimals(self):
        seen = {}

        def handler(request):
            body = json.loads(request.content)
            seen.update(body["params"][0])
            return result(request, word(6))

        async with client_for(handler) as rpc:
            assert await rpc.decimals(TOKEN) == 6
        assert seen["to"] == TOKEN
        assert seen["data"] == "0x313ce567"

    @pytest.mark.asyncio
    async def test_short_result(self):
        async with client_for(lambda request: result(request, "0x")) as rpc:
            with pytest.raises(RpcError, match="returned 0 bytes"):
                await rpc.decimals(TOKEN)


class TestAmountPreview:

    @pytest.mark.asyncio
    async def test_making_amount_call(self):
        order, extension = make_order_and_extension()
        calls = []

        def handler(request):
            call = json.loads(request.content)["params"][0]
            calls.append(call)
            return result(request, word(777))

        async with client_for(handler) as rpc:
            amount = await rpc.preview_making_amount(order, extension, 1, TAKER, 500)
        assert amount == 777
        assert calls[0]["to"] == CALCULATOR
        calldata = bytes.fromhex(calls[0]["data"][2:])
        assert calldata[:4] == function_selector(GET_MAKING_AMOUNT)
        args = decode(AMOUNT_GETTER_ARGS, calldata[4:])
        assert args[0] == order.as_tuple()
        assert args[1] == extension.encode()
        assert args[2] == order.hash(1)
        assert args[3] == TAKER
        assert args[4] == 500
        assert args[5] == order.making_amount
        assert args[6] == b"\x42" * 64

    @pytest.mark.asyncio
    async def test_taking_amount_with_remaining(self):
        order, extension = make_order_and_extension()
        captured = []

        def handler(request):
            captured.append(bytes.fromhex(json.loads(request.content)["params"][0]["data"][2:]))
            return result(request, word(1))

        async with client_for(handler) as rpc:
            await rpc.preview_taking_amount(order, extension, 1, TAKER, 10, remaining_making_amount=400)
        assert captured[0][:4] == function_selector(GET_TAKING_AMOUNT)
        assert decode(AMOUNT_GETTER_ARGS, captured[0][4:])[5] == 400

    @pytest.mark.asyncio
    async def test_missing_amount_data(self):
        order, _ = make_order_and_extension()
        async with client_for(lambda request: result(request, word(1))) as rpc:
            with pytest.raises(RpcError, match="no amount data"):
                await rpc.preview_making_amount(order, Extension(), 1, TAKER, 1)
