"""
Tests for the Solana JSON-RPC client.

Requests are served by httpx.MockTransport, so these exercise the real
request encoding and response handling without network access.
"""

import base64
import json

import httpx
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st
from solders.pubkey import Pubkey

from name_resolver.exceptions import RpcError, TransportError
from name_resolver.rpc_client import MAX_MULTIPLE_ACCOUNTS, RpcClient

from fake_chain import run_async


RPC_URL = "https://rpc.example.test"


def account_value(data: bytes) -> dict:
    return {
        "data": [base64.b64encode(data).decode("ascii"), "base64"],
        "executable": False,
        "lamports": 1_000_000,
        "owner": "namesLPneVptA9Z5rqUDD9tMTWEJwofgaYwp8cawRkX",
        "rentEpoch": 0,
    }


def rpc_result(request: httpx.Request, value) -> httpx.Response:
    body = json.loads(request.content)
    return httpx.Response(
        200,
        json={"jsonrpc": "2.0", "id": body["id"], "result": {"context": {"slot": 1}, "value": value}},
        request=request,
    )


def make_client(handler) -> RpcClient:
    return RpcClient(RPC_URL, commitment="confirmed", transport=httpx.MockTransport(handler))


async def _call(client: RpcClient, coro_factory):
    async with client:
        return await coro_factory(client)


class TestGetMultipleAccountsProperty:
    """Batch reads keep request order and mark missing accounts as None."""

    @given(present=st.lists(st.booleans(), min_size=1, max_size=250))
    @settings(max_examples=30, deadline=None)
    def test_order_and_missing_accounts_are_preserved(self, present: list[bool]) -> None:
        keys = [Pubkey.new_unique() for _ in present]
        stored = {str(k): bytes(k)[:8] for k, p in zip(keys, present) if p}
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            body = json.loads(request.content)
            requested = body["params"][0]
            calls.append(requested)
            values = [account_value(stored[k]) if k in stored else None for k in requested]
            return rpc_result(request, values)

        payloads = run_async(_call(make_client(handler), lambda c: c.get_multiple_accounts(keys)))

        assert len(payloads) == len(keys)
        for key, is_present, payload in zip(keys, present, payloads):
            if is_present:
                assert payload == bytes(key)[:8]
            else:
                assert payload is None
        assert [k for chunk in calls for k in chunk] == [str(k) for k in keys]
        assert all(len(chunk) <= MAX_MULTIPLE_ACCOUNTS for chunk in calls)

    def test_keys_are_chunked(self) -> None:
        keys = [Pubkey.new_unique() for _ in range(150)]
        sizes = []

        def handler(request: httpx.Request) -> httpx.Response:
            requested = json.loads(request.content)["params"][0]
            sizes.append(len(requested))
            return rpc_result(request, [None] * len(requested))

        payloads = run_async(_call(make_client(handler), lambda c: c.get_multiple_accounts(keys)))
        assert sizes == [100, 50]
        assert payloads == [None] * 150

    def test_request_body(self) -> None:
        key = Pubkey.new_unique()
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen.update(json.loads(request.content))
            return rpc_result(request, [None])

        run_async(_call(make_client(handler), lambda c: c.get_multiple_accounts([key])))
        assert seen["jsonrpc"] == "2.0"
        assert seen["method"] == "getMultipleAccounts"
        assert seen["params"] == [[str(key)], {"encoding": "base64", "commitment": "confirmed"}]

    def test_mismatched_result_length_is_a_parse_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return rpc_result(request, [None])

        keys = [Pubkey.new_unique(), Pubkey.new_unique()]
        with pytest.raises(TransportError) as exc_info:
            run_async(_call(make_client(handler), lambda c: c.get_multiple_accounts(keys)))
        assert exc_info.value.code == "parse_error"


class TestSingleAccountAndTokenReads:
    """getAccountInfo and getTokenLargestAccounts."""

    def test_account_info_returns_data(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return rpc_result(request, account_value(b"registry"))

        data = run_async(_call(make_client(handler), lambda c: c.get_account_info(Pubkey.new_unique())))
        assert data == b"registry"

    def test_missing_account_is_none(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return rpc_result(request, None)

        data = run_async(_call(make_client(handler), lambda c: c.get_account_info(Pubkey.new_unique())))
        assert data is None

    def test_token_largest_accounts(self) -> None:
        holders = [Pubkey.new_unique(), Pubkey.new_unique()]

        def handler(request: httpx.Request) -> httpx.Response:
            assert json.loads(request.content)["method"] == "getTokenLargestAccounts"
            return rpc_result(
                request,
                [{"address": str(h), "amount": "1", "decimals": 0, "uiAmount": 1.0} for h in holders],
            )

        result = run_async(_call(make_client(handler), lambda c: c.get_token_largest_accounts(Pubkey.new_unique())))
        assert result == holders


class TestTransportFailures:
    """Every failure surfaces as a TransportError with its code."""

    def test_json_rpc_error_raises_rpc_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={"jsonrpc": "2.0", "id": 1, "error": {"code": -32602, "message": "Invalid param"}},
                request=request,
            )

        with pytest.raises(RpcError) as exc_info:
            run_async(_call(make_client(handler), lambda c: c.get_token_largest_accounts(Pubkey.new_unique())))
        assert exc_info.value.code == "rpc_error"
        assert exc_info.value.details["rpc_code"] == -32602

    def test_http_error_status(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, text="internal error", request=request)

        with pytest.raises(TransportError) as exc_info:
            run_async(_call(make_client(handler), lambda c: c.get_account_info(Pubkey.new_unique())))
        assert exc_info.value.code == "http_error"
        assert exc_info.value.details["http_status_code"] == 500
        assert not isinstance(exc_info.value, RpcError)

    def test_timeout(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(TransportError) as exc_info:
            run_async(_call(make_client(handler), lambda c: c.get_account_info(Pubkey.new_unique())))
        assert exc_info.value.code == "timeout"

    def test_connection_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(TransportError) as exc_info:
            run_async(_call(make_client(handler), lambda c: c.get_account_info(Pubkey.new_unique())))
        assert exc_info.value.code == "network_error"

    def test_invalid_json(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>oops</html>", request=request)

        with pytest.raises(TransportError) as exc_info:
            run_async(_call(make_client(handler), lambda c: c.get_account_info(Pubkey.new_unique())))
        assert exc_info.value.code == "parse_error"

    def test_invalid_base64_account_data(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return rpc_result(request, {"data": ["not base64!", "base64"]})

        with pytest.raises(TransportError) as exc_info:
            run_async(_call(make_client(handler), lambda c: c.get_account_info(Pubkey.new_unique())))
        assert exc_info.value.code == "parse_error"
