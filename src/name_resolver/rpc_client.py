"""
Solana JSON-RPC client for account retrieval.

This module provides an async client over httpx for the three RPC calls
the resolver needs: single account reads, ordered batch account reads and
token largest-account lookups. Failures are raised as TransportError;
nothing is retried at this layer.
"""

import base64
import itertools
from typing import Any, Optional, Sequence

import httpx
from solders.pubkey import Pubkey

from .enums import TransportErrorCode
from .exceptions import RpcError, TransportError


# getMultipleAccounts accepts at most this many keys per call
MAX_MULTIPLE_ACCOUNTS = 100


class RpcClient:
    """
    Async Solana JSON-RPC client.

    Usable as an async context manager; outside one, the underlying HTTP
    client is created lazily on first request and must be closed with
    close().
    """

    def __init__(
        self,
        url: str,
        commitment: str = "processed",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize the RPC client.

        Args:
            url: JSON-RPC endpoint URL
            commitment: Commitment level sent with every read
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self._url = url
        self._commitment = commitment
        self._timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._ids = itertools.count(1)

    async def __aenter__(self) -> "RpcClient":
        self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    @property
    def url(self) -> str:
        return self._url

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout),
                transport=self._transport,
            )
        return self._client

    async def call(self, method: str, params: list) -> Any:
        """
        Perform one JSON-RPC call and return its ``result`` member.

        Raises:
            TransportError: On timeouts, connection failures, non-2xx
                responses or undecodable bodies
            RpcError: If the node answers with a JSON-RPC error object
        """
        client = self._ensure_client()
        request = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params,
        }

        try:
            response = await client.post(self._url, json=request)
        except httpx.TimeoutException as e:
            raise TransportError(
                code=TransportErrorCode.TIMEOUT.value,
                message=f"RPC request timed out after {self._timeout}s",
                details={"method": method},
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(
                code=TransportErrorCode.NETWORK_ERROR.value,
                message=f"RPC connection error: {e}",
                details={"method": method},
            ) from e

        if response.status_code < 200 or response.status_code >= 300:
            raise TransportError(
                code=TransportErrorCode.HTTP_ERROR.value,
                message=f"RPC request failed with HTTP {response.status_code}",
                details={"method": method, "http_status_code": response.status_code},
            )

        try:
            body = response.json()
        except ValueError as e:
            raise TransportError(
                code=TransportErrorCode.PARSE_ERROR.value,
                message=f"RPC response is not valid JSON: {e}",
                details={"method": method},
            ) from e

        if not isinstance(body, dict):
            raise TransportError(
                code=TransportErrorCode.PARSE_ERROR.value,
                message="RPC response is not a JSON object",
                details={"method": method},
            )

        error = body.get("error")
        if error is not None:
            error = error if isinstance(error, dict) else {"message": str(error)}
            raise RpcError(
                code=TransportErrorCode.RPC_ERROR.value,
                message=f"RPC error: {error.get('message', 'unknown error')}",
                details={"method": method, "rpc_code": error.get("code")},
            )

        if "result" not in body:
            raise TransportError(
                code=TransportErrorCode.PARSE_ERROR.value,
                message="RPC response has neither result nor error",
                details={"method": method},
            )
        return body["result"]

    async def get_account_info(self, key: Pubkey) -> Optional[bytes]:
        """Fetch one account's data, or None if the account does not exist."""
        result = await self.call(
            "getAccountInfo",
            [str(key), {"encoding": "base64", "commitment": self._commitment}],
        )
        return self._decode_account(self._value_of(result, "getAccountInfo"))

    async def get_multiple_accounts(self, keys: Sequence[Pubkey]) -> list[Optional[bytes]]:
        """
        Fetch many accounts' data.

        The returned list has the same length and order as ``keys``;
        missing accounts are None.
        """
        payloads: list[Optional[bytes]] = []
        for start in range(0, len(keys), MAX_MULTIPLE_ACCOUNTS):
            chunk = keys[start:start + MAX_MULTIPLE_ACCOUNTS]
            result = await self.call(
                "getMultipleAccounts",
                [
                    [str(key) for key in chunk],
                    {"encoding": "base64", "commitment": self._commitment},
                ],
            )
            values = self._value_of(result, "getMultipleAccounts")
            if not isinstance(values, list) or len(values) != len(chunk):
                raise TransportError(
                    code=TransportErrorCode.PARSE_ERROR.value,
                    message="getMultipleAccounts returned a mismatched account list",
                    details={"requested": len(chunk)},
                )
            payloads.extend(self._decode_account(value) for value in values)
        return payloads

    async def get_token_largest_accounts(self, mint: Pubkey) -> list[Pubkey]:
        """Token accounts of a mint, largest balance first."""
        result = await self.call(
            "getTokenLargestAccounts",
            [str(mint), {"commitment": self._commitment}],
        )
        values = self._value_of(result, "getTokenLargestAccounts") or []
        try:
            return [Pubkey.from_string(item["address"]) for item in values]
        except (KeyError, TypeError, ValueError) as e:
            raise TransportError(
                code=TransportErrorCode.PARSE_ERROR.value,
                message=f"Malformed getTokenLargestAccounts response: {e}",
            ) from e

    def _value_of(self, result: Any, method: str) -> Any:
        if not isinstance(result, dict) or "value" not in result:
            raise TransportError(
                code=TransportErrorCode.PARSE_ERROR.value,
                message=f"{method} result has no value",
                details={"method": method},
            )
        return result["value"]

    def _decode_account(self, value: Any) -> Optional[bytes]:
        """Decode the base64 data of an account, None for a missing account."""
        if value is None:
            return None
        try:
            encoded, encoding = value["data"]
            if encoding != "base64":
                raise ValueError(f"unexpected encoding {encoding!r}")
            return base64.b64decode(encoded, validate=True)
        except (KeyError, TypeError, ValueError) as e:
            raise TransportError(
                code=TransportErrorCode.PARSE_ERROR.value,
                message=f"Malformed account data: {e}",
            ) from e

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
