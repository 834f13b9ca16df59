"""
Read-only chain node client (JSON-RPC over httpx).

Bytecode, native balance, nonce and view-function calls against a BSC node.
Every method raises SourceUnavailable on transport, RPC or decode failure;
callers wrap calls with bounded() and treat failures as 'no data'.
"""

from __future__ import annotations

from typing import Any

import httpx
from eth_abi.abi import decode
from eth_utils import to_checksum_address

from backend_brief.brief_logging import get_logger
from backend_brief.core.exceptions import SourceUnavailable

logger = get_logger(__name__)

SOURCE_ID = "bsc_rpc"

# 4-byte selectors of the view functions we read
SELECTOR_NAME = "0x06fdde03"
SELECTOR_SYMBOL = "0x95d89b41"
SELECTOR_DECIMALS = "0x313ce567"
SELECTOR_TOTAL_SUPPLY = "0x18160ddd"
SELECTOR_OWNER = "0x8da5cb5b"

WEI_PER_NATIVE = 10**18


def _hex_to_bytes(value: str) -> bytes:
    v = value[2:] if value.startswith("0x") else value
    return bytes.fromhex(v)


class ChainReader:
    """Thin async JSON-RPC client. Shares the caller's httpx.AsyncClient."""

    def __init__(self, client: httpx.AsyncClient, rpc_url: str, *, timeout: float = 8.0) -> None:
        self.client = client
        self.rpc_url = rpc_url
        self.timeout = timeout
        self._next_id = 0

    async def _rpc(self, method: str, params: list[Any]) -> Any:
        self._next_id += 1
        body = {"jsonrpc": "2.0", "id": self._next_id, "method": method, "params": params}
        try:
            r = await self.client.post(self.rpc_url, json=body, timeout=self.timeout)
            r.raise_for_status()
            data = r.json()
        except (httpx.HTTPError, ValueError) as e:
            raise SourceUnavailable(SOURCE_ID, f"{method}: {e}") from e
        if not isinstance(data, dict):
            raise SourceUnavailable(SOURCE_ID, f"{method}: malformed response")
        if data.get("error"):
            raise SourceUnavailable(SOURCE_ID, f"{method}: {data['error']}")
        if "result" not in data:
            raise SourceUnavailable(SOURCE_ID, f"{method}: missing result")
        return data["result"]

    async def get_code(self, address: str) -> str:
        """Bytecode hex at address. '0x' means no code (externally owned account)."""
        result = await self._rpc("eth_getCode", [address, "latest"])
        if not isinstance(result, str):
            raise SourceUnavailable(SOURCE_ID, "eth_getCode: non-string result")
        return result.lower()

    async def is_contract(self, address: str) -> bool:
        code = await self.get_code(address)
        return code not in ("", "0x")

    async def get_balance(self, address: str) -> int:
        """Native balance in wei."""
        result = await self._rpc("eth_getBalance", [address, "latest"])
        try:
            return int(result, 16)
        except (TypeError, ValueError) as e:
            raise SourceUnavailable(SOURCE_ID, f"eth_getBalance: {result!r}") from e

    async def get_nonce(self, address: str) -> int:
        result = await self._rpc("eth_getTransactionCount", [address, "latest"])
        try:
            return int(result, 16)
        except (TypeError, ValueError) as e:
            raise SourceUnavailable(SOURCE_ID, f"eth_getTransactionCount: {result!r}") from e

    async def call(self, address: str, data: str) -> bytes:
        """eth_call with raw calldata. Empty return data (revert / no function) raises."""
        result = await self._rpc("eth_call", [{"to": address, "data": data}, "latest"])
        if not isinstance(result, str):
            raise SourceUnavailable(SOURCE_ID, "eth_call: non-string result")
        raw = _hex_to_bytes(result)
        if not raw:
            raise SourceUnavailable(SOURCE_ID, f"eth_call {data}: empty return data")
        return raw

    async def call_string(self, address: str, selector: str) -> str:
        raw = await self.call(address, selector)
        try:
            (value,) = decode(["string"], raw)
            return value
        except Exception:
            # Some early tokens return bytes32 for name()/symbol()
            if len(raw) == 32:
                return raw.rstrip(b"\x00").decode("utf-8", errors="ignore")
            raise SourceUnavailable(SOURCE_ID, f"eth_call {selector}: undecodable string")

    async def call_uint(self, address: str, selector: str) -> int:
        raw = await self.call(address, selector)
        try:
            (value,) = decode(["uint256"], raw)
        except Exception as e:
            raise SourceUnavailable(SOURCE_ID, f"eth_call {selector}: {e}") from e
        return int(value)

    async def call_address(self, address: str, selector: str) -> str:
        raw = await self.call(address, selector)
        try:
            (value,) = decode(["address"], raw)
        except Exception as e:
            raise SourceUnavailable(SOURCE_ID, f"eth_call {selector}: {e}") from e
        return to_checksum_address(value)
