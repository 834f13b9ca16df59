"""
Pytest fixtures for Backend Brief tests.

In-memory fakes for the chain reader and every provider adapter, so analytics
modules and the pipeline run without network. Fakes mirror the adapter
contract: return data, return None when 'not configured', or raise
SourceUnavailable.
"""

from __future__ import annotations

from typing import Any

import pytest

from backend_brief.chain_reader.client import (
    SELECTOR_DECIMALS,
    SELECTOR_NAME,
    SELECTOR_OWNER,
    SELECTOR_SYMBOL,
    SELECTOR_TOTAL_SUPPLY,
)
from backend_brief.config.settings import BriefSettings
from backend_brief.core.exceptions import NarrativeDegraded, SourceUnavailable
from backend_brief.providers import ProviderSet
from backend_brief.providers.moralis import OwnersPage, TokenOwner, TokenTransfer, TransferPage

TOKEN = "0x" + "ab" * 20
WALLET = "0x" + "cd" * 20


def addr(n: int) -> str:
    """Deterministic distinct address for test fixtures."""
    return "0x" + f"{n:040x}"


class FakeChain:
    """ChainReader stand-in. code maps address -> bytecode; missing means '0x'."""

    def __init__(
        self,
        code: dict[str, str] | None = None,
        balance: int | None = 10**18,
        nonce: int | None = 12,
        calls: dict[str, Any] | None = None,
        down: bool = False,
    ) -> None:
        self.code = {k.lower(): v for k, v in (code or {}).items()}
        self.balance = balance
        self.nonce = nonce
        self.calls = calls or {}
        self.down = down
        self.code_reads: list[str] = []

    def _check(self, method: str) -> None:
        if self.down:
            raise SourceUnavailable("bsc_rpc", f"{method}: connection refused")

    async def get_code(self, address: str) -> str:
        self._check("eth_getCode")
        self.code_reads.append(address.lower())
        return self.code.get(address.lower(), "0x")

    async def is_contract(self, address: str) -> bool:
        return (await self.get_code(address)) not in ("", "0x")

    async def get_balance(self, address: str) -> int:
        self._check("eth_getBalance")
        if self.balance is None:
            raise SourceUnavailable("bsc_rpc", "eth_getBalance: error")
        return self.balance

    async def get_nonce(self, address: str) -> int:
        self._check("eth_getTransactionCount")
        if self.nonce is None:
            raise SourceUnavailable("bsc_rpc", "eth_getTransactionCount: error")
        return self.nonce

    def _call(self, selector: str) -> Any:
        self._check("eth_call")
        if selector not in self.calls:
            raise SourceUnavailable("bsc_rpc", f"eth_call {selector}: empty return data")
        return self.calls[selector]

    async def call_string(self, address: str, selector: str) -> str:
        return self._call(selector)

    async def call_uint(self, address: str, selector: str) -> int:
        return self._call(selector)

    async def call_address(self, address: str, selector: str) -> str:
        return self._call(selector)


class FakeDex:
    configured = True

    def __init__(self, pair=None, fail: bool = False) -> None:
        self.pair = pair
        self.fail = fail

    async def best_pair(self, token: str):
        if self.fail:
            raise SourceUnavailable("dexscreener", "HTTP 503")
        return self.pair


class FakeMoralis:
    def __init__(
        self,
        configured: bool = False,
        owners: list[str] | None = None,
        transfer_pages: list[list[tuple[str, str]]] | None = None,
        metadata: dict[str, Any] | None = None,
        fail: bool = False,
    ) -> None:
        self.configured = configured
        self.owners = owners or []
        self.transfer_pages = transfer_pages or []
        self.metadata = metadata
        self.fail = fail
        self.pages_read = 0
        self.answered = False

    def _reply(self) -> None:
        if self.fail:
            raise SourceUnavailable("moralis", "HTTP 503")
        self.answered = True

    async def token_owners(self, token, *, limit=100, order="DESC", cursor=None):
        if not self.configured:
            return None
        self._reply()
        return OwnersPage(owners=[TokenOwner(owner_address=o) for o in self.owners[:limit]])

    async def token_transfers(self, token, *, limit=100, order="ASC", cursor=None):
        if not self.configured:
            return None
        self._reply()
        idx = int(cursor or 0)
        if idx >= len(self.transfer_pages):
            return TransferPage()
        self.pages_read += 1
        rows = [TokenTransfer(from_address=src, to_address=dst) for src, dst in self.transfer_pages[idx]]
        next_cursor = str(idx + 1) if idx + 1 < len(self.transfer_pages) else None
        return TransferPage(transfers=rows, cursor=next_cursor)

    async def token_metadata(self, token):
        if not self.configured:
            return None
        self._reply()
        return self.metadata


class FakeFrontrun:
    def __init__(self, configured: bool = False, profiles=None, alt_wallets=None, default_profile=None) -> None:
        self.configured = configured
        self.profiles = {k.lower(): v for k, v in (profiles or {}).items()}
        self.alt = alt_wallets
        self.default_profile = default_profile

    def profile_url(self, address: str) -> str:
        return f"https://fr.test/api/v2/wallet/metadata/BSC/{address}"

    async def wallet_metadata(self, address, *, timeout=None):
        if not self.configured:
            return None
        return self.profiles.get(address.lower(), self.default_profile)

    async def alt_wallets(self, address):
        if not self.configured:
            return None
        return self.alt


class FakeValue:
    """Single-method source returning a fixed value (None = not configured)."""

    def __init__(self, value=None, fail: bool = False, source: str = "fake") -> None:
        self.value = value
        self.fail = fail
        self.source = source
        self.configured = value is not None or fail

    async def _get(self):
        if self.fail:
            raise SourceUnavailable(self.source, "HTTP 500")
        return self.value


class FakeMemeRadar(FakeValue):
    async def wallet_tags(self, wallet, contract=None):
        return await self._get()


class FakeArkham(FakeValue):
    async def address_enriched(self, address):
        return await self._get()


class FakeBscScan(FakeValue):
    async def address_summary(self, address, *, now=None):
        return await self._get()


class FakeGmgn:
    def __init__(self, portfolio=None, trades=None) -> None:
        self.portfolio = portfolio
        self.trades = trades
        self.configured = portfolio is not None or trades is not None

    async def wallet_holdings(self, wallet, *, limit=60):
        return self.portfolio

    async def token_trades(self, token, *, limit=80):
        return self.trades


class FakeLlm:
    def __init__(self, reply: str | None = None, configured: bool | None = None, fail: bool = False) -> None:
        self.reply = reply
        self.fail = fail
        self.configured = configured if configured is not None else (reply is not None or fail)
        self.prompts: list[str] = []

    async def complete_json(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.fail:
            raise SourceUnavailable("openrouter", "HTTP 502")
        if self.reply is None:
            raise NarrativeDegraded("llm not configured")
        return self.reply


def build_providers(**overrides: Any) -> ProviderSet:
    """ProviderSet of fakes; every source defaults to 'not configured'."""
    parts = {
        "dexscreener": FakeDex(),
        "moralis": FakeMoralis(),
        "frontrun": FakeFrontrun(),
        "memeradar": FakeMemeRadar(source="memeradar"),
        "arkham": FakeArkham(source="arkham"),
        "gmgn": FakeGmgn(),
        "bscscan": FakeBscScan(source="bscscan"),
        "llm": FakeLlm(),
    }
    parts.update(overrides)
    return ProviderSet(**parts)


def token_calls(name="Test Token", symbol="TST", decimals=18, supply=10**24, owner=None) -> dict[str, Any]:
    calls: dict[str, Any] = {
        SELECTOR_NAME: name,
        SELECTOR_SYMBOL: symbol,
        SELECTOR_DECIMALS: decimals,
        SELECTOR_TOTAL_SUPPLY: supply,
    }
    if owner is not None:
        calls[SELECTOR_OWNER] = owner
    return calls


@pytest.fixture
def settings() -> BriefSettings:
    """Default settings: public RPC placeholder, no provider keys."""
    return BriefSettings(rpc_url="http://rpc.test")


@pytest.fixture
def token_chain() -> FakeChain:
    """Chain with TOKEN deployed as an ERC20 and WALLET as an EOA."""
    return FakeChain(code={TOKEN: "0x6080604052"}, calls=token_calls())
