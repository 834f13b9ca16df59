"""
Tests for contract introspection (token metadata, owner checks) and wallet heuristics.
"""

from __future__ import annotations

import asyncio
import json

import httpx
from conftest import TOKEN, WALLET, FakeChain, token_calls
from eth_abi import encode

from backend_brief.analytics.contract_introspector import format_units, introspect_contract
from backend_brief.analytics.models import KIND_CONTRACT, KIND_WALLET, LedgerSection, Target
from backend_brief.chain_reader.client import (
    SELECTOR_DECIMALS,
    SELECTOR_NAME,
    SELECTOR_SYMBOL,
    SELECTOR_TOTAL_SUPPLY,
    ChainReader,
)
from backend_brief.utils.address_utils import ZERO_ADDRESS

OWNER = "0x" + "Ee" * 20


def _introspect(target, chain, settings, locale="en"):
    section = LedgerSection(module="contract")
    facts = asyncio.run(introspect_contract(target, chain, settings, section, locale))
    return facts, section


def test_format_units():
    assert format_units(10**24, 18) == "1000000"
    assert format_units(1_500_000, 6) == "1.5"
    assert format_units(42, 0) == "42"


def test_token_with_live_owner(settings):
    """Token metadata is read and a non-zero owner yields a warning plus evidence."""
    chain = FakeChain(code={TOKEN: "0x60"}, calls=token_calls(owner=OWNER))
    facts, section = _introspect(Target(address=TOKEN, kind=KIND_CONTRACT), chain, settings)
    assert facts.symbol == "TST"
    assert facts.name == "Test Token"
    assert facts.decimals == 18
    assert facts.total_supply == "1000000"
    assert facts.owner_address == OWNER
    assert section.findings[0].text == "Detected token contract: TST (Test Token)"
    assert section.findings[1].severity == "warning"
    assert section.evidence[0].label == "Owner"
    assert section.evidence[0].value.startswith("0xEeEe")


def test_renounced_owner(settings):
    chain = FakeChain(calls=token_calls(owner=ZERO_ADDRESS))
    facts, section = _introspect(Target(address=TOKEN, kind=KIND_CONTRACT), chain, settings)
    assert facts.owner_address is None
    assert section.findings[-1].severity == "success"
    assert section.evidence == []


def test_non_token_contract(settings):
    """Every view call failing still produces a generic contract finding."""
    facts, section = _introspect(Target(address=TOKEN, kind=KIND_CONTRACT), FakeChain(calls={}), settings)
    assert facts.to_dict() == {}
    assert len(section.findings) == 1
    assert "may not be ERC20" in section.findings[0].text


def test_supply_without_decimals_is_skipped(settings):
    calls = token_calls()
    del calls["0x313ce567"]
    facts, _ = _introspect(Target(address=TOKEN, kind=KIND_CONTRACT), FakeChain(calls=calls), settings)
    assert facts.decimals is None
    assert facts.total_supply is None


def test_wallet_heuristics(settings):
    fresh = Target(address=WALLET, kind=KIND_WALLET, native_balance=0.0, nonce=0)
    _, section = _introspect(fresh, FakeChain(), settings)
    texts = [f.text for f in section.findings]
    assert "Low BNB balance" in texts
    assert "No transactions (likely new address)" in texts

    busy = Target(address=WALLET, kind=KIND_WALLET, native_balance=5.0, nonce=9000)
    _, busy_section = _introspect(busy, FakeChain(), settings)
    assert [f.text for f in busy_section.findings] == ["High transaction count (active address)"]


def test_wallet_unknown_balance_no_finding(settings):
    """A failed balance / nonce read is unknown, not zero."""
    unknown = Target(address=WALLET, kind=KIND_WALLET)
    _, section = _introspect(unknown, FakeChain(), settings)
    assert section.findings == []


def test_out_of_range_decimals_left_unknown(settings):
    """decimals() above uint8 range leaves decimals and total supply unknown."""
    chain = FakeChain(calls=token_calls(decimals=2**62))
    facts, section = _introspect(Target(address=TOKEN, kind=KIND_CONTRACT), chain, settings)
    assert facts.decimals is None
    assert facts.total_supply is None
    assert facts.symbol == "TST"
    assert section.findings[0].text == "Detected token contract: TST (Test Token)"


def test_huge_decimals_over_rpc_returns_promptly(settings):
    """A real ChainReader decoding a 2**62 decimals() answer finishes well inside a second."""

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        data = body["params"][0]["data"]
        result = {
            SELECTOR_NAME: "0x" + encode(["string"], ["Bomb"]).hex(),
            SELECTOR_SYMBOL: "0x" + encode(["string"], ["BOMB"]).hex(),
            SELECTOR_DECIMALS: "0x" + encode(["uint256"], [2**62]).hex(),
            SELECTOR_TOTAL_SUPPLY: "0x" + encode(["uint256"], [10**30]).hex(),
        }.get(data, "0x")
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})

    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            chain = ChainReader(client, settings.rpc_url)
            section = LedgerSection(module="contract")
            target = Target(address=TOKEN, kind=KIND_CONTRACT)
            return await asyncio.wait_for(introspect_contract(target, chain, settings, section, "en"), 5.0)

    facts = asyncio.run(run())
    assert facts.symbol == "BOMB"
    assert facts.decimals is None
    assert facts.total_supply is None
