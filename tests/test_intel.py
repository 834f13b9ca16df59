"""
Tests for the intel fan-out: per-source isolation, source_status, findings and evidence.
"""

from __future__ import annotations

import asyncio

from conftest import (
    TOKEN,
    WALLET,
    FakeArkham,
    FakeBscScan,
    FakeFrontrun,
    FakeGmgn,
    FakeMemeRadar,
    build_providers,
)

from backend_brief.analytics.intel import entity_is_risky, run_intel
from backend_brief.analytics.models import (
    KIND_CONTRACT,
    KIND_WALLET,
    EntityIntel,
    ExplorerActivity,
    Holding,
    LabelProfile,
    LedgerSection,
    Portfolio,
    Target,
    TokenStat,
    Trade,
    TradeSample,
)


def _run(target, providers, settings, locale="en"):
    section = LedgerSection(module="intel")
    intel = asyncio.run(run_intel(target, providers, settings, section, locale))
    return intel, section


def test_entity_is_risky():
    assert entity_is_risky("mixer")
    assert entity_is_risky("known-scammer")
    assert not entity_is_risky("cex")
    assert not entity_is_risky(None)


def test_nothing_configured(settings):
    intel, section = _run(Target(address=WALLET, kind=KIND_WALLET), build_providers(), settings)
    assert all(v == "none" for v in intel.source_status.values())
    assert section.findings == []
    assert section.evidence == []
    assert intel.to_dict() == {}


def test_wallet_all_sources(settings):
    """Every source answering contributes findings and provenance evidence."""
    profile = LabelProfile(
        primary_label="Whale 7",
        verified=True,
        token_stats=[TokenStat(token_symbol="CAKE", pnl_usd=1200.0), TokenStat(token_symbol="X", pnl_usd=-5.0)],
    )
    portfolio = Portfolio(holdings=[
        Holding(token_symbol="A", realized_profit_usd=3.0, wallet_tags=["sniper"]),
        Holding(token_symbol="B", total_profit_usd=-1.0),
    ])
    providers = build_providers(
        frontrun=FakeFrontrun(configured=True, default_profile=profile, alt_wallets=["0x1", "0x2"]),
        memeradar=FakeMemeRadar(["Smart Money", "Early Buyer"]),
        arkham=FakeArkham(EntityIntel(entity_name="Tornado", entity_type="mixer", tags=["privacy"])),
        gmgn=FakeGmgn(portfolio=portfolio),
        bscscan=FakeBscScan(ExplorerActivity(tx_count_24h=3, token_transfer_count_24h=1)),
    )
    intel, section = _run(Target(address=WALLET, kind=KIND_WALLET), providers, settings)

    assert intel.source_status == {
        "frontrun": "api", "memeradar": "api", "arkham": "api", "gmgn": "api", "bscscan": "api",
    }
    texts = [f.text for f in section.findings]
    assert "External profile label: Whale 7" in texts
    assert "Past active asset: CAKE (PnL≈$1,200)" in texts
    assert "Detected 2 potential related addresses" in texts
    assert "External tags: Smart Money, Early Buyer" in texts
    assert "Arkham marks this address as high-risk type: mixer" in texts
    assert "GMGN portfolio profile: 2 holdings, 1 profitable" in texts
    assert "GMGN wallet tags: sniper" in texts
    assert "BscScan activity (24h): 3 txs, 1 token transfers" in texts
    labels = [e.label for e in section.evidence]
    assert labels == ["Address Label Source", "Arkham", "GMGN"]
    assert intel.alt_wallet_count == 2
    assert intel.profitable_position_count == 1


def test_one_failure_does_not_affect_others(settings):
    """A failing source is 'none'; the rest still report."""
    providers = build_providers(
        memeradar=FakeMemeRadar(fail=True, source="memeradar"),
        arkham=FakeArkham(EntityIntel(label_name="Binance 14", entity_type="cex")),
    )
    intel, section = _run(Target(address=WALLET, kind=KIND_WALLET), providers, settings)
    assert intel.status("memeradar") == "none"
    assert intel.status("arkham") == "api"
    assert [f.text for f in section.findings] == ["Arkham label: Binance 14"]


def test_contract_uses_trade_sample(settings):
    """Contracts get the trade sample, not the wallet portfolio."""
    trades = TradeSample(trades=[
        Trade(maker="0x" + "11" * 20), Trade(maker="0x" + "11" * 20), Trade(maker="0x" + "22" * 20), Trade(maker="bad"),
    ])
    gmgn = FakeGmgn(portfolio=Portfolio(holdings=[Holding()]), trades=trades)
    intel, section = _run(Target(address=TOKEN, kind=KIND_CONTRACT), build_providers(gmgn=gmgn), settings)
    assert intel.portfolio is None
    assert intel.trade_sample is trades
    assert section.findings[0].text == "GMGN trade sample: 4 trades, 2 unique makers"
    assert section.evidence[0].label == "GMGN Token"


def test_quiet_explorer_activity_has_no_finding(settings):
    providers = build_providers(bscscan=FakeBscScan(ExplorerActivity()))
    intel, section = _run(Target(address=WALLET, kind=KIND_WALLET), providers, settings)
    assert intel.status("bscscan") == "api"
    assert section.findings == []
    assert intel.to_dict()["bscscan"]["txCount24h"] == 0
