"""
Tests for the additive risk score (risk_engine.compute_risk_score and its terms).

Pure functions: inputs are built directly from model dataclasses.
"""

from __future__ import annotations

import itertools
import math

from backend_brief.analytics.models import (
    KIND_CONTRACT,
    KIND_WALLET,
    EntityIntel,
    HolderCluster,
    Holding,
    IntelFacts,
    MarketFacts,
    Portfolio,
    Target,
)
from backend_brief.analytics.risk_engine import (
    BASE_SCORE,
    SCORE_TERMS,
    ScoreInputs,
    alt_wallet_term,
    bundle_term,
    clamp_score,
    compute_risk_score,
    entity_term,
    fdv_term,
    liquidity_term,
    portfolio_term,
)

TOKEN = "0x" + "ab" * 20


def _inputs(kind=KIND_CONTRACT, market=None, intel=None, cluster=None) -> ScoreInputs:
    return ScoreInputs(
        target=Target(address=TOKEN, kind=kind),
        market=market or MarketFacts(),
        intel=intel or IntelFacts(),
        holder_cluster=cluster,
    )


def test_low_liquidity_high_fdv_scenario():
    """$4,000 liquidity / $2,000,000 FDV: +32 liquidity and +18 FDV on top of contract +18."""
    x = _inputs(market=MarketFacts(liquidity_usd=4_000, fdv_usd=2_000_000, source_status="api"))
    assert liquidity_term(x) == 32
    assert fdv_term(x) == 18
    assert compute_risk_score(x) == BASE_SCORE + 18 + 32 + 18


def test_liquidity_bands():
    assert liquidity_term(_inputs(market=MarketFacts(liquidity_usd=20_000))) == 18
    assert liquidity_term(_inputs(market=MarketFacts(liquidity_usd=30_000))) == 0
    # No liquidity: +10 for contracts only
    assert liquidity_term(_inputs(market=MarketFacts())) == 10
    assert liquidity_term(_inputs(kind=KIND_WALLET, market=MarketFacts())) == 0


def test_fdv_needs_both_values():
    assert fdv_term(_inputs(market=MarketFacts(liquidity_usd=4_000))) == 0
    assert fdv_term(_inputs(market=MarketFacts(liquidity_usd=4_000, fdv_usd=0))) == 0
    assert fdv_term(_inputs(market=MarketFacts(liquidity_usd=100_000, fdv_usd=1_000_000))) == 0


def test_one_bundle_group_term():
    """One shared-funder group (of two holders) adds min(16, 6 + 1*4)."""
    cluster = HolderCluster(top_holder_count=8, bundle_group_count=1, bundle_groups={"0xf": 2})
    assert bundle_term(_inputs(cluster=cluster)) == 10
    many = HolderCluster(bundle_group_count=4)
    assert bundle_term(_inputs(cluster=many)) == 16
    assert bundle_term(_inputs(cluster=None)) == 0


def test_alt_wallet_term():
    assert alt_wallet_term(_inputs(intel=IntelFacts(alt_wallets=[]))) == 0
    assert alt_wallet_term(_inputs(intel=IntelFacts(alt_wallets=["a"] * 6))) == 6
    assert alt_wallet_term(_inputs(intel=IntelFacts(alt_wallets=["a"] * 30))) == 14


def test_entity_and_portfolio_terms():
    risky = IntelFacts(entity=EntityIntel(entity_type="mixer"))
    assert entity_term(_inputs(intel=risky)) == 15
    assert entity_term(_inputs(intel=IntelFacts(entity=EntityIntel(entity_type="cex")))) == 0
    winners = Portfolio(holdings=[Holding(realized_profit_usd=10.0) for _ in range(8)])
    assert portfolio_term(_inputs(kind=KIND_WALLET, intel=IntelFacts(portfolio=winners))) == -4


def test_score_is_bounded_and_deterministic():
    """Score stays in [0, 100] and repeats exactly for identical inputs."""
    x = _inputs(
        market=MarketFacts(liquidity_usd=100, fdv_usd=10_000_000),
        intel=IntelFacts(alt_wallets=["a"] * 30, entity=EntityIntel(entity_type="hacker")),
        cluster=HolderCluster(bundle_group_count=4),
    )
    first = compute_risk_score(x)
    assert 0 <= first <= 100
    assert first == 100
    assert all(compute_risk_score(x) == first for _ in range(5))


def test_term_order_does_not_matter():
    """Every permutation of the term list yields the same score."""
    x = _inputs(
        market=MarketFacts(liquidity_usd=20_000, fdv_usd=50_000_000),
        intel=IntelFacts(alt_wallets=["a"] * 4),
        cluster=HolderCluster(bundle_group_count=1),
    )
    expected = compute_risk_score(x)
    for perm in itertools.permutations(SCORE_TERMS):
        assert compute_risk_score(x, perm) == expected


def test_clamp_score():
    assert clamp_score(-12) == 0
    assert clamp_score(140) == 100
    assert clamp_score(41.6) == 42
    assert clamp_score(math.nan) == 50
    assert clamp_score(math.inf) == 50


def test_wallet_baseline():
    """A bare wallet with no signals scores the base value."""
    assert compute_risk_score(_inputs(kind=KIND_WALLET)) == BASE_SCORE
