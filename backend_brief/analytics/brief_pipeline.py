"""
Brief pipeline: one request from free-text query to BriefResult.

Resolve first (fatal errors surface here), then contract, market, intel and
holder-cluster modules run concurrently, each writing only its own ledger
section. Score, narrative and runtime report are computed from the merged
facts. One httpx.AsyncClient is opened per run and shared by every adapter.
"""

from __future__ import annotations

import asyncio
import time

import httpx

from backend_brief.analytics.contract_introspector import introspect_contract
from backend_brief.analytics.holder_cluster import run_holder_cluster
from backend_brief.analytics.intel import run_intel
from backend_brief.analytics.market import run_market
from backend_brief.analytics.models import (
    NARRATIVE_LLM,
    BriefLedger,
    BriefResult,
    EntityCard,
    MarketFacts,
    Target,
    TokenFacts,
)
from backend_brief.analytics.narrative import compose_narrative
from backend_brief.analytics.resolver import add_baseline_evidence, resolve_target
from backend_brief.analytics.risk_engine import ScoreInputs, compute_risk_score
from backend_brief.analytics.runtime_report import build_runtime_report
from backend_brief.brief_logging import bind_request, clear_request, get_logger
from backend_brief.chain_reader.client import ChainReader
from backend_brief.config.settings import BriefSettings, get_settings
from backend_brief.core.i18n import normalize_locale, pick_text
from backend_brief.providers import ProviderSet

logger = get_logger(__name__)

_SUBTITLE = {
    "contract": {"en": "Contract", "zh-CN": "合约地址", "zh-TW": "合約地址", "ko": "컨트랙트 주소"},
    "wallet": {"en": "Address", "zh-CN": "地址", "zh-TW": "地址", "ko": "주소"},
}


def build_entity_card(target: Target, token: TokenFacts, market: MarketFacts, locale: str) -> EntityCard:
    title = token.symbol or ("Contract" if target.is_contract else "Wallet")
    subtitle = token.name or pick_text(locale, _SUBTITLE[target.kind])
    tags = []
    if token.decimals is not None:
        tags.append(f"decimals:{token.decimals}")
    if market.dex_id:
        tags.append(f"dex:{market.dex_id}")
    return EntityCard(title=title, subtitle=subtitle, tags=tags)


async def run_brief(
    query: str,
    locale: str,
    chain: ChainReader,
    providers: ProviderSet,
    settings: BriefSettings,
) -> BriefResult:
    """Orchestrate one brief over an already-built chain reader and provider set."""
    started = time.monotonic()
    target = await resolve_target(query, chain, providers, settings, locale)
    bind_request(target.address)

    ledger = BriefLedger()
    add_baseline_evidence(ledger.section("resolver"), target, settings)

    token, market, intel, cluster = await asyncio.gather(
        introspect_contract(target, chain, settings, ledger.section("contract"), locale),
        run_market(target, providers, settings, ledger.section("market"), locale),
        run_intel(target, providers, settings, ledger.section("intel"), locale),
        run_holder_cluster(target, chain, providers, settings, ledger.section("holder_cluster"), locale),
    )

    score = compute_risk_score(ScoreInputs(target=target, market=market, intel=intel, holder_cluster=cluster))
    narrative = await compose_narrative(
        score,
        target,
        market,
        cluster,
        ledger.all_findings(),
        providers.llm,
        locale,
        settings.timeouts.llm,
    )
    runtime = build_runtime_report(
        settings.providers,
        intel,
        market,
        llm_used=narrative.source == NARRATIVE_LLM,
        llm_configured=providers.llm.configured,
        locale=locale,
        moralis_answered=providers.moralis.answered,
    )

    result = BriefResult(
        address=target.address,
        type=target.kind,
        risk_score=score,
        tldr=narrative.tldr,
        explanation=narrative.explanation,
        findings=ledger.findings(),
        evidence=ledger.evidence(),
        entity=build_entity_card(target, token, market, locale),
        token=token,
        market=market,
        intel=intel,
        holder_cluster=cluster,
        runtime=runtime,
        narrative_source=narrative.source,
    )
    logger.info(
        "brief_done",
        kind=target.kind,
        risk_score=score,
        mode=runtime.mode,
        narrative=narrative.source,
        findings=len(result.findings),
        elapsed_ms=int((time.monotonic() - started) * 1000),
    )
    return result


async def analyze_brief(
    query: str,
    lang: str | None = None,
    *,
    settings: BriefSettings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> BriefResult:
    """
    Entry point used by the API.

    Raises InvalidAddress or ResolutionFailure; every other failure degrades
    into fewer findings and a fallback-leaning runtime report.
    """
    settings = settings or get_settings()
    locale = normalize_locale(lang)
    try:
        async with httpx.AsyncClient(transport=transport, follow_redirects=True) as client:
            chain = ChainReader(client, settings.rpc_url, timeout=settings.timeouts.rpc_request)
            providers = ProviderSet.build(client, settings)
            return await run_brief(query, locale, chain, providers, settings)
    finally:
        clear_request()
