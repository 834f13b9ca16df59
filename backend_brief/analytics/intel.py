"""
Intel module: concurrent fan-out to label, tag, entity, portfolio, trade and
explorer sources.

Each source has its own deadline; a failure or timeout leaves that source as
"no data" and never affects the others. This module never raises.
"""

from __future__ import annotations

import asyncio
from typing import Any

from backend_brief.analytics.models import (
    SOURCE_API,
    IntelFacts,
    LedgerSection,
    Target,
)
from backend_brief.brief_logging import get_logger
from backend_brief.config.settings import BriefSettings
from backend_brief.core.i18n import format_usd, join_human_list, paren, pick_text
from backend_brief.core.timeouts import CallOutcome, bounded
from backend_brief.providers import ProviderSet
from backend_brief.providers.arkham import ArkhamAdapter
from backend_brief.providers.gmgn import GmgnAdapter
from backend_brief.utils.address_utils import is_valid_address

logger = get_logger(__name__)

RISK_ENTITY_KEYWORDS = ("mixer", "hacker", "exploit", "sanctioned", "scammer", "phishing")
MAX_TAGS_SHOWN = 6
MAX_ENTITY_TAGS_SHOWN = 4
MAX_PORTFOLIO_TAGS_SHOWN = 6
HOLDINGS_LIMIT = 60
TRADES_LIMIT = 80

_TEXT = {
    "profile_label": {
        "en": "External profile label: {label}",
        "zh-CN": "外部地址画像：{label}",
        "zh-TW": "外部地址畫像：{label}",
        "ko": "외부 주소 프로필 라벨: {label}",
    },
    "verified": {
        "en": "External source indicates verified label",
        "zh-CN": "外部画像源显示：该地址存在已验证标签",
        "zh-TW": "外部畫像源顯示：該地址存在已驗證標籤",
        "ko": "외부 소스에서 검증된 라벨이 확인되었습니다",
    },
    "best_asset": {
        "en": "Past active asset: {symbol}{pnl}",
        "zh-CN": "历史活跃资产：{symbol}{pnl}",
        "zh-TW": "歷史活躍資產：{symbol}{pnl}",
        "ko": "과거 주요 자산: {symbol}{pnl}",
    },
    "alt_wallets": {
        "en": "Detected {count} potential related addresses",
        "zh-CN": "检测到 {count} 个潜在关联地址（仅供进一步核验）",
        "zh-TW": "檢測到 {count} 個潛在關聯地址（僅供進一步核驗）",
        "ko": "{count}개의 잠재 연관 주소가 감지되었습니다 (추가 검증 필요)",
    },
    "tags": {
        "en": "External tags: {tags}",
        "zh-CN": "外部标签信号：{tags}",
        "zh-TW": "外部標籤信號：{tags}",
        "ko": "외부 태그 신호: {tags}",
    },
    "entity_label": {
        "en": "Arkham label: {label}",
        "zh-CN": "Arkham 标签：{label}",
        "zh-TW": "Arkham 標籤：{label}",
        "ko": "Arkham 라벨: {label}",
    },
    "entity_risk": {
        "en": "Arkham marks this address as high-risk type: {type}",
        "zh-CN": "Arkham 标注类型偏高风险：{type}",
        "zh-TW": "Arkham 標註類型偏高風險：{type}",
        "ko": "Arkham에서 고위험 유형으로 분류: {type}",
    },
    "entity_tags": {
        "en": "Arkham tags: {tags}",
        "zh-CN": "Arkham 关联标签：{tags}",
        "zh-TW": "Arkham 關聯標籤：{tags}",
        "ko": "Arkham 태그: {tags}",
    },
    "portfolio": {
        "en": "GMGN portfolio profile: {count} holdings, {profitable} profitable",
        "zh-CN": "GMGN 持仓画像：共 {count} 个持仓，盈利仓位 {profitable} 个",
        "zh-TW": "GMGN 持倉畫像：共 {count} 個持倉，盈利倉位 {profitable} 個",
        "ko": "GMGN 포트폴리오 프로필: 총 {count}개 보유, 수익 구간 {profitable}개",
    },
    "portfolio_tags": {
        "en": "GMGN wallet tags: {tags}",
        "zh-CN": "GMGN 钱包标签：{tags}",
        "zh-TW": "GMGN 錢包標籤：{tags}",
        "ko": "GMGN 지갑 태그: {tags}",
    },
    "trades": {
        "en": "GMGN trade sample: {count} trades, {makers} unique makers",
        "zh-CN": "GMGN 交易样本：{count} 笔，独立 maker {makers} 个",
        "zh-TW": "GMGN 交易樣本：{count} 筆，獨立 maker {makers} 個",
        "ko": "GMGN 거래 샘플: {count}건, 고유 maker {makers}개",
    },
    "explorer": {
        "en": "BscScan activity (24h): {txs} txs, {transfers} token transfers",
        "zh-CN": "BscScan 活跃度（24h）：交易 {txs} 笔，代币转账 {transfers} 笔",
        "zh-TW": "BscScan 活躍度（24h）：交易 {txs} 筆，代幣轉帳 {transfers} 筆",
        "ko": "BscScan 활동도(24h): 거래 {txs}건, 토큰 전송 {transfers}건",
    },
}


def entity_is_risky(entity_type: str | None) -> bool:
    t = (entity_type or "").lower()
    return bool(t) and any(k in t for k in RISK_ENTITY_KEYWORDS)


async def _skip() -> None:
    return None


def _value(outcome: CallOutcome[Any], source: str) -> Any:
    if not outcome.ok:
        logger.info("intel_source_failed", source=source, status=outcome.status, error=outcome.error)
        return None
    return outcome.value


async def gather_intel(
    target: Target,
    providers: ProviderSet,
    settings: BriefSettings,
) -> IntelFacts:
    """Run every intel call concurrently and collect the results into IntelFacts."""
    addr = target.address
    t = settings.timeouts
    portfolio_call = (
        providers.gmgn.wallet_holdings(addr, limit=HOLDINGS_LIMIT) if not target.is_contract else _skip()
    )
    trades_call = (
        providers.gmgn.token_trades(addr, limit=TRADES_LIMIT) if target.is_contract else _skip()
    )
    profile_r, alt_r, tags_r, entity_r, portfolio_r, trades_r, activity_r = await asyncio.gather(
        bounded(providers.frontrun.wallet_metadata(addr), t.intel, source="frontrun"),
        bounded(providers.frontrun.alt_wallets(addr), t.intel, source="frontrun"),
        bounded(
            providers.memeradar.wallet_tags(addr, addr if target.is_contract else None),
            t.intel,
            source="memeradar",
        ),
        bounded(providers.arkham.address_enriched(addr), t.intel, source="arkham"),
        bounded(portfolio_call, t.intel, source="gmgn"),
        bounded(trades_call, t.intel, source="gmgn"),
        bounded(providers.bscscan.address_summary(addr), t.explorer_activity, source="bscscan"),
    )
    intel = IntelFacts(
        label_profile=_value(profile_r, "frontrun"),
        alt_wallets=_value(alt_r, "frontrun"),
        tag_list=_value(tags_r, "memeradar"),
        entity=_value(entity_r, "arkham"),
        portfolio=_value(portfolio_r, "gmgn"),
        trade_sample=_value(trades_r, "gmgn"),
        explorer_activity=_value(activity_r, "bscscan"),
    )
    if intel.label_profile is not None or intel.alt_wallets is not None:
        intel.source_status["frontrun"] = SOURCE_API
    if intel.tag_list is not None:
        intel.source_status["memeradar"] = SOURCE_API
    if intel.entity is not None:
        intel.source_status["arkham"] = SOURCE_API
    if intel.portfolio is not None or intel.trade_sample is not None:
        intel.source_status["gmgn"] = SOURCE_API
    if intel.explorer_activity is not None:
        intel.source_status["bscscan"] = SOURCE_API
    return intel


def intel_findings(
    target: Target,
    intel: IntelFacts,
    section: LedgerSection,
    locale: str,
    label_source_url: str,
) -> None:
    """Translate IntelFacts into findings and provenance evidence, source by source."""
    profile = intel.label_profile
    if profile is not None:
        if profile.primary_label:
            section.info(pick_text(locale, _TEXT["profile_label"]).format(label=profile.primary_label))
        if profile.verified is True:
            section.success(pick_text(locale, _TEXT["verified"]))
        with_pnl = [s for s in profile.token_stats if s.pnl_usd is not None]
        best = max(with_pnl, key=lambda s: s.pnl_usd) if with_pnl else None
        if best is not None and best.token_symbol:
            section.info(pick_text(locale, _TEXT["best_asset"]).format(
                symbol=best.token_symbol,
                pnl=paren(locale, f"PnL≈{format_usd(best.pnl_usd)}"),
            ))
        section.add_evidence("Address Label Source", label_source_url)

    if intel.alt_wallet_count > 0:
        section.warning(pick_text(locale, _TEXT["alt_wallets"]).format(count=intel.alt_wallet_count))

    if intel.tag_list:
        tags = join_human_list(locale, intel.tag_list[:MAX_TAGS_SHOWN])
        section.info(pick_text(locale, _TEXT["tags"]).format(tags=tags))

    entity = intel.entity
    if entity is not None:
        label = entity.label_name or entity.entity_name or entity.entity_type
        if label:
            section.info(pick_text(locale, _TEXT["entity_label"]).format(label=label))
        if entity_is_risky(entity.entity_type):
            section.warning(pick_text(locale, _TEXT["entity_risk"]).format(type=entity.entity_type))
        if entity.tags:
            tags = join_human_list(locale, entity.tags[:MAX_ENTITY_TAGS_SHOWN])
            section.info(pick_text(locale, _TEXT["entity_tags"]).format(tags=tags))
        section.add_evidence("Arkham", ArkhamAdapter.explorer_url(target.address))

    portfolio = intel.portfolio
    if portfolio is not None and portfolio.holdings:
        section.info(pick_text(locale, _TEXT["portfolio"]).format(
            count=len(portfolio.holdings), profitable=portfolio.profitable_count
        ))
        top_tags = portfolio.top_tags(MAX_PORTFOLIO_TAGS_SHOWN)
        if top_tags:
            section.info(pick_text(locale, _TEXT["portfolio_tags"]).format(
                tags=join_human_list(locale, top_tags)
            ))
        section.add_evidence("GMGN", GmgnAdapter.address_url(target.address))

    sample = intel.trade_sample
    if sample is not None and sample.trades:
        makers = {
            (tr.maker or "").lower() for tr in sample.trades if is_valid_address(tr.maker)
        }
        section.info(pick_text(locale, _TEXT["trades"]).format(count=len(sample.trades), makers=len(makers)))
        section.add_evidence("GMGN Token", GmgnAdapter.token_url(target.address))

    activity = intel.explorer_activity
    if activity is not None and (activity.tx_count_24h > 0 or activity.token_transfer_count_24h > 0):
        section.info(pick_text(locale, _TEXT["explorer"]).format(
            txs=activity.tx_count_24h, transfers=activity.token_transfer_count_24h
        ))


async def run_intel(
    target: Target,
    providers: ProviderSet,
    settings: BriefSettings,
    section: LedgerSection,
    locale: str,
) -> IntelFacts:
    intel = await gather_intel(target, providers, settings)
    intel_findings(target, intel, section, locale, providers.frontrun.profile_url(target.address))
    logger.debug("intel_done", source_status=intel.source_status)
    return intel
