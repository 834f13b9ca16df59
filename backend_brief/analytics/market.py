"""
Market module: best DEX pair, liquidity bands and the FDV/liquidity check.

source_status is "api" whenever the pair adapter answered, even with no pair.
"""

from __future__ import annotations

from backend_brief.analytics.models import SOURCE_API, LedgerSection, MarketFacts, Target
from backend_brief.brief_logging import get_logger
from backend_brief.config.settings import BriefSettings
from backend_brief.core.i18n import pick_text
from backend_brief.core.timeouts import bounded
from backend_brief.providers import ProviderSet
from backend_brief.utils.address_utils import is_valid_address, short_addr

logger = get_logger(__name__)

LOW_LIQUIDITY_USD = 5_000
MODERATE_LIQUIDITY_USD = 30_000
MIN_LIQUIDITY_TO_FDV = 0.003

_TEXT = {
    "low": {
        "en": "Low liquidity (easy to manipulate)",
        "zh-CN": "流动性偏低（更容易被拉盘/砸盘）",
        "zh-TW": "流動性偏低（更容易被拉盤/砸盤）",
        "ko": "유동성이 낮습니다 (시세 조작에 취약)",
    },
    "moderate": {
        "en": "Moderate liquidity (expect volatility)",
        "zh-CN": "流动性一般（波动可能较大）",
        "zh-TW": "流動性一般（波動可能較大）",
        "ko": "유동성이 보통 수준입니다 (변동성 주의)",
    },
    "healthy": {
        "en": "Healthy liquidity (relatively safer)",
        "zh-CN": "流动性相对充足（相对更稳）",
        "zh-TW": "流動性相對充足（相對更穩）",
        "ko": "유동성이 비교적 충분합니다 (상대적으로 안정적)",
    },
    "none": {
        "en": "No DEX liquidity data found",
        "zh-CN": "未获取到 DEX 流动性信息（可能未上线或数据源不可用）",
        "zh-TW": "未獲取到 DEX 流動性資訊（可能未上線或資料源不可用）",
        "ko": "DEX 유동성 데이터를 찾지 못했습니다",
    },
    "high_fdv": {
        "en": "High FDV vs liquidity (fragile price)",
        "zh-CN": "FDV 相对流动性过高（价格更脆弱）",
        "zh-TW": "FDV 相對流動性過高（價格更脆弱）",
        "ko": "FDV 대비 유동성이 낮습니다 (가격 취약)",
    },
}


def has_liquidity(market: MarketFacts) -> bool:
    return market.liquidity_usd is not None and market.liquidity_usd > 0


def liquidity_to_fdv(market: MarketFacts) -> float | None:
    """liquidity/FDV when both are known and positive."""
    if not market.fdv_usd or not market.liquidity_usd or market.fdv_usd <= 0:
        return None
    return market.liquidity_usd / market.fdv_usd


def market_findings(target: Target, market: MarketFacts, section: LedgerSection, locale: str) -> None:
    """Liquidity band and FDV findings. Contract targets only."""
    if not target.is_contract:
        return
    if has_liquidity(market):
        if market.liquidity_usd < LOW_LIQUIDITY_USD:
            section.warning(pick_text(locale, _TEXT["low"]))
        elif market.liquidity_usd < MODERATE_LIQUIDITY_USD:
            section.info(pick_text(locale, _TEXT["moderate"]))
        else:
            section.success(pick_text(locale, _TEXT["healthy"]))
    else:
        section.info(pick_text(locale, _TEXT["none"]))
    ratio = liquidity_to_fdv(market)
    if ratio is not None and ratio < MIN_LIQUIDITY_TO_FDV:
        section.warning(pick_text(locale, _TEXT["high_fdv"]))


async def run_market(
    target: Target,
    providers: ProviderSet,
    settings: BriefSettings,
    section: LedgerSection,
    locale: str,
) -> MarketFacts:
    market = MarketFacts()
    outcome = await bounded(
        providers.dexscreener.best_pair(target.address), settings.timeouts.market, source="dexscreener"
    )
    if outcome.ok:
        market.source_status = SOURCE_API
        pair = outcome.value
        if pair is not None:
            market.liquidity_usd = pair.liquidity_usd
            market.fdv_usd = pair.fdv_usd
            market.pair_url = pair.url
            market.dex_id = pair.dex_id
            if pair.url:
                section.add_evidence("DEX", pair.url)
            if pair.pair_address and is_valid_address(pair.pair_address):
                market.pair_address = pair.pair_address
                section.add_evidence(
                    "Pair",
                    f"{settings.explorer_base}/address/{pair.pair_address}",
                    short_addr(pair.pair_address),
                )
    else:
        logger.info("market_source_unavailable", error=outcome.error)

    market_findings(target, market, section, locale)
    return market
