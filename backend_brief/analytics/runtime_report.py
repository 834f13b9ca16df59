"""
Runtime report: per-source live / fallback / disabled status with localized notes.

Pure function over configuration and what each source actually returned.
Mode is "enhanced" when any optional source was live; the chain RPC is
required and does not count. Not used in scoring.
"""

from __future__ import annotations

from backend_brief.analytics.models import (
    MODE_ENHANCED,
    MODE_FALLBACK,
    SOURCE_API,
    STATUS_DISABLED,
    STATUS_FALLBACK,
    STATUS_LIVE,
    IntelFacts,
    MarketFacts,
    RuntimeReport,
    SourceStatus,
)
from backend_brief.config.settings import ProviderKeys
from backend_brief.core.i18n import pick_text

REQUIRED_SOURCES = ("bsc_rpc",)

_NOTE = {
    "rpc": {
        "en": "public RPC + optional custom endpoint",
        "zh-CN": "公共 RPC + 可选自定义节点",
        "zh-TW": "公共 RPC + 可選自定義節點",
        "ko": "공용 RPC + 선택적 커스텀 엔드포인트",
    },
    "market_live": {"en": "public market data", "zh-CN": "公开市场数据", "zh-TW": "公開市場數據", "ko": "공개 시장 데이터"},
    "no_signal": {
        "en": "request failed or no signal",
        "zh-CN": "请求失败或无信号",
        "zh-TW": "請求失敗或無信號",
        "ko": "요청 실패 또는 신호 없음",
    },
    "configured": {"en": "api configured", "zh-CN": "API 已配置", "zh-TW": "API 已配置", "ko": "API 설정됨"},
    "key_missing": {"en": "api key missing", "zh-CN": "缺少 API Key", "zh-TW": "缺少 API Key", "ko": "API 키 없음"},
    "not_configured": {"en": "not configured", "zh-CN": "未配置", "zh-TW": "未配置", "ko": "미설정"},
    "api_live": {"en": "api live", "zh-CN": "API 可用", "zh-TW": "API 可用", "ko": "API 가동"},
    "configured_no_signal": {
        "en": "api configured; request failed or no signal",
        "zh-CN": "API 已配置；请求失败或无信号",
        "zh-TW": "API 已配置；請求失敗或無信號",
        "ko": "API 설정됨; 요청 실패 또는 신호 없음",
    },
    "fr_live": {
        "en": "live: batch-query -> single-query fallback",
        "zh-CN": "可用：批量查询，单查询兜底",
        "zh-TW": "可用：批量查詢，單查詢兜底",
        "ko": "가동: batch-query 후 single-query 폴백",
    },
    "fr_empty": {
        "en": "api configured; no signal returned",
        "zh-CN": "API 已配置，但未返回信号",
        "zh-TW": "API 已配置，但未返回信號",
        "ko": "API는 설정되었지만 신호가 없습니다",
    },
    "llm_on": {"en": "llm summarizer configured", "zh-CN": "LLM 总结器已配置", "zh-TW": "LLM 總結器已配置", "ko": "LLM 요약기 설정됨"},
    "llm_off": {"en": "llm summarizer disabled", "zh-CN": "LLM 总结器未启用", "zh-TW": "LLM 總結器未啟用", "ko": "LLM 요약기 비활성"},
}


def source_state(answered: bool, configured: bool) -> str:
    if answered:
        return STATUS_LIVE
    return STATUS_FALLBACK if configured else STATUS_DISABLED


def _generic_note(status: str, locale: str) -> str:
    if status == STATUS_LIVE:
        return pick_text(locale, _NOTE["api_live"])
    if status == STATUS_FALLBACK:
        return pick_text(locale, _NOTE["configured_no_signal"])
    return pick_text(locale, _NOTE["not_configured"])


def build_runtime_report(
    keys: ProviderKeys,
    intel: IntelFacts,
    market: MarketFacts,
    llm_used: bool,
    llm_configured: bool,
    locale: str,
    moralis_answered: bool = False,
) -> RuntimeReport:
    """
    Per-source status for this request. A keyed source that was never called, or
    whose every call failed, reports fallback rather than live.
    """

    def note(key: str) -> str:
        return pick_text(locale, _NOTE[key])

    dex_status = STATUS_LIVE if market.source_status == SOURCE_API else STATUS_FALLBACK
    moralis_status = source_state(moralis_answered, keys.has_moralis)
    fr_status = source_state(intel.status("frontrun") == SOURCE_API, keys.has_frontrun)
    mr_status = source_state(intel.status("memeradar") == SOURCE_API, keys.has_memeradar)
    arkham_status = source_state(intel.status("arkham") == SOURCE_API, keys.has_arkham)
    gmgn_status = source_state(intel.status("gmgn") == SOURCE_API, keys.has_gmgn)
    bscscan_status = source_state(intel.status("bscscan") == SOURCE_API, keys.has_bscscan)
    llm_status = source_state(llm_used, llm_configured)

    fr_note = {
        STATUS_LIVE: note("fr_live"),
        STATUS_FALLBACK: note("fr_empty"),
        STATUS_DISABLED: note("not_configured"),
    }[fr_status]

    sources = [
        SourceStatus("bsc_rpc", STATUS_LIVE, note("rpc")),
        SourceStatus("dexscreener", dex_status, note("market_live" if dex_status == STATUS_LIVE else "no_signal")),
        SourceStatus(
            "moralis",
            moralis_status,
            note("key_missing") if moralis_status == STATUS_DISABLED else _generic_note(moralis_status, locale),
        ),
        SourceStatus("frontrun", fr_status, fr_note),
        SourceStatus("memeradar", mr_status, note("configured" if keys.has_memeradar else "not_configured")),
        SourceStatus("arkham", arkham_status, _generic_note(arkham_status, locale)),
        SourceStatus("gmgn", gmgn_status, _generic_note(gmgn_status, locale)),
        SourceStatus("bscscan", bscscan_status, _generic_note(bscscan_status, locale)),
        SourceStatus("openrouter", llm_status, note("llm_on" if llm_configured else "llm_off")),
    ]
    enhanced = any(s.status == STATUS_LIVE for s in sources if s.id not in REQUIRED_SOURCES)
    return RuntimeReport(mode=MODE_ENHANCED if enhanced else MODE_FALLBACK, sources=sources)
