"""
Narrative composer.

A deterministic fallback (risk-band tldr plus templated sentences) is always
built. When an LLM is configured, a single JSON-constrained completion may
replace it, but only if the reply parses into {tldr, explanation} within the
length limits and, for Chinese locales, is not mostly Latin text. Any failure
keeps the fallback; nothing here raises to the caller.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, Field, ValidationError

from backend_brief.analytics.market import has_liquidity
from backend_brief.analytics.models import (
    NARRATIVE_FALLBACK,
    NARRATIVE_LLM,
    Finding,
    HolderCluster,
    MarketFacts,
    Narrative,
    Target,
)
from backend_brief.brief_logging import get_logger
from backend_brief.core.exceptions import NarrativeDegraded
from backend_brief.core.i18n import format_usd, is_zh_locale, pick_text, sentence_join
from backend_brief.core.timeouts import bounded
from backend_brief.providers.llm import LlmAdapter

logger = get_logger(__name__)

HIGH_RISK_MIN = 80
MEDIUM_RISK_MIN = 55
MAX_PROMPT_FINDINGS = 6

# Language-mismatch guard. Heuristic thresholds, not derived from product requirements.
LATIN_MIN_LETTERS = 24
LATIN_TO_CJK_RATIO = 2

_LATIN_RE = re.compile(r"[A-Za-z]")
_CJK_RE = re.compile("[\u4e00-\u9fff]")

_TEXT = {
    "tldr_high": {
        "en": "High risk: prioritize evidence review and avoid impulsive trades.",
        "zh-CN": "高风险：建议以观察和证据复核为主，避免冲动交易。",
        "zh-TW": "高風險：建議以觀察和證據復核為主，避免衝動交易。",
        "ko": "고위험: 증거 검토를 우선하고 충동 거래를 피하세요.",
    },
    "tldr_medium": {
        "en": "Medium risk: verify holders, controls, and liquidity sources.",
        "zh-CN": "中风险：建议进一步核查持币结构、权限控制与流动性来源。",
        "zh-TW": "中風險：建議進一步核查持幣結構、權限控制與流動性來源。",
        "ko": "중위험: 홀더 구조, 권한 제어, 유동성 출처를 추가 검증하세요.",
    },
    "tldr_lower": {
        "en": "Lower risk: still verify controls, concentration, and liquidity quality.",
        "zh-CN": "相对低风险：仍建议复核关键权限、持币集中度和流动性质量。",
        "zh-TW": "相對低風險：仍建議復核關鍵權限、持幣集中度和流動性質量。",
        "ko": "상대적 저위험: 그래도 권한, 집중도, 유동성 품질은 확인하세요.",
    },
    "is_contract": {
        "en": "This input is identified as a contract address.",
        "zh-CN": "该输入被识别为合约地址。",
        "zh-TW": "該輸入被識別為合約地址。",
        "ko": "입력값은 컨트랙트 주소로 식별되었습니다.",
    },
    "is_wallet": {
        "en": "This input is identified as an EOA wallet.",
        "zh-CN": "该输入被识别为普通地址（EOA）。",
        "zh-TW": "該輸入被識別為普通地址（EOA）。",
        "ko": "입력값은 EOA 지갑 주소로 식별되었습니다.",
    },
    "liquidity": {
        "en": "Visible liquidity is about {usd}.",
        "zh-CN": "可见流动性约 {usd}。",
        "zh-TW": "可見流動性約 {usd}。",
        "ko": "가시 유동성은 약 {usd} 수준입니다.",
    },
    "no_liquidity": {
        "en": "Liquidity data was unavailable, so this evaluation is conservative.",
        "zh-CN": "当前未稳定获取到流动性数据，因此本次评估偏保守。",
        "zh-TW": "當前未穩定獲取到流動性資料，因此本次評估偏保守。",
        "ko": "유동성 데이터를 안정적으로 확보하지 못해 이번 평가는 보수적으로 진행되었습니다.",
    },
    "bundles": {
        "en": "Top holders show {count} shared funding groups; verify if they belong to one cluster.",
        "zh-CN": "Top 持币地址存在 {count} 组同源入金分发，需重点复核是否为同团体地址。",
        "zh-TW": "Top 持幣地址存在 {count} 組同源入金分發，需重點復核是否為同團體地址。",
        "ko": "상위 홀더에서 {count}개의 동일 자금원 그룹이 확인되었습니다. 동일 군집 여부를 중점 검증하세요.",
    },
    "closer": {
        "en": "Evidence links are included; verify on BscScan and other sources.",
        "zh-CN": "结论已尽量附带可点击证据，建议在 BscScan 等来源二次复核。",
        "zh-TW": "結論已盡量附帶可點擊證據，建議在 BscScan 等來源二次復核。",
        "ko": "결론에는 클릭 가능한 증거 링크가 포함되어 있습니다. BscScan 등에서 2차 검증하세요.",
    },
}

_PROMPT_HEAD = {
    "en": [
        'You are an onchain research assistant. Output JSON only: {"tldr":string,"explanation":string}.',
        "Keep it concise, conservative, and plain language. Do not mention any internal modules.",
    ],
    "zh-CN": [
        '你是链上研究助手。只输出 JSON，格式为 {"tldr":string,"explanation":string}。',
        "要求：简洁、保守、可读，不使用小标题，不提到任何模块名或系统内部结构。",
    ],
    "zh-TW": [
        '你是鏈上研究助手。只輸出 JSON，格式為 {"tldr":string,"explanation":string}。',
        "要求：簡潔、保守、可讀，不使用小標題，不提到任何模組名或系統內部結構。",
    ],
    "ko": [
        '당신은 온체인 리서치 어시스턴트입니다. JSON만 출력하세요: {"tldr":string,"explanation":string}.',
        "간결하고 보수적이며 평이한 표현을 사용하세요. 내부 모듈명은 언급하지 마세요.",
    ],
}

_PROMPT_LABELS = {
    "en": ("Address", "Type", "Risk score", "Liquidity USD", "Facts"),
    "zh-CN": ("地址", "类型", "风险分", "流动性USD", "关键事实"),
    "zh-TW": ("地址", "類型", "風險分", "流動性USD", "關鍵事實"),
    "ko": ("주소", "유형", "위험 점수", "유동성 USD", "핵심 사실"),
}


class LlmNarrative(BaseModel):
    """Accepted shape of the LLM reply."""

    tldr: str = Field(..., min_length=1, max_length=220)
    explanation: str = Field(..., min_length=1, max_length=1200)


def looks_mostly_latin(text: str) -> bool:
    """
    True when text has at least LATIN_MIN_LETTERS Latin letters and more than
    LATIN_TO_CJK_RATIO times as many Latin letters as CJK ideographs.
    """
    if not text:
        return False
    latin = len(_LATIN_RE.findall(text))
    cjk = len(_CJK_RE.findall(text))
    return latin >= LATIN_MIN_LETTERS and latin > cjk * LATIN_TO_CJK_RATIO


def fallback_narrative(
    score: int,
    target: Target,
    market: MarketFacts,
    holder_cluster: HolderCluster | None,
    locale: str,
) -> Narrative:
    if score >= HIGH_RISK_MIN:
        tldr = pick_text(locale, _TEXT["tldr_high"])
    elif score >= MEDIUM_RISK_MIN:
        tldr = pick_text(locale, _TEXT["tldr_medium"])
    else:
        tldr = pick_text(locale, _TEXT["tldr_lower"])

    parts = [pick_text(locale, _TEXT["is_contract" if target.is_contract else "is_wallet"])]
    if has_liquidity(market):
        parts.append(pick_text(locale, _TEXT["liquidity"]).format(usd=format_usd(market.liquidity_usd)))
    else:
        parts.append(pick_text(locale, _TEXT["no_liquidity"]))
    if holder_cluster is not None and holder_cluster.bundle_group_count > 0:
        parts.append(pick_text(locale, _TEXT["bundles"]).format(count=holder_cluster.bundle_group_count))
    parts.append(pick_text(locale, _TEXT["closer"]))
    return Narrative(tldr=tldr, explanation=sentence_join(locale, parts), source=NARRATIVE_FALLBACK)


def build_prompt(
    score: int,
    target: Target,
    market: MarketFacts,
    findings: list[Finding],
    locale: str,
) -> str:
    labels = _PROMPT_LABELS.get(locale, _PROMPT_LABELS["zh-CN"])
    facts = "\n".join(f"- {f.text}" for f in findings[:MAX_PROMPT_FINDINGS])
    liquidity = market.liquidity_usd if market.liquidity_usd is not None else "unknown"
    lines = [
        *_PROMPT_HEAD.get(locale, _PROMPT_HEAD["zh-CN"]),
        f"{labels[0]}: {target.address}",
        f"{labels[1]}: {target.kind}",
        f"{labels[2]}: {score}",
        f"{labels[3]}: {liquidity}",
        f"{labels[4]}: {facts}",
    ]
    return "\n".join(lines)


def parse_llm_reply(content: str, locale: str) -> Narrative:
    """Validate the reply; raises NarrativeDegraded when it is unusable."""
    try:
        parsed = LlmNarrative.model_validate_json(content)
    except ValidationError as e:
        raise NarrativeDegraded(f"llm reply rejected: {e.error_count()} validation errors") from e
    if is_zh_locale(locale) and (looks_mostly_latin(parsed.tldr) or looks_mostly_latin(parsed.explanation)):
        raise NarrativeDegraded("llm reply is mostly Latin for a Chinese locale")
    return Narrative(tldr=parsed.tldr, explanation=parsed.explanation, source=NARRATIVE_LLM)


async def _llm_narrative(llm: LlmAdapter, prompt: str, locale: str) -> Narrative:
    content = await llm.complete_json(prompt)
    return parse_llm_reply(content, locale)


async def compose_narrative(
    score: int,
    target: Target,
    market: MarketFacts,
    holder_cluster: HolderCluster | None,
    findings: list[Finding],
    llm: LlmAdapter,
    locale: str,
    timeout: float,
) -> Narrative:
    fallback = fallback_narrative(score, target, market, holder_cluster, locale)
    if not llm.configured:
        return fallback
    prompt = build_prompt(score, target, market, findings, locale)
    outcome = await bounded(_llm_narrative(llm, prompt, locale), timeout, source="openrouter")
    if not outcome.ok:
        logger.info("narrative_fallback_used", status=outcome.status, reason=outcome.error)
        return fallback
    return outcome.value
