"""
Localization helpers for findings, narrative and runtime notes.

Supported locales: en, zh-CN, zh-TW, ko. Unknown or empty input maps to zh-CN.
Text maps are plain dicts keyed by locale; zh-TW may be omitted and falls back
to zh-CN.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

LOCALE_EN = "en"
LOCALE_ZH_CN = "zh-CN"
LOCALE_ZH_TW = "zh-TW"
LOCALE_KO = "ko"

SUPPORTED_LOCALES = (LOCALE_EN, LOCALE_ZH_CN, LOCALE_ZH_TW, LOCALE_KO)
DEFAULT_LOCALE = LOCALE_ZH_CN


def normalize_locale(raw: str | None) -> str:
    """Map a browser-ish language tag onto a supported locale."""
    v = (raw or "").strip().lower()
    if not v:
        return DEFAULT_LOCALE
    if v == "en" or v.startswith("en-"):
        return LOCALE_EN
    if v in ("ko", "kr") or v.startswith("ko-"):
        return LOCALE_KO
    if v in ("zh-tw", "zh-hant") or v.startswith("zh-hk") or v.startswith("zh-mo"):
        return LOCALE_ZH_TW
    return DEFAULT_LOCALE


def is_zh_locale(locale: str) -> bool:
    return locale in (LOCALE_ZH_CN, LOCALE_ZH_TW)


def pick_text(locale: str, texts: dict[str, str]) -> str:
    """Select the text for locale. zh-TW falls back to zh-CN; anything unknown uses zh-CN."""
    if locale == LOCALE_ZH_TW:
        return texts.get(LOCALE_ZH_TW) or texts[LOCALE_ZH_CN]
    if locale in (LOCALE_EN, LOCALE_KO):
        return texts[locale]
    return texts[LOCALE_ZH_CN]


def join_human_list(locale: str, values: list[str]) -> str:
    if not values:
        return ""
    return ("、" if is_zh_locale(locale) else ", ").join(values)


def sentence_join(locale: str, parts: list[str]) -> str:
    """CJK sentences are concatenated without spaces."""
    return ("" if is_zh_locale(locale) else " ").join(parts)


def paren(locale: str, text: str) -> str:
    """Parenthesized suffix: full-width for Chinese, ASCII with a leading space otherwise."""
    if not text:
        return ""
    return f"（{text}）" if is_zh_locale(locale) else f" ({text})"


def format_usd(value: float) -> str:
    """$12,345 style, rounded half-up to whole dollars."""
    dollars = int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    return f"${dollars:,}"
