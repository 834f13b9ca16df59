"""
Tests for the runtime report: per-source status, enhanced/fallback mode and notes.
"""

from __future__ import annotations

from backend_brief.analytics.models import IntelFacts, MarketFacts
from backend_brief.analytics.runtime_report import build_runtime_report, source_state
from backend_brief.config.settings import ProviderKeys

ORDER = ["bsc_rpc", "dexscreener", "moralis", "frontrun", "memeradar", "arkham", "gmgn", "bscscan", "openrouter"]


def _statuses(report):
    return {s.id: s.status for s in report.sources}


def test_source_state():
    assert source_state(True, False) == "live"
    assert source_state(False, True) == "fallback"
    assert source_state(False, False) == "disabled"


def test_bare_deployment_is_fallback_mode():
    """Only the chain RPC answered: mode is fallback even though bsc_rpc is live."""
    keys = ProviderKeys(gmgn_disabled=True)
    report = build_runtime_report(keys, IntelFacts(), MarketFacts(), False, False, "en")
    assert [s.id for s in report.sources] == ORDER
    st = _statuses(report)
    assert st["bsc_rpc"] == "live"
    assert st["dexscreener"] == "fallback"
    assert st["moralis"] == "disabled"
    assert st["gmgn"] == "disabled"
    assert st["openrouter"] == "disabled"
    assert report.mode == "fallback"


def test_live_market_makes_enhanced():
    report = build_runtime_report(ProviderKeys(), IntelFacts(), MarketFacts(source_status="api"), False, False, "en")
    assert _statuses(report)["dexscreener"] == "live"
    assert report.mode == "enhanced"


def test_configured_but_silent_is_fallback():
    keys = ProviderKeys(arkham_api_key="k", frontrun_token="Bearer t")
    intel = IntelFacts()
    intel.source_status["frontrun"] = "api"
    report = build_runtime_report(keys, intel, MarketFacts(), False, True, "en")
    st = _statuses(report)
    assert st["arkham"] == "fallback"
    assert st["frontrun"] == "live"
    assert st["openrouter"] == "fallback"
    notes = {s.id: s.note for s in report.sources}
    assert notes["arkham"] == "api configured; request failed or no signal"
    assert notes["frontrun"] == "live: batch-query -> single-query fallback"
    assert notes["openrouter"] == "llm summarizer configured"


def test_notes_are_localized():
    report = build_runtime_report(ProviderKeys(), IntelFacts(), MarketFacts(), False, False, "ko")
    notes = {s.id: s.note for s in report.sources}
    assert notes["arkham"] == "미설정"
    zh = build_runtime_report(ProviderKeys(), IntelFacts(), MarketFacts(), True, True, "zh-CN")
    assert {s.id: s.note for s in zh.sources}["memeradar"] == "未配置"
    assert _statuses(zh)["openrouter"] == "live"
    assert zh.to_dict()["mode"] == "enhanced"


def test_moralis_status_follows_answers():
    """A Moralis key alone is not live; the source has to have answered this request."""
    keys = ProviderKeys(moralis_api_key="mk", gmgn_disabled=True)
    silent = build_runtime_report(keys, IntelFacts(), MarketFacts(), False, False, "en")
    assert _statuses(silent)["moralis"] == "fallback"
    assert {s.id: s.note for s in silent.sources}["moralis"] == "api configured; request failed or no signal"
    assert silent.mode == "fallback"

    answered = build_runtime_report(keys, IntelFacts(), MarketFacts(), False, False, "en", moralis_answered=True)
    assert _statuses(answered)["moralis"] == "live"
    assert answered.mode == "enhanced"

    missing = build_runtime_report(ProviderKeys(), IntelFacts(), MarketFacts(), False, False, "en")
    assert {s.id: s.note for s in missing.sources}["moralis"] == "api key missing"
