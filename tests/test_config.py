"""
Tests for environment-driven settings (config.env helpers and BriefSettings.from_env).
"""

from __future__ import annotations

from backend_brief.config.env import env_flag, env_int, env_str, normalize_api_key, normalize_bearer
from backend_brief.config.settings import BriefSettings


def test_env_helpers(monkeypatch):
    monkeypatch.setenv("BRIEF_TEST_A", "  ")
    monkeypatch.setenv("BRIEF_TEST_B", " value ")
    monkeypatch.setenv("BRIEF_TEST_FLAG", "TRUE")
    monkeypatch.setenv("BRIEF_TEST_INT", "nope")
    assert env_str("BRIEF_TEST_A", "BRIEF_TEST_B") == "value"
    assert env_flag("BRIEF_TEST_FLAG")
    assert not env_flag("BRIEF_TEST_MISSING")
    assert env_int("BRIEF_TEST_INT", 7) == 7


def test_key_normalization():
    assert normalize_api_key('Bearer "abc"') == "abc"
    assert normalize_api_key("  'k'  ") == "k"
    assert normalize_bearer("tok") == "Bearer tok"
    assert normalize_bearer("bearer tok") == "bearer tok"
    assert normalize_bearer("") == ""


def test_from_env(monkeypatch):
    """Aliases, feature flags and pool sizes are read from the environment."""
    monkeypatch.setenv("BSC_RPC_URL", "http://node.local")
    monkeypatch.setenv("MORALIS_API_KEY", "Bearer mk")
    monkeypatch.delenv("ARKM_API_KEY", raising=False)
    monkeypatch.setenv("ARKHAM_API_KEY", "ak")
    monkeypatch.setenv("FR_TOKEN", "frt")
    monkeypatch.setenv("FR_FETCH_ALT_WALLETS", "1")
    monkeypatch.setenv("GMGN_DISABLE", "1")
    monkeypatch.setenv("HOLDER_CODE_CHECK_CONCURRENCY", "0")
    monkeypatch.setenv("HOLDER_PROFILE_CONCURRENCY", "9")
    monkeypatch.setenv("API_PORT", "9100")

    s = BriefSettings.from_env()

    assert s.rpc_url == "http://node.local"
    assert s.providers.moralis_api_key == "mk"
    assert s.providers.arkham_api_key == "ak"
    assert s.providers.frontrun_token == "Bearer frt"
    assert s.providers.frontrun_alt_wallets is True
    assert s.providers.has_gmgn is False
    assert s.holders.code_check_concurrency == 1
    assert s.holders.profile_concurrency == 9
    assert s.api_port == 9100


def test_bscscan_endpoints_custom_first():
    s = BriefSettings()
    s.providers.bscscan_base = "https://api.bscscan.com/api"
    endpoints = s.providers.bscscan_endpoints()
    assert endpoints[0] == "https://api.bscscan.com/api"
    assert len(endpoints) == len(set(endpoints))
