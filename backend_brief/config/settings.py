"""
Application settings.

Typed, explicit configuration passed into every provider adapter and analytics
module. Adapters never read the environment themselves: BriefSettings.from_env()
is the only place that does, so tests build settings directly.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass, field

from backend_brief.config.env import (
    DEFAULT_BSC_RPC_URL,
    env_flag,
    env_int,
    env_str,
    load_brief_env,
    normalize_api_key,
    normalize_bearer,
)

DEFAULT_DEXSCREENER_BASE = "https://api.dexscreener.com"
DEFAULT_MORALIS_BASE = "https://deep-index.moralis.io/api/v2.2"
DEFAULT_FR_BASE = "https://loadbalance.frontrun.pro"
DEFAULT_MR_BASE = "https://chaininsight.vip"
DEFAULT_ARKHAM_BASE = "https://api.arkm.com"
DEFAULT_GMGN_BASE = "https://gmgn.ai"
DEFAULT_OPENROUTER_BASE = "https://openrouter.ai/api/v1"
DEFAULT_OPENROUTER_MODEL = "x-ai/grok-4-fast"
DEFAULT_EXPLORER_BASE = "https://bscscan.com"

BSCSCAN_DEFAULT_ENDPOINTS = (
    "https://api.etherscan.io/v2/api",
    "https://api.bscscan.com/v2/api",
    "https://api.bscscan.com/api",
    "https://api.etherscan.io/api",
)


@dataclass
class ProviderKeys:
    """Credentials and base URLs for each external data source. Empty string = not configured."""

    moralis_api_key: str = ""
    moralis_base: str = DEFAULT_MORALIS_BASE
    dexscreener_base: str = DEFAULT_DEXSCREENER_BASE
    frontrun_base: str = DEFAULT_FR_BASE
    frontrun_token: str = ""
    frontrun_cookie: str = ""
    frontrun_client_version: str = "0.0.182"
    frontrun_origin: str = ""
    frontrun_alt_wallets: bool = False
    memeradar_base: str = DEFAULT_MR_BASE
    memeradar_token: str = ""
    memeradar_chain: str = "BSC"
    arkham_api_key: str = ""
    arkham_base: str = DEFAULT_ARKHAM_BASE
    gmgn_base: str = DEFAULT_GMGN_BASE
    gmgn_cookie: str = ""
    gmgn_disabled: bool = False
    bscscan_api_key: str = ""
    bscscan_base: str = ""

    @property
    def has_moralis(self) -> bool:
        return bool(self.moralis_api_key)

    @property
    def has_frontrun(self) -> bool:
        return bool(self.frontrun_token or self.frontrun_cookie)

    @property
    def has_memeradar(self) -> bool:
        return bool(self.memeradar_token)

    @property
    def has_arkham(self) -> bool:
        return bool(self.arkham_api_key)

    @property
    def has_gmgn(self) -> bool:
        # Public GMGN reads work with default client identifiers; a cookie only improves stability.
        return not self.gmgn_disabled

    @property
    def has_bscscan(self) -> bool:
        return bool(self.bscscan_api_key)

    def bscscan_endpoints(self) -> list[str]:
        out: list[str] = []
        for url in (self.bscscan_base, *BSCSCAN_DEFAULT_ENDPOINTS):
            if url and url not in out:
                out.append(url)
        return out


@dataclass
class Timeouts:
    """Per-call deadlines in seconds. A call that misses its deadline counts as 'no data'."""

    rpc_request: float = 8.0
    resolve_metadata_lookup: float = 2.0
    resolve_market_lookup: float = 1.8
    market: float = 3.5
    intel: float = 2.5
    explorer_activity: float = 6.5
    explorer_request: float = 4.5
    holders: float = 3.5
    holder_profile: float = 1.2
    transfer_page: float = 3.2
    llm: float = 4.5


@dataclass
class HolderScanLimits:
    """Caps for the holder-cluster scan. Pool sizes are tunable for load testing."""

    owners_limit: int = 60
    max_candidates: int = 24
    max_top_holders: int = 12
    code_check_concurrency: int = 5
    profile_concurrency: int = 4
    transfer_page_size: int = 100
    max_transfer_pages: int = 6
    max_groups_reported: int = 4
    max_samples: int = 4


@dataclass
class LlmSettings:
    api_key: str = ""
    base_url: str = DEFAULT_OPENROUTER_BASE
    model: str = DEFAULT_OPENROUTER_MODEL
    http_referer: str = ""
    x_title: str = ""
    max_tokens: int = 350
    temperature: float = 0.2

    @property
    def configured(self) -> bool:
        return bool(self.api_key)


@dataclass
class BriefSettings:
    """Top-level settings for one service process."""

    rpc_url: str = DEFAULT_BSC_RPC_URL
    chain_id: int = 56
    dex_chain_id: str = "bsc"
    explorer_base: str = DEFAULT_EXPLORER_BASE
    api_host: str = "0.0.0.0"
    api_port: int = 8787
    providers: ProviderKeys = field(default_factory=ProviderKeys)
    timeouts: Timeouts = field(default_factory=Timeouts)
    holders: HolderScanLimits = field(default_factory=HolderScanLimits)
    llm: LlmSettings = field(default_factory=LlmSettings)

    @classmethod
    def from_env(cls) -> "BriefSettings":
        """Build settings from environment variables (.env loaded first)."""
        load_brief_env()
        providers = ProviderKeys(
            moralis_api_key=normalize_api_key(env_str("MORALIS_API_KEY")),
            frontrun_base=env_str("FR_BASE") or DEFAULT_FR_BASE,
            frontrun_token=normalize_bearer(env_str("FR_TOKEN")),
            frontrun_cookie=env_str("FR_COOKIE"),
            frontrun_client_version=env_str("FR_CLIENT_VERSION") or "0.0.182",
            frontrun_origin=env_str("FR_ORIGIN"),
            frontrun_alt_wallets=env_flag("FR_FETCH_ALT_WALLETS"),
            memeradar_base=env_str("MR_BASE") or DEFAULT_MR_BASE,
            memeradar_token=env_str("MR_TOKEN"),
            memeradar_chain=env_str("MR_CHAIN") or "BSC",
            arkham_api_key=env_str("ARKM_API_KEY", "ARKHAM_API_KEY"),
            arkham_base=env_str("ARKHAM_BASE") or DEFAULT_ARKHAM_BASE,
            gmgn_base=env_str("GMGN_BASE") or DEFAULT_GMGN_BASE,
            gmgn_cookie=env_str("GMGN_COOKIE"),
            gmgn_disabled=env_flag("GMGN_DISABLE"),
            bscscan_api_key=normalize_api_key(
                env_str("BSCSCAN_API_KEY", "ETHERSCAN_API_KEY", "ETHERSCAN_V2_API_KEY")
            ),
            bscscan_base=env_str("BSCSCAN_BASE"),
        )
        holders = HolderScanLimits(
            code_check_concurrency=max(1, env_int("HOLDER_CODE_CHECK_CONCURRENCY", 5)),
            profile_concurrency=max(1, env_int("HOLDER_PROFILE_CONCURRENCY", 4)),
        )
        llm = LlmSettings(
            api_key=env_str("OPENROUTER_API_KEY", "AI_API_KEY"),
            base_url=env_str("OPENROUTER_BASE_URL") or DEFAULT_OPENROUTER_BASE,
            model=env_str("OPENROUTER_MODEL_ID", "AI_MODEL") or DEFAULT_OPENROUTER_MODEL,
            http_referer=env_str("OPENROUTER_HTTP_REFERER"),
            x_title=env_str("OPENROUTER_X_TITLE"),
        )
        return cls(
            rpc_url=env_str("BSC_RPC_URL") or DEFAULT_BSC_RPC_URL,
            api_host=env_str("API_HOST") or "0.0.0.0",
            api_port=env_int("API_PORT", env_int("PORT", 8787)),
            providers=providers,
            holders=holders,
            llm=llm,
            timeouts=Timeouts(),
        )


@functools.lru_cache(maxsize=1)
def get_settings() -> BriefSettings:
    """Return process-wide settings, read from the environment on first call."""
    return BriefSettings.from_env()
