"""
Frontrun address-label adapter.

Wallet metadata: batch-query first, single-query fallback. Alt (linked)
wallets are opt-in via FR_FETCH_ALT_WALLETS=1. Needs FR_TOKEN or FR_COOKIE.
"""

from __future__ import annotations

from typing import Any

from backend_brief.analytics.models import LabelProfile, TokenStat
from backend_brief.brief_logging import get_logger
from backend_brief.core.exceptions import SourceUnavailable
from backend_brief.providers.base import BROWSER_USER_AGENT, ProviderAdapter, str_or_none, to_num, unwrap_list

logger = get_logger(__name__)

FR_CHAIN = "BSC"
DEFAULT_ORIGIN = "chrome-extension://cahedbegdkagmcjfolhdlechbkeaieki"
MAX_TAGS = 24
MAX_TOKEN_STATS = 20
MAX_ALT_WALLETS = 30


def normalize_metadata(raw: Any) -> LabelProfile | None:
    """Unwrap data.data / data / root and build a LabelProfile."""
    if not isinstance(raw, dict):
        return None
    data1 = raw.get("data")
    if isinstance(data1, dict):
        inner = data1.get("data") if isinstance(data1.get("data"), dict) else data1
    elif data1 is None:
        inner = raw
    else:
        inner = data1
    if not isinstance(inner, dict):
        return None

    tags_raw = inner.get("tags")
    tags = [str(t) for t in tags_raw] if isinstance(tags_raw, list) else []
    stats_raw = inner.get("tokenStats")
    stats: list[TokenStat] = []
    if isinstance(stats_raw, list):
        for item in stats_raw[:MAX_TOKEN_STATS]:
            if not isinstance(item, dict):
                item = {}
            pnl = item.get("pnlUsd")
            stats.append(TokenStat(
                chain=str_or_none(item.get("chain")),
                token_symbol=str_or_none(item.get("tokenSymbol")),
                token_mint=str_or_none(item.get("tokenMint")),
                pnl_usd=to_num(pnl) if isinstance(pnl, (int, float)) else None,
            ))
    verified = inner.get("verified")
    domain = inner.get("primaryDomain")
    return LabelProfile(
        primary_label=str_or_none(inner.get("primaryLabel")),
        verified=verified if isinstance(verified, bool) else None,
        tags=tags[:MAX_TAGS],
        primary_domain=domain if isinstance(domain, str) else None,
        token_stats=stats,
    )


def pick_batch_hit(payload: Any, address: str) -> Any:
    rows = unwrap_list(payload)
    for row in rows:
        if isinstance(row, dict) and str(row.get("address") or "").lower() == address.lower():
            return row
    return rows[0] if rows else None


def normalize_alt_wallets(payload: Any) -> list[str]:
    data: Any = payload
    if isinstance(payload, dict):
        data1 = payload.get("data")
        if isinstance(data1, dict):
            data = data1.get("data") if data1.get("data") is not None else data1
        elif data1 is not None:
            data = data1
    raw = data.get("altWallets", data) if isinstance(data, dict) else data
    if isinstance(raw, dict) and isinstance(raw.get("altWallets"), list):
        raw = raw["altWallets"]
    if not isinstance(raw, list):
        return []
    out: list[str] = []
    for x in raw:
        if isinstance(x, str):
            s = x.strip()
        elif isinstance(x, dict) and isinstance(x.get("address"), str):
            s = x["address"].strip()
        else:
            s = ""
        if s:
            out.append(s)
    return out[:MAX_ALT_WALLETS]


class FrontrunAdapter(ProviderAdapter):
    source_id = "frontrun"
    default_timeout = 2.5

    @property
    def base_url(self) -> str:
        return self.settings.providers.frontrun_base

    @property
    def configured(self) -> bool:
        return self.settings.providers.has_frontrun

    def default_headers(self) -> dict[str, str]:
        keys = self.settings.providers
        headers = {
            "accept": "application/json, text/plain, */*",
            "content-type": "application/json",
            "user-agent": BROWSER_USER_AGENT,
            "x-copilot-client-version": keys.frontrun_client_version,
            "origin": keys.frontrun_origin or DEFAULT_ORIGIN,
            "sec-fetch-dest": "empty",
            "sec-fetch-mode": "cors",
            "sec-fetch-site": "none",
        }
        if keys.frontrun_cookie:
            headers["cookie"] = keys.frontrun_cookie
        if keys.frontrun_token:
            headers["authorization"] = keys.frontrun_token
        return headers

    def profile_url(self, address: str) -> str:
        """Public metadata URL, also used as provenance evidence."""
        return self.url(f"/api/v2/wallet/metadata/{FR_CHAIN}/{address}")

    async def wallet_metadata(self, address: str, *, timeout: float | None = None) -> LabelProfile | None:
        if not self.configured:
            return None
        body = {
            "wallets": [{"chain": FR_CHAIN, "address": address}],
            "showMentionedTweets": True,
            "showLabels": True,
        }
        try:
            payload = await self.fetch_json(
                "POST", self.url("/api/v2/wallet/metadata/batch-query"), json=body, timeout=timeout
            )
        except SourceUnavailable as e:
            logger.debug("frontrun_batch_query_failed", error=str(e))
        else:
            hit = pick_batch_hit(payload, address)
            profile = normalize_metadata({"data": hit}) if hit is not None else None
            if profile is not None:
                return profile
        return await self.query("GET", self.profile_url(address), normalize_metadata, timeout=timeout)

    async def alt_wallets(self, address: str) -> list[str] | None:
        if not self.configured or not self.settings.providers.frontrun_alt_wallets:
            return None
        return await self.query(
            "GET",
            self.url(f"/api/v1/wallet/alt-wallets/{FR_CHAIN}/{address}"),
            normalize_alt_wallets,
        )
