"""DexScreener market-pair adapter: best-liquidity pair for a token on the target chain."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from backend_brief.providers.base import ProviderAdapter, str_or_none, to_num


@dataclass
class PairQuote:
    liquidity_usd: float | None = None
    fdv_usd: float | None = None
    url: str | None = None
    pair_address: str | None = None
    dex_id: str | None = None


def _liquidity(pair: dict[str, Any]) -> float:
    liq = pair.get("liquidity")
    if isinstance(liq, dict):
        return to_num(liq.get("usd")) or 0.0
    return 0.0


def select_best_pair(payload: Any, chain_id: str) -> PairQuote | None:
    """Highest liquidity.usd among pairs whose chainId matches; None if no pair on chain."""
    pairs = payload.get("pairs") if isinstance(payload, dict) else None
    if not isinstance(pairs, list):
        return None
    on_chain = [
        p for p in pairs
        if isinstance(p, dict) and str(p.get("chainId") or "").lower() == chain_id
    ]
    if not on_chain:
        return None
    best = max(on_chain, key=_liquidity)
    return PairQuote(
        liquidity_usd=_liquidity(best),
        fdv_usd=to_num(best.get("fdv")) or 0.0,
        url=str_or_none(best.get("url")),
        pair_address=str_or_none(best.get("pairAddress")),
        dex_id=str_or_none(best.get("dexId")),
    )


class DexScreenerAdapter(ProviderAdapter):
    source_id = "dexscreener"
    default_timeout = 3.5

    @property
    def base_url(self) -> str:
        return self.settings.providers.dexscreener_base

    async def best_pair(self, token: str) -> PairQuote | None:
        chain_id = self.settings.dex_chain_id
        return await self.query(
            "GET",
            self.url(f"/latest/dex/tokens/{token}"),
            lambda payload: select_best_pair(payload, chain_id),
        )
