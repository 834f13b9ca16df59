"""MemeRadar tag-classification adapter (wallet AI tags). Needs MR_TOKEN."""

from __future__ import annotations

from typing import Any

from backend_brief.providers.base import ProviderAdapter, unwrap_list

MAX_TAGS = 24


def normalize_tags(payload: Any, wallet: str) -> list[str]:
    rows = unwrap_list(payload)
    first = next(
        (r for r in rows if isinstance(r, dict) and str(r.get("address") or "").lower() == wallet.lower()),
        rows[0] if rows else None,
    )
    tags = first.get("tags") if isinstance(first, dict) else None
    if not isinstance(tags, list):
        return []
    return [str(t) for t in tags][:MAX_TAGS]


class MemeRadarAdapter(ProviderAdapter):
    source_id = "memeradar"
    default_timeout = 2.5

    @property
    def base_url(self) -> str:
        return self.settings.providers.memeradar_base

    @property
    def configured(self) -> bool:
        return self.settings.providers.has_memeradar

    def default_headers(self) -> dict[str, str]:
        return {
            "authorization": self.settings.providers.memeradar_token,
            "content-type": "application/json",
        }

    async def wallet_tags(self, wallet: str, contract: str | None = None) -> list[str] | None:
        if not self.configured:
            return None
        body = {
            "walletAddresses": [wallet],
            "chain": self.settings.providers.memeradar_chain,
            "contractAddress": contract or "",
            "bizType": "AI_Tag",
        }
        return await self.query(
            "POST",
            self.url("/api/v0/util/query/wallet_tags_v2"),
            lambda payload: normalize_tags(payload, wallet),
            json=body,
        )
