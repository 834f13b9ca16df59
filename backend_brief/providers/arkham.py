"""Arkham entity-intelligence adapter (address_enriched). Needs ARKM_API_KEY."""

from __future__ import annotations

from typing import Any

from backend_brief.analytics.models import EntityIntel
from backend_brief.core.exceptions import SourceUnavailable
from backend_brief.providers.base import ProviderAdapter, str_or_none

MAX_TAGS = 24
ARKHAM_EXPLORER_URL = "https://intel.arkm.com/explorer/address/"


def parse_tag_list(raw: Any) -> list[str]:
    if not isinstance(raw, list):
        return []
    out: list[str] = []
    for x in raw:
        if isinstance(x, str):
            s = x
        elif isinstance(x, dict):
            s = str(x.get("label") or x.get("tag") or x.get("tagParams") or "")
        else:
            s = ""
        s = s.strip()
        if s:
            out.append(s)
    return out[:MAX_TAGS]


def normalize_enriched(payload: Any) -> EntityIntel:
    if not isinstance(payload, dict):
        raise SourceUnavailable("arkham", "unexpected payload")
    entity = payload.get("arkhamEntity") if isinstance(payload.get("arkhamEntity"), dict) else {}
    label = payload.get("arkhamLabel") if isinstance(payload.get("arkhamLabel"), dict) else {}
    etype = entity.get("type")
    is_user = payload.get("isUserAddress")
    return EntityIntel(
        entity_name=str_or_none(entity.get("name")),
        entity_type=etype.lower() if isinstance(etype, str) else None,
        label_name=str_or_none(label.get("name")),
        tags=parse_tag_list(payload.get("populatedTags")),
        is_user_address=is_user if isinstance(is_user, bool) else None,
    )


class ArkhamAdapter(ProviderAdapter):
    source_id = "arkham"
    default_timeout = 2.5

    @property
    def base_url(self) -> str:
        return self.settings.providers.arkham_base

    @property
    def configured(self) -> bool:
        return self.settings.providers.has_arkham

    def default_headers(self) -> dict[str, str]:
        return {"accept": "application/json", "API-Key": self.settings.providers.arkham_api_key}

    @staticmethod
    def explorer_url(address: str) -> str:
        return f"{ARKHAM_EXPLORER_URL}{address}"

    async def address_enriched(self, address: str) -> EntityIntel | None:
        if not self.configured:
            return None
        return await self.query(
            "GET", self.url(f"/intelligence/address_enriched/{address}"), normalize_enriched
        )
