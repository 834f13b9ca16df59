"""
External data-source adapters.

One adapter per source, all built on providers.base.ProviderAdapter and
sharing one httpx.AsyncClient per request. ProviderSet bundles them so the
analytics modules take a single argument.
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from backend_brief.config.settings import BriefSettings
from backend_brief.providers.arkham import ArkhamAdapter
from backend_brief.providers.bscscan import BscScanAdapter
from backend_brief.providers.dexscreener import DexScreenerAdapter
from backend_brief.providers.frontrun import FrontrunAdapter
from backend_brief.providers.gmgn import GmgnAdapter
from backend_brief.providers.llm import LlmAdapter
from backend_brief.providers.memeradar import MemeRadarAdapter
from backend_brief.providers.moralis import MoralisAdapter


@dataclass
class ProviderSet:
    dexscreener: DexScreenerAdapter
    moralis: MoralisAdapter
    frontrun: FrontrunAdapter
    memeradar: MemeRadarAdapter
    arkham: ArkhamAdapter
    gmgn: GmgnAdapter
    bscscan: BscScanAdapter
    llm: LlmAdapter

    @classmethod
    def build(cls, client: httpx.AsyncClient, settings: BriefSettings) -> "ProviderSet":
        return cls(
            dexscreener=DexScreenerAdapter(client, settings),
            moralis=MoralisAdapter(client, settings),
            frontrun=FrontrunAdapter(client, settings),
            memeradar=MemeRadarAdapter(client, settings),
            arkham=ArkhamAdapter(client, settings),
            gmgn=GmgnAdapter(client, settings),
            bscscan=BscScanAdapter(client, settings),
            llm=LlmAdapter(client, settings),
        )


__all__ = [
    "ArkhamAdapter",
    "BscScanAdapter",
    "DexScreenerAdapter",
    "FrontrunAdapter",
    "GmgnAdapter",
    "LlmAdapter",
    "MemeRadarAdapter",
    "MoralisAdapter",
    "ProviderSet",
]
