"""
GMGN adapter: wallet holdings (portfolio) and token trade sample.

Public endpoints work with default client identifiers; GMGN_COOKIE improves
stability. GMGN_DISABLE=1 turns the source off.
"""

from __future__ import annotations

from typing import Any

from backend_brief.analytics.models import Holding, Portfolio, Trade, TradeSample
from backend_brief.providers.base import ProviderAdapter, str_or_none, to_num

GMGN_CHAIN = "bsc"
MAX_LIMIT = 200
MAX_WALLET_TAGS = 8

# Client identifiers the public web app sends
COMMON_PARAMS = {
    "device_id": "81479bb3-d0c8-4555-b508-1edf90932e77",
    "fp_did": "ff72472fafb25ec15b611cca304e3f95",
    "client_id": "gmgn_web_20251105-6680-c2c5d12",
    "from_app": "gmgn",
    "app_ver": "20251105-6680-c2c5d12",
    "tz_name": "Asia/Shanghai",
    "tz_offset": "28800",
    "app_lang": "zh-CN",
    "os": "web",
    "worker": "0",
}


def _data_list(payload: Any, key: str) -> list[Any]:
    data = payload.get("data") if isinstance(payload, dict) else None
    rows = data.get(key) if isinstance(data, dict) else None
    return rows if isinstance(rows, list) else []


def normalize_holdings(payload: Any, limit: int) -> Portfolio:
    holdings: list[Holding] = []
    for rec in _data_list(payload, "holdings"):
        if not isinstance(rec, dict):
            continue
        token = rec.get("token") if isinstance(rec.get("token"), dict) else {}
        tags_raw = rec.get("wallet_token_tags")
        tags = [str(t) for t in tags_raw if t][:MAX_WALLET_TAGS] if isinstance(tags_raw, list) else []
        holdings.append(Holding(
            token_symbol=str_or_none(token.get("symbol")),
            token_address=str_or_none(token.get("address")) or str_or_none(token.get("token_address")),
            usd_value=to_num(rec.get("usd_value")),
            realized_profit_usd=to_num(rec.get("realized_profit")),
            unrealized_profit_usd=to_num(rec.get("unrealized_profit")),
            total_profit_usd=to_num(rec.get("total_profit")),
            wallet_tags=tags,
        ))
        if len(holdings) >= limit:
            break
    return Portfolio(holdings=holdings)


def normalize_trades(payload: Any, limit: int) -> TradeSample:
    trades: list[Trade] = []
    for rec in _data_list(payload, "history"):
        if not isinstance(rec, dict):
            continue
        trades.append(Trade(
            maker=str_or_none(rec.get("maker")),
            amount_usd=to_num(rec.get("amount_usd")),
            timestamp=to_num(rec.get("timestamp")),
            event=str_or_none(rec.get("event")),
            tx_hash=str_or_none(rec.get("tx_hash")),
        ))
        if len(trades) >= limit:
            break
    return TradeSample(trades=trades)


class GmgnAdapter(ProviderAdapter):
    source_id = "gmgn"
    default_timeout = 2.5

    @property
    def base_url(self) -> str:
        return self.settings.providers.gmgn_base

    @property
    def configured(self) -> bool:
        return self.settings.providers.has_gmgn

    def default_headers(self) -> dict[str, str]:
        headers = {"accept": "application/json, text/plain, */*"}
        if self.settings.providers.gmgn_cookie:
            headers["cookie"] = self.settings.providers.gmgn_cookie
        return headers

    @staticmethod
    def address_url(address: str) -> str:
        return f"https://gmgn.ai/{GMGN_CHAIN}/address/{address}"

    @staticmethod
    def token_url(address: str) -> str:
        return f"https://gmgn.ai/{GMGN_CHAIN}/token/{address}"

    async def wallet_holdings(self, wallet: str, *, limit: int = 60) -> Portfolio | None:
        if not self.configured:
            return None
        limit = max(1, min(MAX_LIMIT, limit))
        params = {
            **COMMON_PARAMS,
            "limit": limit,
            "orderby": "last_active_timestamp",
            "direction": "desc",
            "showsmall": "true",
            "sellout": "true",
            "hide_abnormal": "false",
        }
        return await self.query(
            "GET",
            self.url(f"/api/v1/wallet_holdings/{GMGN_CHAIN}/{wallet}"),
            lambda payload: normalize_holdings(payload, limit),
            params=params,
        )

    async def token_trades(self, token: str, *, limit: int = 80) -> TradeSample | None:
        if not self.configured:
            return None
        limit = max(1, min(MAX_LIMIT, limit))
        return await self.query(
            "GET",
            self.url(f"/vas/api/v1/token_trades/{GMGN_CHAIN}/{token}"),
            lambda payload: normalize_trades(payload, limit),
            params={**COMMON_PARAMS, "limit": limit},
        )
