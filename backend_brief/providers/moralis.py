"""
Moralis holder/transfer adapter.

Top token owners, cursor-paginated token transfers and token metadata.
Requires MORALIS_API_KEY; without it every method returns None.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from backend_brief.providers.base import ProviderAdapter, str_or_none
from backend_brief.utils.address_utils import is_valid_address

MAX_PAGE_LIMIT = 100


@dataclass
class TokenOwner:
    owner_address: str
    balance: str | None = None


@dataclass
class TokenTransfer:
    from_address: str
    to_address: str
    tx_hash: str | None = None
    timestamp: int | None = None


@dataclass
class OwnersPage:
    owners: list[TokenOwner] = field(default_factory=list)
    cursor: str | None = None


@dataclass
class TransferPage:
    transfers: list[TokenTransfer] = field(default_factory=list)
    cursor: str | None = None


def _parse_iso_ts(raw: Any) -> int | None:
    if not isinstance(raw, str) or not raw:
        return None
    try:
        return int(datetime.fromisoformat(raw.replace("Z", "+00:00")).timestamp())
    except ValueError:
        return None


def _cursor(payload: dict[str, Any]) -> str | None:
    c = payload.get("cursor")
    return c if isinstance(c, str) and c.strip() else None


def normalize_owners(payload: Any) -> OwnersPage:
    if not isinstance(payload, dict):
        return OwnersPage()
    rows = payload.get("result") if isinstance(payload.get("result"), list) else []
    owners: list[TokenOwner] = []
    for it in rows:
        if not isinstance(it, dict):
            continue
        addr = str(it.get("owner_address") or it.get("ownerAddress") or "").lower()
        if not is_valid_address(addr):
            continue
        owners.append(TokenOwner(owner_address=addr, balance=str_or_none(it.get("balance"))))
    return OwnersPage(owners=owners, cursor=_cursor(payload))


def normalize_transfers(payload: Any) -> TransferPage:
    if not isinstance(payload, dict):
        return TransferPage()
    rows = payload.get("result") if isinstance(payload.get("result"), list) else []
    transfers: list[TokenTransfer] = []
    for it in rows:
        if not isinstance(it, dict):
            continue
        src = str(it.get("from_address") or it.get("fromAddress") or "").lower()
        dst = str(it.get("to_address") or it.get("toAddress") or "").lower()
        if not (is_valid_address(src) and is_valid_address(dst)):
            continue
        transfers.append(TokenTransfer(
            from_address=src,
            to_address=dst,
            tx_hash=str_or_none(it.get("transaction_hash")) or str_or_none(it.get("transactionHash")),
            timestamp=_parse_iso_ts(it.get("block_timestamp") or it.get("blockTimestamp")),
        ))
    return TransferPage(transfers=transfers, cursor=_cursor(payload))


def normalize_metadata(payload: Any) -> dict[str, Any] | None:
    if isinstance(payload, list):
        rows = payload
    elif isinstance(payload, dict) and isinstance(payload.get("result"), list):
        rows = payload["result"]
    else:
        rows = []
    first = rows[0] if rows else None
    return first if isinstance(first, dict) else None


class MoralisAdapter(ProviderAdapter):
    source_id = "moralis"

    @property
    def base_url(self) -> str:
        return self.settings.providers.moralis_base

    @property
    def configured(self) -> bool:
        return self.settings.providers.has_moralis

    @property
    def chain(self) -> str:
        return self.settings.dex_chain_id

    def default_headers(self) -> dict[str, str]:
        return {"accept": "application/json", "X-API-Key": self.settings.providers.moralis_api_key}

    def _page_params(self, limit: int, order: str | None, cursor: str | None) -> dict[str, Any]:
        params: dict[str, Any] = {
            "chain": self.chain,
            "limit": max(1, min(MAX_PAGE_LIMIT, limit)),
        }
        if order:
            params["order"] = order
        if cursor:
            params["cursor"] = cursor
        return params

    async def token_owners(
        self, token: str, *, limit: int = 100, order: str = "DESC", cursor: str | None = None
    ) -> OwnersPage | None:
        """Token holders ordered by balance."""
        if not self.configured:
            return None
        return await self.query(
            "GET",
            self.url(f"/erc20/{token}/owners"),
            normalize_owners,
            params=self._page_params(limit, order, cursor),
        )

    async def token_transfers(
        self, token: str, *, limit: int = 100, order: str | None = "ASC", cursor: str | None = None
    ) -> TransferPage | None:
        """One page of the token's transfer log."""
        if not self.configured:
            return None
        return await self.query(
            "GET",
            self.url(f"/erc20/{token}/transfers"),
            normalize_transfers,
            params=self._page_params(limit, order, cursor),
        )

    async def token_metadata(self, token: str) -> dict[str, Any] | None:
        if not self.configured:
            return None
        return await self.query(
            "GET",
            self.url("/erc20/metadata"),
            normalize_metadata,
            params={"chain": self.chain, "addresses": token},
        )
