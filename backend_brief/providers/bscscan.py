"""
BscScan / Etherscan v2 explorer-activity adapter.

Four lookups run concurrently: recent txs, recent token transfers, the oldest
tx and contract creation. Each lookup walks the endpoint list in order and
stops at the first endpoint that answers with a usable result. A "no
transactions found" message is an empty result, not a failure.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Callable, TypeVar
from urllib.parse import urlparse

from backend_brief.analytics.models import ExplorerActivity
from backend_brief.brief_logging import get_logger
from backend_brief.core.exceptions import SourceUnavailable
from backend_brief.providers.base import ProviderAdapter

logger = get_logger(__name__)

T = TypeVar("T")

DAY_SEC = 24 * 3600
USER_AGENT = "brief-agent/1.0"


def is_legacy_endpoint(url: str) -> bool:
    """Legacy /api endpoints take no chainid parameter."""
    path = urlparse(url).path.lower().rstrip("/")
    return path.endswith("/api") and not path.endswith("/v2/api")


def is_no_tx_message(msg: str) -> bool:
    s = msg.lower()
    return "no transactions found" in s or "no records found" in s


def parse_ts(v: Any) -> int | None:
    try:
        n = int(float(v))
    except (TypeError, ValueError):
        return None
    return n if n > 0 else None


def _result_rows(result: Any) -> list[dict[str, Any]] | None:
    if isinstance(result, list):
        rows = result
    elif isinstance(result, dict) and isinstance(result.get("items"), list):
        rows = result["items"]
    elif isinstance(result, dict) and isinstance(result.get("data"), list):
        rows = result["data"]
    else:
        return None
    return [r for r in rows if isinstance(r, dict)]


def summarize_activity(
    tx_desc: list[dict[str, Any]] | None,
    token_tx_desc: list[dict[str, Any]] | None,
    tx_asc_one: list[dict[str, Any]] | None,
    creation: dict[str, Any] | None,
    now: float,
) -> ExplorerActivity:
    """24h counts from timeStamp plus first/last seen and contract creator."""
    cutoff = int(now) - DAY_SEC
    tx_rows = tx_desc or []
    token_rows = token_tx_desc or []

    def _count_recent(rows: list[dict[str, Any]]) -> int:
        return sum(1 for r in rows if (parse_ts(r.get("timeStamp")) or 0) >= cutoff)

    first_ts = None
    if tx_asc_one:
        first_ts = parse_ts(tx_asc_one[0].get("timeStamp"))
    if first_ts is None and tx_rows:
        first_ts = parse_ts(tx_rows[-1].get("timeStamp"))
    last_ts = parse_ts(tx_rows[0].get("timeStamp")) if tx_rows else None
    creator = str((creation or {}).get("contractCreator") or "").strip()
    tx_hash = str((creation or {}).get("txHash") or "").strip()
    return ExplorerActivity(
        tx_count_24h=_count_recent(tx_rows),
        token_transfer_count_24h=_count_recent(token_rows),
        first_tx_time=first_ts,
        last_tx_time=last_ts,
        contract_creator=creator or None,
        creation_tx_hash=tx_hash or None,
        is_contract=bool(creator),
    )


class BscScanAdapter(ProviderAdapter):
    source_id = "bscscan"
    default_timeout = 4.5

    @property
    def configured(self) -> bool:
        return self.settings.providers.has_bscscan

    def default_headers(self) -> dict[str, str]:
        return {"accept": "application/json", "user-agent": USER_AGENT}

    def _params(self, endpoint: str, **extra: Any) -> dict[str, Any]:
        params: dict[str, Any] = {}
        if not is_legacy_endpoint(endpoint):
            params["chainid"] = self.settings.chain_id
        params.update(extra)
        params["apikey"] = self.settings.providers.bscscan_api_key
        return params

    async def _walk_endpoints(
        self,
        label: str,
        build_params: Callable[[str], dict[str, Any]],
        parse: Callable[[Any], T],
    ) -> T:
        """
        Try each endpoint once. parse(result) returns a value, or raises
        LookupError to move on to the next endpoint.
        """
        timeout = self.settings.timeouts.explorer_request
        for endpoint in self.settings.providers.bscscan_endpoints():
            try:
                payload = await self.fetch_json("GET", endpoint, params=build_params(endpoint), timeout=timeout)
            except SourceUnavailable as e:
                logger.debug("bscscan_endpoint_failed", lookup=label, endpoint=endpoint, error=str(e))
                continue
            if not isinstance(payload, dict):
                continue
            try:
                return parse(payload.get("result"))
            except LookupError:
                continue
        raise SourceUnavailable(self.source_id, f"{label}: no endpoint answered")

    async def fetch_list(self, address: str, action: str, sort: str, offset: int) -> list[dict[str, Any]]:
        def build(endpoint: str) -> dict[str, Any]:
            return self._params(
                endpoint,
                module="account",
                action=action,
                address=address,
                startblock=0,
                endblock=99999999,
                page=1,
                offset=max(1, min(100, offset)),
                sort=sort,
            )

        def parse(result: Any) -> list[dict[str, Any]]:
            rows = _result_rows(result)
            if rows is not None:
                return rows
            if isinstance(result, str) and is_no_tx_message(result):
                return []
            raise LookupError(action)

        return await self._walk_endpoints(action, build, parse)

    async def fetch_contract_creation(self, address: str) -> dict[str, Any] | None:
        def build(endpoint: str) -> dict[str, Any]:
            return self._params(
                endpoint, module="contract", action="getcontractcreation", contractaddresses=address
            )

        def parse(result: Any) -> dict[str, Any] | None:
            rows = _result_rows(result)
            if rows is not None:
                return rows[0] if rows else None
            if isinstance(result, str) and is_no_tx_message(result):
                return None
            raise LookupError("getcontractcreation")

        return await self._walk_endpoints("getcontractcreation", build, parse)

    async def address_summary(self, address: str, *, now: float | None = None) -> ExplorerActivity | None:
        if not self.configured:
            return None
        results = await asyncio.gather(
            self.fetch_list(address, "txlist", "desc", 50),
            self.fetch_list(address, "tokentx", "desc", 50),
            self.fetch_list(address, "txlist", "asc", 1),
            self.fetch_contract_creation(address),
            return_exceptions=True,
        )
        for r in results:
            if isinstance(r, BaseException) and not isinstance(r, SourceUnavailable):
                raise r
        tx_desc, token_tx, tx_asc, creation = (None if isinstance(r, BaseException) else r for r in results)
        if tx_desc is None and token_tx is None and tx_asc is None and creation is None:
            raise SourceUnavailable(self.source_id, "all lookups failed")
        return summarize_activity(tx_desc, token_tx, tx_asc, creation, time.time() if now is None else now)
