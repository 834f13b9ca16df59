"""
Shared scaffolding for external data-source adapters.

Each adapter builds its request, fetches JSON through the shared
httpx.AsyncClient and normalizes the payload into a small typed record.
Transport, status and parse failures raise SourceUnavailable; callers await
adapter methods through core.timeouts.bounded(), which turns any failure into
'no data'. An adapter that is not configured returns None without I/O.
"""

from __future__ import annotations

from typing import Any, Callable, TypeVar

import httpx

from backend_brief.brief_logging import get_logger
from backend_brief.config.settings import BriefSettings
from backend_brief.core.exceptions import SourceUnavailable

logger = get_logger(__name__)

T = TypeVar("T")

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36"
)


def to_num(v: Any) -> float | None:
    """Finite float from a number or numeric string, else None."""
    if isinstance(v, bool):
        return None
    if isinstance(v, (int, float)):
        f = float(v)
    elif isinstance(v, str) and v.strip():
        try:
            f = float(v)
        except ValueError:
            return None
    else:
        return None
    if f != f or f in (float("inf"), float("-inf")):
        return None
    return f


def str_or_none(v: Any) -> str | None:
    return v if isinstance(v, str) else None


def unwrap_list(payload: Any) -> list[Any]:
    """Accept `[...]`, `{"data": [...]}` or `{"data": {"data": [...]}}`."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        inner = payload.get("data")
        if isinstance(inner, list):
            return inner
        if isinstance(inner, dict) and isinstance(inner.get("data"), list):
            return inner["data"]
    return []


class ProviderAdapter:
    """Base adapter. Subclasses set source_id and base_url and implement public fetch methods."""

    source_id: str = ""
    default_timeout: float = 5.0

    def __init__(self, client: httpx.AsyncClient, settings: BriefSettings) -> None:
        self.client = client
        self.settings = settings
        # Set once any request to this source returned a usable JSON payload
        self.answered = False

    @property
    def base_url(self) -> str:
        return ""

    @property
    def configured(self) -> bool:
        return True

    def url(self, path: str) -> str:
        return f"{self.base_url.rstrip('/')}{path}"

    def default_headers(self) -> dict[str, str]:
        return {"accept": "application/json"}

    async def fetch_json(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> Any:
        """One HTTP request, no retries. Non-2xx or non-JSON raises SourceUnavailable."""
        try:
            r = await self.client.request(
                method,
                url,
                params=params,
                json=json,
                headers=headers if headers is not None else self.default_headers(),
                timeout=timeout or self.default_timeout,
            )
        except httpx.HTTPError as e:
            raise SourceUnavailable(self.source_id, f"{method} {url}: {e}") from e
        if r.status_code >= 400:
            raise SourceUnavailable(self.source_id, f"{method} {url}: HTTP {r.status_code}")
        try:
            payload = r.json()
        except ValueError as e:
            raise SourceUnavailable(self.source_id, f"{method} {url}: invalid JSON") from e
        self.answered = True
        return payload

    async def query(
        self,
        method: str,
        url: str,
        normalize: Callable[[Any], T],
        **kwargs: Any,
    ) -> T:
        """fetch_json followed by the normalization hook."""
        payload = await self.fetch_json(method, url, **kwargs)
        return normalize(payload)
