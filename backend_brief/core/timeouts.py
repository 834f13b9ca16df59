"""
Bounded external calls.

Every chain RPC, provider HTTP call and LLM call is awaited through bounded():
the call races its own deadline via asyncio.wait_for and the result comes back
as a CallOutcome instead of an exception. No retries.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Generic, TypeVar

from backend_brief.brief_logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

STATUS_OK = "ok"
STATUS_TIMEOUT = "timeout"
STATUS_ERROR = "error"


@dataclass(frozen=True)
class CallOutcome(Generic[T]):
    """Result-or-failure of one bounded call."""

    status: str
    value: T | None = None
    error: str | None = None
    source: str = ""

    @property
    def ok(self) -> bool:
        return self.status == STATUS_OK

    def value_or(self, default: Any) -> Any:
        """Value when ok and not None, else default."""
        if self.ok and self.value is not None:
            return self.value
        return default


async def bounded(awaitable: Awaitable[T], timeout: float, *, source: str = "") -> CallOutcome[T]:
    """
    Await with a deadline. Timeouts and exceptions become a failed CallOutcome.

    Cancellation of the caller still propagates.
    """
    try:
        value = await asyncio.wait_for(awaitable, timeout=timeout)
    except asyncio.TimeoutError:
        logger.debug("bounded_call_timeout", source=source, timeout_sec=timeout)
        return CallOutcome(status=STATUS_TIMEOUT, error=f"timeout after {timeout}s", source=source)
    except asyncio.CancelledError:
        raise
    except Exception as e:
        logger.debug("bounded_call_failed", source=source, error=str(e))
        return CallOutcome(status=STATUS_ERROR, error=str(e) or type(e).__name__, source=source)
    return CallOutcome(status=STATUS_OK, value=value, source=source)
