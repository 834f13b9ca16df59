"""
Application-level exceptions.

Only InvalidAddress and ResolutionFailure abort a brief request; the API maps
them to HTTP 400. SourceUnavailable and NarrativeDegraded are raised inside
adapters / the LLM path and recovered locally, never surfaced to the caller.
"""

from __future__ import annotations


class BriefError(Exception):
    """Base error with a stable machine code and a human-readable message."""

    code = "brief_error"

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code:
            self.code = code

    def __str__(self) -> str:
        return self.message


class InvalidAddress(BriefError):
    """Query contains no syntactically valid 0x address."""

    code = "invalid_address"


class ResolutionFailure(BriefError):
    """Chain node unreachable and no fallback heuristic classified the target."""

    code = "resolution_failure"


class SourceUnavailable(BriefError):
    """One provider failed (HTTP error, bad payload). Degrades that source to 'no data'."""

    code = "source_unavailable"

    def __init__(self, source: str, message: str) -> None:
        super().__init__(f"{source}: {message}")
        self.source = source


class NarrativeDegraded(BriefError):
    """LLM narrative unusable; the deterministic fallback is used instead."""

    code = "narrative_degraded"
