"""
Configuration management for Backend Brief.

Loads settings from environment variables (and .env). Exposes a single
source of truth for provider credentials, timeouts and scan limits.
"""

from backend_brief.config.settings import BriefSettings, get_settings  # noqa: F401

__all__ = ["BriefSettings", "get_settings"]
