"""
Environment variable loading for Backend Brief.

- BSC_RPC_URL: chain node JSON-RPC endpoint (default: public BSC dataseed)
- MORALIS_API_KEY: holder/transfer provider (enables holder-cluster scan)
- FR_* / MR_* / ARKM_API_KEY / GMGN_* / BSCSCAN_API_KEY: intel providers
- OPENROUTER_API_KEY (or AI_API_KEY): optional LLM narrative
- Loads .env from project root when available.
"""

from __future__ import annotations

import os
from pathlib import Path

# Project root: config is backend_brief/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_BACKEND_DIR = _CONFIG_DIR.parent
_ROOT = _BACKEND_DIR.parent
_ENV_PATH = _ROOT / ".env"

DEFAULT_BSC_RPC_URL = "https://bsc-dataseed.binance.org/"


def load_brief_env() -> None:
    """Load .env from project root. Safe to call multiple times."""
    from dotenv import load_dotenv

    load_dotenv(_ENV_PATH)


def env_str(name: str, *aliases: str) -> str:
    """First non-empty value among name and its aliases, stripped. Empty string if none."""
    for key in (name, *aliases):
        v = (os.getenv(key) or "").strip()
        if v:
            return v
    return ""


def env_flag(name: str) -> bool:
    return env_str(name).lower() in ("1", "true", "yes", "on")


def env_int(name: str, default: int) -> int:
    raw = env_str(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def normalize_api_key(raw: str) -> str:
    """Strip a 'Bearer ' prefix and surrounding quotes from a pasted key."""
    k = (raw or "").strip()
    if not k:
        return ""
    if k.lower().startswith("bearer "):
        k = k[7:].strip()
    if len(k) >= 2 and k[0] == k[-1] and k[0] in ("'", '"'):
        k = k[1:-1].strip()
    return k


def normalize_bearer(raw: str) -> str:
    t = (raw or "").strip()
    if not t:
        return ""
    return t if t.lower().startswith("bearer ") else f"Bearer {t}"
