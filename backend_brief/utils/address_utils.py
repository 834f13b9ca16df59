"""Address validation and formatting utilities."""

from __future__ import annotations

import re

from eth_utils import is_address

ADDRESS_RE = re.compile(r"0x[a-fA-F0-9]{40}")
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


def is_valid_address(a: str | None) -> bool:
    """Return True if a is a 20-byte hex address. Checksum casing is not enforced."""
    if not a or not isinstance(a, str):
        return False
    return is_address(a.strip().lower())


def extract_first_address(text: str | None) -> str | None:
    """First well-formed 0x address token in free text, or None."""
    m = ADDRESS_RE.search(text or "")
    return m.group(0) if m else None


def short_addr(address: str | None) -> str:
    """0x1234…abcd form used in findings and evidence values."""
    a = (address or "").strip()
    if len(a) <= 12:
        return a
    return f"{a[:6]}…{a[-4:]}"
