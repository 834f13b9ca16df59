"""Chain node access: read-only JSON-RPC client for BNB Smart Chain."""

from backend_brief.chain_reader.client import ChainReader  # noqa: F401

__all__ = ["ChainReader"]
