"""
Backend Brief: risk brief service for BNB Chain addresses and contracts.

Resolves a free-text query to a target address, enriches it from the chain
node and several independent data providers in parallel, scores the risk and
composes a short narrative with clickable evidence. Modular architecture with
clear separation between chain reader, provider adapters, analytics modules
and API server.
"""

__version__ = "0.1.0"
