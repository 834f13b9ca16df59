"""
Core utilities: exceptions, bounded calls, worker pool, localization.

Cross-cutting helpers used by the chain reader, provider adapters and the
analytics modules.
"""
