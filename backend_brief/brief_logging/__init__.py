"""
Structured logging for Backend Brief.

JSON logs with timestamp, event_type, target address and provider source.
"""

from backend_brief.brief_logging.logger import bind_request, clear_request, get_logger

__all__ = ["get_logger", "bind_request", "clear_request"]
