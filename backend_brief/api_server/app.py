"""
FastAPI/ASGI application entrypoint.

Run with: uvicorn backend_brief.api_server.app:app --host 0.0.0.0 --port 8787
"""

from backend_brief.api_server.server import app

__all__ = ["app"]
