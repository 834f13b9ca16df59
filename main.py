"""
Main entrypoint: FastAPI brief server.

Env: BSC_RPC_URL, API_HOST, API_PORT, provider keys (see backend_brief.config.settings).

Equivalent: uvicorn backend_brief.api_server.app:app --host 0.0.0.0 --port 8787
"""

import os

# Configure structured JSON logging before other imports that may log
from backend_brief.brief_logging import get_logger

logger = get_logger("main")


def main() -> None:
    """Run the FastAPI server in the main thread."""
    from backend_brief.config import get_settings
    from backend_brief.api_server.app import app
    import uvicorn

    settings = get_settings()
    logger.info("main_server_starting", host=settings.api_host, port=settings.api_port)
    uvicorn.run(app, host=settings.api_host, port=settings.api_port, log_level=os.getenv("LOG_LEVEL", "info").lower())


if __name__ == "__main__":
    main()
