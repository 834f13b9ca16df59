"""
FastAPI server for risk briefs.

POST /api/brief takes a free-text query (anything containing a 0x address)
and an optional language tag, and returns the brief envelope. Only
InvalidAddress / ResolutionFailure abort a request (HTTP 400); provider
failures degrade the brief instead. Config via env (see config.settings).
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from backend_brief import __version__
from backend_brief.analytics.brief_pipeline import analyze_brief
from backend_brief.brief_logging import get_logger
from backend_brief.config import get_settings
from backend_brief.core.exceptions import InvalidAddress, ResolutionFailure

logger = get_logger(__name__)

MAX_QUERY_LEN = 4000


# -----------------------------------------------------------------------------
# Request / response models
# -----------------------------------------------------------------------------


class BriefRequest(BaseModel):
    """POST /api/brief body."""

    model_config = ConfigDict(str_strip_whitespace=True)

    query: str = Field(..., min_length=1, max_length=MAX_QUERY_LEN, description="Free text containing a 0x address")
    lang: str | None = Field(None, max_length=32, description="Language tag: en, zh-CN, zh-TW, ko")


class HealthResponse(BaseModel):
    status: str = Field(..., description="Always 'ok' when the process is serving")
    version: str = Field(..., description="Package version")


# -----------------------------------------------------------------------------
# Lifespan
# -----------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load settings once at startup so config errors show up before the first request."""
    settings = get_settings()
    logger.info(
        "api_started",
        version=__version__,
        chain_id=settings.chain_id,
        moralis=settings.providers.has_moralis,
        frontrun=settings.providers.has_frontrun,
        memeradar=settings.providers.has_memeradar,
        arkham=settings.providers.has_arkham,
        gmgn=settings.providers.has_gmgn,
        bscscan=settings.providers.has_bscscan,
        llm=settings.llm.configured,
    )
    yield
    logger.info("api_stopped")


# -----------------------------------------------------------------------------
# App and routes
# -----------------------------------------------------------------------------

app = FastAPI(
    title="Backend Brief API",
    description="Risk briefs for BNB Chain addresses and token contracts.",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


@app.exception_handler(InvalidAddress)
@app.exception_handler(ResolutionFailure)
async def brief_error_handler(request: Request, exc: InvalidAddress | ResolutionFailure) -> JSONResponse:
    logger.info("brief_rejected", code=exc.code, error=exc.message, path=request.url.path)
    return JSONResponse(status_code=400, content={"error": exc.message})


@app.post("/api/brief")
async def post_brief(body: BriefRequest) -> dict[str, Any]:
    """
    Build a risk brief for the first 0x address in `query`.

    Returns 400 {"error": ...} when no valid address is found or the chain node
    cannot classify it.
    """
    result = await analyze_brief(body.query, body.lang)
    return result.to_dict()


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    """Liveness check: API is up."""
    return HealthResponse(status="ok", version=__version__)
