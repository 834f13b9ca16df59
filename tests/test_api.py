"""
Tests for the FastAPI server (POST /api/brief, GET /health).

The pipeline is replaced with a stub so no chain or provider I/O happens.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

import backend_brief.api_server.server as server
from backend_brief import __version__
from backend_brief.analytics.models import (
    BriefResult,
    EntityCard,
    IntelFacts,
    MarketFacts,
    RuntimeReport,
    TokenFacts,
)
from backend_brief.core.exceptions import InvalidAddress, ResolutionFailure

WALLET = "0x" + "cd" * 20


def _result(address: str) -> BriefResult:
    return BriefResult(
        address=address,
        type="wallet",
        risk_score=18,
        tldr="Lower risk",
        explanation="This input is identified as an EOA wallet.",
        findings=[],
        evidence=[],
        entity=EntityCard(title="Wallet", subtitle="Address"),
        token=TokenFacts(),
        market=MarketFacts(),
        intel=IntelFacts(),
        holder_cluster=None,
        runtime=RuntimeReport(mode="fallback"),
    )


@pytest.fixture
def calls():
    return []


@pytest.fixture
def client(monkeypatch, calls):
    """TestClient with analyze_brief stubbed; records (query, lang) per call."""

    async def fake_analyze(query, lang=None):
        calls.append((query, lang))
        if "bad" in query:
            raise InvalidAddress("No valid 0x address/contract detected")
        if "down" in query:
            raise ResolutionFailure("Chain node unreachable; could not classify the address")
        return _result(WALLET)

    monkeypatch.setattr(server, "analyze_brief", fake_analyze)
    return TestClient(server.app)


def test_health(client):
    """GET /health returns ok and the package version."""
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok", "version": __version__}


def test_brief_ok(client, calls):
    """Query is trimmed before the pipeline sees it; envelope is camelCase."""
    r = client.post("/api/brief", json={"query": f"  {WALLET}  ", "lang": "en"})
    assert r.status_code == 200
    data = r.json()
    assert data["address"] == WALLET
    assert data["riskScore"] == 18
    assert data["narrativeSource"] == "fallback"
    assert data["runtime"] == {"mode": "fallback", "sources": []}
    assert calls == [(WALLET, "en")]


def test_brief_invalid_address_400(client):
    r = client.post("/api/brief", json={"query": "bad input"})
    assert r.status_code == 400
    assert r.json() == {"error": "No valid 0x address/contract detected"}


def test_brief_resolution_failure_400(client):
    r = client.post("/api/brief", json={"query": "node down"})
    assert r.status_code == 400
    assert "unreachable" in r.json()["error"]


@pytest.mark.parametrize("body", [{}, {"query": ""}, {"query": "   "}, {"query": "x" * 4001}])
def test_brief_body_validation_422(client, calls, body):
    """Missing, blank or oversized queries are rejected before the pipeline runs."""
    r = client.post("/api/brief", json=body)
    assert r.status_code == 422
    assert calls == []
