"""
Risk engine: additive 0-100 score from resolver, market, intel and holder-cluster facts.

Pure and deterministic, no I/O. The score is BASE_SCORE plus the sum of
independent term functions in SCORE_TERMS, rounded and clamped to [0, 100];
a non-finite total becomes 50. Each term reads only its own inputs, so the
order in which terms are summed does not matter.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Iterable

from backend_brief.analytics.intel import entity_is_risky
from backend_brief.analytics.market import (
    LOW_LIQUIDITY_USD,
    MIN_LIQUIDITY_TO_FDV,
    MODERATE_LIQUIDITY_USD,
    has_liquidity,
    liquidity_to_fdv,
)
from backend_brief.analytics.models import HolderCluster, IntelFacts, MarketFacts, Target
from backend_brief.brief_logging import get_logger

logger = get_logger(__name__)

BASE_SCORE = 18
NON_FINITE_SCORE = 50
MIN_SCORE = 0
MAX_SCORE = 100

CONTRACT_POINTS = 18
LOW_LIQUIDITY_POINTS = 32
MODERATE_LIQUIDITY_POINTS = 18
NO_LIQUIDITY_CONTRACT_POINTS = 10
HIGH_FDV_POINTS = 18
ALT_WALLET_MAX_POINTS = 14
BUNDLE_MAX_POINTS = 16
RISKY_ENTITY_POINTS = 15
PROFITABLE_PORTFOLIO_MIN = 8
PROFITABLE_PORTFOLIO_POINTS = -4


@dataclass(frozen=True)
class ScoreInputs:
    target: Target
    market: MarketFacts
    intel: IntelFacts
    holder_cluster: HolderCluster | None = None


def contract_term(x: ScoreInputs) -> float:
    return CONTRACT_POINTS if x.target.is_contract else 0


def liquidity_term(x: ScoreInputs) -> float:
    if has_liquidity(x.market):
        if x.market.liquidity_usd < LOW_LIQUIDITY_USD:
            return LOW_LIQUIDITY_POINTS
        if x.market.liquidity_usd < MODERATE_LIQUIDITY_USD:
            return MODERATE_LIQUIDITY_POINTS
        return 0
    return NO_LIQUIDITY_CONTRACT_POINTS if x.target.is_contract else 0


def fdv_term(x: ScoreInputs) -> float:
    ratio = liquidity_to_fdv(x.market)
    return HIGH_FDV_POINTS if ratio is not None and ratio < MIN_LIQUIDITY_TO_FDV else 0


def alt_wallet_term(x: ScoreInputs) -> float:
    n = x.intel.alt_wallet_count
    return min(ALT_WALLET_MAX_POINTS, 4 + n // 3) if n > 0 else 0


def bundle_term(x: ScoreInputs) -> float:
    n = x.holder_cluster.bundle_group_count if x.holder_cluster else 0
    return min(BUNDLE_MAX_POINTS, 6 + 4 * n) if n > 0 else 0


def entity_term(x: ScoreInputs) -> float:
    return RISKY_ENTITY_POINTS if x.intel.entity and entity_is_risky(x.intel.entity.entity_type) else 0


def portfolio_term(x: ScoreInputs) -> float:
    if x.intel.profitable_position_count >= PROFITABLE_PORTFOLIO_MIN:
        return PROFITABLE_PORTFOLIO_POINTS
    return 0


ScoreTerm = Callable[[ScoreInputs], float]

SCORE_TERMS: tuple[ScoreTerm, ...] = (
    contract_term,
    liquidity_term,
    fdv_term,
    alt_wallet_term,
    bundle_term,
    entity_term,
    portfolio_term,
)


def clamp_score(n: float) -> int:
    if not math.isfinite(n):
        return NON_FINITE_SCORE
    return max(MIN_SCORE, min(MAX_SCORE, round(n)))


def compute_risk_score(inputs: ScoreInputs, terms: Iterable[ScoreTerm] = SCORE_TERMS) -> int:
    """Base score plus every term, clamped."""
    parts = {term.__name__: term(inputs) for term in terms}
    score = clamp_score(BASE_SCORE + sum(parts.values()))
    logger.debug("risk_score_computed", risk_score=score, terms={k: v for k, v in parts.items() if v})
    return score
