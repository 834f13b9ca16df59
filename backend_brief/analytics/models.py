"""
Data models for one brief request.

Target is created once by the resolver and never changes. Facts records carry
explicit source_status discriminants ("api" | "none") so absence of data is a
first-class state. Findings and evidence live in a per-request BriefLedger
where each module owns one section.

to_dict() methods emit the camelCase envelope served by POST /api/brief.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

KIND_CONTRACT = "contract"
KIND_WALLET = "wallet"

SOURCE_API = "api"
SOURCE_NONE = "none"

SEVERITY_CRITICAL = "critical"
SEVERITY_WARNING = "warning"
SEVERITY_INFO = "info"
SEVERITY_SUCCESS = "success"

MAX_FINDINGS = 10
MAX_EVIDENCE = 10
MAX_ENTITY_TAGS = 4

# Intel source ids, in report order
INTEL_SOURCES = ("frontrun", "memeradar", "arkham", "gmgn", "bscscan")


def _compact(d: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in d.items() if v is not None}


# -----------------------------------------------------------------------------
# Target and facts
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class Target:
    """Resolved address and its classification."""

    address: str
    kind: str
    is_contract_bytecode: bool = False
    native_balance: float | None = None
    nonce: int | None = None

    @property
    def is_contract(self) -> bool:
        return self.kind == KIND_CONTRACT


@dataclass
class TokenFacts:
    name: str | None = None
    symbol: str | None = None
    decimals: int | None = None
    total_supply: str | None = None
    owner_address: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact({
            "name": self.name,
            "symbol": self.symbol,
            "decimals": self.decimals,
            "totalSupply": self.total_supply,
            "ownerAddress": self.owner_address,
        })


@dataclass
class MarketFacts:
    liquidity_usd: float | None = None
    fdv_usd: float | None = None
    pair_url: str | None = None
    pair_address: str | None = None
    dex_id: str | None = None
    source_status: str = SOURCE_NONE

    def to_dict(self) -> dict[str, Any]:
        return _compact({
            "liquidityUsd": self.liquidity_usd,
            "fdvUsd": self.fdv_usd,
            "pairUrl": self.pair_url,
            "pairAddress": self.pair_address,
            "dexId": self.dex_id,
            "source": self.source_status,
        })


@dataclass
class TokenStat:
    token_symbol: str | None = None
    pnl_usd: float | None = None
    chain: str | None = None
    token_mint: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact({
            "tokenSymbol": self.token_symbol,
            "pnlUsd": self.pnl_usd,
            "chain": self.chain,
            "tokenMint": self.token_mint,
        })


@dataclass
class LabelProfile:
    """Address label / verification profile (frontrun)."""

    primary_label: str | None = None
    verified: bool | None = None
    tags: list[str] = field(default_factory=list)
    primary_domain: str | None = None
    token_stats: list[TokenStat] = field(default_factory=list)


@dataclass
class EntityIntel:
    """Entity classification (arkham). entity_type is lower-cased."""

    entity_name: str | None = None
    entity_type: str | None = None
    label_name: str | None = None
    tags: list[str] = field(default_factory=list)
    is_user_address: bool | None = None


@dataclass
class Holding:
    token_symbol: str | None = None
    token_address: str | None = None
    usd_value: float | None = None
    realized_profit_usd: float | None = None
    unrealized_profit_usd: float | None = None
    total_profit_usd: float | None = None
    wallet_tags: list[str] = field(default_factory=list)

    @property
    def is_profitable(self) -> bool:
        return (self.realized_profit_usd or 0) > 0 or (self.total_profit_usd or 0) > 0


@dataclass
class Portfolio:
    holdings: list[Holding] = field(default_factory=list)

    @property
    def profitable_count(self) -> int:
        return sum(1 for h in self.holdings if h.is_profitable)

    def top_tags(self, limit: int) -> list[str]:
        seen: list[str] = []
        for h in self.holdings:
            for t in h.wallet_tags:
                if t and t not in seen:
                    seen.append(t)
        return seen[:limit]


@dataclass
class Trade:
    maker: str | None = None
    amount_usd: float | None = None
    timestamp: float | None = None
    event: str | None = None
    tx_hash: str | None = None


@dataclass
class TradeSample:
    trades: list[Trade] = field(default_factory=list)


@dataclass
class ExplorerActivity:
    tx_count_24h: int = 0
    token_transfer_count_24h: int = 0
    first_tx_time: int | None = None
    last_tx_time: int | None = None
    contract_creator: str | None = None
    creation_tx_hash: str | None = None
    is_contract: bool = False


@dataclass
class IntelFacts:
    """One optional record per intel source plus a source_status per source id."""

    label_profile: LabelProfile | None = None
    alt_wallets: list[str] | None = None
    tag_list: list[str] | None = None
    entity: EntityIntel | None = None
    portfolio: Portfolio | None = None
    trade_sample: TradeSample | None = None
    explorer_activity: ExplorerActivity | None = None
    source_status: dict[str, str] = field(
        default_factory=lambda: {s: SOURCE_NONE for s in INTEL_SOURCES}
    )

    def status(self, source: str) -> str:
        return self.source_status.get(source, SOURCE_NONE)

    @property
    def alt_wallet_count(self) -> int:
        return len(self.alt_wallets or [])

    @property
    def profitable_position_count(self) -> int:
        return self.portfolio.profitable_count if self.portfolio else 0

    def to_dict(self) -> dict[str, Any]:
        """Per-source summaries for the 'enrich' block of the response."""
        out: dict[str, Any] = {}
        if self.label_profile is not None:
            p = self.label_profile
            out["frontrun"] = _compact({
                "primaryLabel": p.primary_label,
                "verified": p.verified,
                "tags": p.tags,
                "primaryDomain": p.primary_domain,
                "tokenStats": [s.to_dict() for s in p.token_stats],
                "altWallets": self.alt_wallets,
            })
        if self.tag_list is not None:
            out["memeradar"] = {"tags": self.tag_list}
        if self.entity is not None:
            out["arkham"] = _compact({
                "entityName": self.entity.entity_name,
                "entityType": self.entity.entity_type,
                "labelName": self.entity.label_name,
                "tags": self.entity.tags,
            })
        if self.portfolio is not None or self.trade_sample is not None:
            gmgn: dict[str, Any] = {"profitableCount": self.profitable_position_count}
            if self.portfolio is not None:
                gmgn["holdingCount"] = len(self.portfolio.holdings)
                gmgn["topTags"] = self.portfolio.top_tags(8)
            if self.trade_sample is not None:
                gmgn["tradeCount"] = len(self.trade_sample.trades)
            out["gmgn"] = gmgn
        if self.explorer_activity is not None:
            a = self.explorer_activity
            out["bscscan"] = _compact({
                "txCount24h": a.tx_count_24h,
                "tokenTransferCount24h": a.token_transfer_count_24h,
                "firstSeenAt": a.first_tx_time,
                "lastSeenAt": a.last_tx_time,
                "contractCreator": a.contract_creator,
            })
        return out


@dataclass
class HolderCluster:
    """Top-holder scan summary. Derived per request, never persisted."""

    top_holder_count: int = 0
    smart_money_holder_count: int = 0
    bundle_group_count: int = 0
    smart_money_samples: list[str] = field(default_factory=list)
    bundle_source_samples: list[str] = field(default_factory=list)
    bundle_groups: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "topHolderCount": self.top_holder_count,
            "smartMoneyHolderCount": self.smart_money_holder_count,
            "bundleGroupCount": self.bundle_group_count,
            "smartMoneySamples": self.smart_money_samples,
            "bundleSourceSamples": self.bundle_source_samples,
        }


# -----------------------------------------------------------------------------
# Findings, evidence and the per-request ledger
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class Finding:
    severity: str
    text: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.severity, "text": self.text}


@dataclass(frozen=True)
class Evidence:
    label: str
    url: str
    value: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact({"label": self.label, "url": self.url, "value": self.value})


@dataclass
class LedgerSection:
    """Private findings/evidence accumulator for one module."""

    module: str
    findings: list[Finding] = field(default_factory=list)
    evidence: list[Evidence] = field(default_factory=list)

    def finding(self, severity: str, text: str) -> None:
        self.findings.append(Finding(severity=severity, text=text))

    def info(self, text: str) -> None:
        self.finding(SEVERITY_INFO, text)

    def warning(self, text: str) -> None:
        self.finding(SEVERITY_WARNING, text)

    def success(self, text: str) -> None:
        self.finding(SEVERITY_SUCCESS, text)

    def add_evidence(self, label: str, url: str, value: str | None = None) -> None:
        self.evidence.append(Evidence(label=label, url=url, value=value))


LEDGER_MODULES = ("resolver", "contract", "market", "intel", "holder_cluster")


class BriefLedger:
    """
    Findings/evidence for one request.

    Each module writes only to its own section; merged() concatenates sections
    in LEDGER_MODULES order and caps each list.
    """

    def __init__(self) -> None:
        self._sections = {m: LedgerSection(module=m) for m in LEDGER_MODULES}

    def section(self, module: str) -> LedgerSection:
        return self._sections[module]

    def all_findings(self) -> list[Finding]:
        return [f for m in LEDGER_MODULES for f in self._sections[m].findings]

    def findings(self, limit: int = MAX_FINDINGS) -> list[Finding]:
        return self.all_findings()[:limit]

    def evidence(self, limit: int = MAX_EVIDENCE) -> list[Evidence]:
        return [e for m in LEDGER_MODULES for e in self._sections[m].evidence][:limit]


# -----------------------------------------------------------------------------
# Narrative, runtime report and the response envelope
# -----------------------------------------------------------------------------

NARRATIVE_LLM = "llm"
NARRATIVE_FALLBACK = "fallback"


@dataclass
class Narrative:
    tldr: str
    explanation: str
    source: str = NARRATIVE_FALLBACK


STATUS_LIVE = "live"
STATUS_FALLBACK = "fallback"
STATUS_DISABLED = "disabled"

MODE_ENHANCED = "enhanced"
MODE_FALLBACK = "fallback"


@dataclass
class SourceStatus:
    id: str
    status: str
    note: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact({"id": self.id, "status": self.status, "note": self.note})


@dataclass
class RuntimeReport:
    mode: str
    sources: list[SourceStatus] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"mode": self.mode, "sources": [s.to_dict() for s in self.sources]}


@dataclass
class EntityCard:
    title: str
    subtitle: str
    tags: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"title": self.title, "subtitle": self.subtitle, "tags": self.tags[:MAX_ENTITY_TAGS]}


@dataclass
class BriefResult:
    """Response envelope. Built fresh per request and not mutated after return."""

    address: str
    type: str
    risk_score: int
    tldr: str
    explanation: str
    findings: list[Finding]
    evidence: list[Evidence]
    entity: EntityCard
    token: TokenFacts
    market: MarketFacts
    intel: IntelFacts
    holder_cluster: HolderCluster | None
    runtime: RuntimeReport
    narrative_source: str = NARRATIVE_FALLBACK

    def to_dict(self) -> dict[str, Any]:
        enrich = self.intel.to_dict()
        if self.holder_cluster is not None:
            enrich["meme"] = self.holder_cluster.to_dict()
        return {
            "address": self.address,
            "type": self.type,
            "riskScore": self.risk_score,
            "tldr": self.tldr,
            "explanation": self.explanation,
            "narrativeSource": self.narrative_source,
            "findings": [f.to_dict() for f in self.findings[:MAX_FINDINGS]],
            "evidence": [e.to_dict() for e in self.evidence[:MAX_EVIDENCE]],
            "entity": self.entity.to_dict(),
            "token": self.token.to_dict(),
            "market": self.market.to_dict(),
            "enrich": enrich,
            "runtime": self.runtime.to_dict(),
        }
