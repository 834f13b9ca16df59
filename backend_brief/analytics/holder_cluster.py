"""
Holder-cluster scan: smart-money holders and bundled (shared-funding) wallets.

Contract targets only, and only when the holder/transfer provider is
configured. Steps:

1. Top owners by balance; drop the token's own address, de-duplicate, cap.
2. Bytecode-check candidates (bounded pool); keep non-contracts as top holders.
3. Label-profile lookups (bounded pool) to flag smart-money-like holders.
4. Page the transfer log oldest-first; the first transfer *to* an unresolved
   holder names its funder. Page cap is independent of per-page deadlines.
5. Funders shared by >= 2 top holders form bundle groups.

Grouping (find_first_funders, group_bundles) is pure and tested on its own.
"""

from __future__ import annotations

from collections import Counter
from typing import Iterable

from backend_brief.analytics.models import HolderCluster, LabelProfile, LedgerSection, Target
from backend_brief.brief_logging import get_logger
from backend_brief.chain_reader.client import ChainReader
from backend_brief.config.settings import BriefSettings
from backend_brief.core.i18n import is_zh_locale, join_human_list, paren, pick_text
from backend_brief.core.pool import map_limited
from backend_brief.core.timeouts import bounded
from backend_brief.providers import ProviderSet
from backend_brief.providers.moralis import TokenTransfer
from backend_brief.utils.address_utils import is_valid_address, short_addr

logger = get_logger(__name__)

SMART_MONEY_KEYWORDS = ("kol", "smart", "alpha", "sniper", "whale", "fund", "maker", "trader")
SMART_MONEY_PNL_USD = 5_000
MIN_BUNDLE_SIZE = 2

_TEXT = {
    "scan": {
        "en": "Meme holder scan: analyzed {count} top addresses (obvious contracts filtered)",
        "zh-CN": "Meme 持币结构扫描：已分析 {count} 个 Top 地址（过滤了明显合约地址）",
        "zh-TW": "Meme 持幣結構掃描：已分析 {count} 個 Top 地址（過濾了明顯合約地址）",
        "ko": "Meme 홀더 구조 스캔: 상위 주소 {count}개를 분석했습니다 (명백한 컨트랙트 주소 제외)",
    },
    "smart": {
        "en": "Detected {smart}/{total} possible smart-money/KOL holders{samples}",
        "zh-CN": "检测到 {smart}/{total} 个疑似聪明钱/KOL 地址{samples}",
        "zh-TW": "檢測到 {smart}/{total} 個疑似聰明錢/KOL 地址{samples}",
        "ko": "{smart}/{total}개의 스마트머니/KOL 가능 주소를 감지했습니다{samples}",
    },
    "bundle": {
        "en": "Detected {count} shared funding-source groups (possible bundled/linked wallets){samples}",
        "zh-CN": "检测到 {count} 组同源入金分发（疑似捆绑/关联地址）{samples}",
        "zh-TW": "檢測到 {count} 組同源入金分發（疑似綁定/關聯地址）{samples}",
        "ko": "동일 자금원 분산 그룹 {count}개 감지됨 (묶음/연관 지갑 가능성){samples}",
    },
}


def select_candidates(owners: Iterable[str], token_address: str, limit: int) -> list[str]:
    """Lower-cased owners minus the token itself, de-duplicated, in order, capped."""
    token = token_address.lower()
    seen: set[str] = set()
    out: list[str] = []
    for raw in owners:
        addr = (raw or "").lower()
        if not addr or addr == token or addr in seen:
            continue
        seen.add(addr)
        out.append(addr)
        if len(out) >= limit:
            break
    return out


def is_smart_money(profile: LabelProfile | None) -> bool:
    if profile is None:
        return False
    if profile.verified is True:
        return True
    hay = f"{profile.primary_label or ''} {' '.join(profile.tags)}".lower()
    if any(k in hay for k in SMART_MONEY_KEYWORDS):
        return True
    return any(s.pnl_usd is not None and s.pnl_usd > SMART_MONEY_PNL_USD for s in profile.token_stats)


def find_first_funders(
    transfers: Iterable[TokenTransfer],
    holders: set[str],
    funders: dict[str, str] | None = None,
) -> dict[str, str]:
    """
    Record the sender of the first transfer into each holder.

    transfers must be oldest-first. Holders already present in `funders` are
    left alone, so calling this page by page keeps first-occurrence semantics.
    """
    out = funders if funders is not None else {}
    for t in transfers:
        to = t.to_address.lower()
        if to not in holders or to in out:
            continue
        src = t.from_address.lower()
        if not is_valid_address(src):
            continue
        out[to] = src
    return out


def group_bundles(funders: dict[str, str], max_groups: int) -> list[tuple[str, int]]:
    """Funding sources shared by >= 2 holders, largest first, capped at max_groups."""
    counts = Counter(funders.values())
    groups = [(src, n) for src, n in counts.items() if n >= MIN_BUNDLE_SIZE]
    groups.sort(key=lambda g: g[1], reverse=True)
    return groups[:max_groups]


async def discover_funders(
    token: str,
    holders: list[str],
    providers: ProviderSet,
    settings: BriefSettings,
) -> dict[str, str]:
    """Page transfers oldest-first until every holder has a funder, the cursor ends or the page cap hits."""
    limits = settings.holders
    holder_set = {h.lower() for h in holders}
    funders: dict[str, str] = {}
    cursor: str | None = None
    pages = 0
    while pages < limits.max_transfer_pages and len(funders) < len(holder_set):
        pages += 1
        outcome = await bounded(
            providers.moralis.token_transfers(
                token, limit=limits.transfer_page_size, order="ASC", cursor=cursor
            ),
            settings.timeouts.transfer_page,
            source="moralis",
        )
        page = outcome.value_or(None)
        if page is None or not page.transfers:
            break
        find_first_funders(page.transfers, holder_set, funders)
        cursor = page.cursor
        if not cursor:
            break
    logger.debug("funders_discovered", pages=pages, resolved=len(funders), holders=len(holder_set))
    return funders


async def run_holder_cluster(
    target: Target,
    chain: ChainReader,
    providers: ProviderSet,
    settings: BriefSettings,
    section: LedgerSection,
    locale: str,
) -> HolderCluster | None:
    if not target.is_contract or not providers.moralis.configured:
        return None
    limits = settings.holders
    t = settings.timeouts

    owners_r = await bounded(
        providers.moralis.token_owners(target.address, limit=limits.owners_limit, order="DESC"),
        t.holders,
        source="moralis",
    )
    owners_page = owners_r.value_or(None)
    if owners_page is None or not owners_page.owners:
        return None
    candidates = select_candidates(
        (o.owner_address for o in owners_page.owners), target.address, limits.max_candidates
    )
    if not candidates:
        return None

    async def _has_code(addr: str) -> bool:
        r = await bounded(chain.is_contract(addr), t.rpc_request, source="bsc_rpc")
        # A failed code read counts as non-contract
        return bool(r.value_or(False))

    contract_flags = await map_limited(candidates, limits.code_check_concurrency, _has_code)
    top_holders = [a for a, is_c in zip(candidates, contract_flags) if not is_c][: limits.max_top_holders]
    if not top_holders:
        return None

    async def _profile(addr: str) -> LabelProfile | None:
        r = await bounded(
            providers.frontrun.wallet_metadata(addr, timeout=t.holder_profile),
            t.holder_profile,
            source="frontrun",
        )
        return r.value_or(None)

    profiles = await map_limited(top_holders, limits.profile_concurrency, _profile)
    smart = [addr for addr, p in zip(top_holders, profiles) if is_smart_money(p)]
    smart_samples = [short_addr(a) for a in smart[: limits.max_samples]]

    funders = await discover_funders(target.address, top_holders, providers, settings)
    groups = group_bundles(funders, limits.max_groups_reported)
    bundle_samples = [short_addr(src) for src, _ in groups[: limits.max_samples]]

    section.info(pick_text(locale, _TEXT["scan"]).format(count=len(top_holders)))
    if smart:
        section.success(pick_text(locale, _TEXT["smart"]).format(
            smart=len(smart),
            total=len(top_holders),
            samples=paren(locale, join_human_list(locale, smart_samples)),
        ))
    if groups:
        sep = "：" if is_zh_locale(locale) else ": "
        samples = f"{sep}{join_human_list(locale, bundle_samples)}" if bundle_samples else ""
        section.warning(pick_text(locale, _TEXT["bundle"]).format(count=len(groups), samples=samples))
    section.add_evidence("Token Holders", f"{settings.explorer_base}/token/{target.address}#balances")

    cluster = HolderCluster(
        top_holder_count=len(top_holders),
        smart_money_holder_count=len(smart),
        bundle_group_count=len(groups),
        smart_money_samples=smart_samples,
        bundle_source_samples=bundle_samples,
        bundle_groups=dict(groups),
    )
    logger.info(
        "holder_cluster_done",
        candidates=len(candidates),
        top_holders=cluster.top_holder_count,
        smart_money=cluster.smart_money_holder_count,
        bundle_groups=cluster.bundle_group_count,
    )
    return cluster
