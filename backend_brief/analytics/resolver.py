"""
Target resolver: extract the address from a free-text query and classify it.

Bytecode, balance and nonce are read concurrently. Non-empty bytecode means
contract. Only when the bytecode read itself failed (node error, not empty
code) do the token-metadata lookup and then the market-pair lookup run; either
hit means contract. Everything else is a wallet.
"""

from __future__ import annotations

import asyncio

from backend_brief.analytics.models import KIND_CONTRACT, KIND_WALLET, LedgerSection, Target
from backend_brief.brief_logging import get_logger
from backend_brief.chain_reader.client import WEI_PER_NATIVE, ChainReader
from backend_brief.config.settings import BriefSettings
from backend_brief.core.exceptions import InvalidAddress, ResolutionFailure
from backend_brief.core.i18n import pick_text
from backend_brief.core.timeouts import bounded
from backend_brief.providers import ProviderSet
from backend_brief.utils.address_utils import extract_first_address, is_valid_address

logger = get_logger(__name__)

_TEXT_INVALID = {
    "en": "No valid 0x address/contract detected",
    "zh-CN": "未识别到有效的 0x 地址/合约地址",
    "zh-TW": "未識別到有效的 0x 地址/合約地址",
    "ko": "유효한 0x 주소/컨트랙트를 인식하지 못했습니다",
}
_TEXT_UNREACHABLE = {
    "en": "Chain node unreachable; could not classify the address",
    "zh-CN": "链上节点不可用，无法识别该地址类型",
    "zh-TW": "鏈上節點不可用，無法識別該地址類型",
    "ko": "체인 노드에 연결할 수 없어 주소 유형을 식별하지 못했습니다",
}


def extract_address(query: str, locale: str) -> str:
    """First 0x address token in the query, else the whole trimmed query; lower-cased."""
    raw = (query or "").strip()
    candidate = extract_first_address(raw) or raw
    if not is_valid_address(candidate):
        raise InvalidAddress(pick_text(locale, _TEXT_INVALID))
    return candidate.lower()


async def resolve_target(
    query: str,
    chain: ChainReader,
    providers: ProviderSet,
    settings: BriefSettings,
    locale: str,
) -> Target:
    address = extract_address(query, locale)
    t = settings.timeouts
    code_r, balance_r, nonce_r = await asyncio.gather(
        bounded(chain.get_code(address), t.rpc_request, source="bsc_rpc"),
        bounded(chain.get_balance(address), t.rpc_request, source="bsc_rpc"),
        bounded(chain.get_nonce(address), t.rpc_request, source="bsc_rpc"),
    )

    has_bytecode = code_r.ok and code_r.value not in (None, "", "0x")
    is_contract = has_bytecode
    classified_by_fallback = False
    if not code_r.ok:
        meta_r = await bounded(
            providers.moralis.token_metadata(address), t.resolve_metadata_lookup, source="moralis"
        )
        meta = meta_r.value_or(None)
        if isinstance(meta, dict) and (isinstance(meta.get("symbol"), str) or isinstance(meta.get("name"), str)):
            is_contract = True
            classified_by_fallback = True
        if not is_contract:
            pair_r = await bounded(
                providers.dexscreener.best_pair(address), t.resolve_market_lookup, source="dexscreener"
            )
            if pair_r.value_or(None) is not None:
                is_contract = True
                classified_by_fallback = True
        if not classified_by_fallback and not balance_r.ok and not nonce_r.ok:
            logger.warning("resolve_node_unreachable", error=code_r.error)
            raise ResolutionFailure(pick_text(locale, _TEXT_UNREACHABLE))

    balance = balance_r.value_or(None)
    target = Target(
        address=address,
        kind=KIND_CONTRACT if is_contract else KIND_WALLET,
        is_contract_bytecode=has_bytecode,
        native_balance=(balance / WEI_PER_NATIVE) if balance is not None else None,
        nonce=nonce_r.value_or(None),
    )
    logger.info(
        "target_resolved",
        kind=target.kind,
        bytecode_status=code_r.status,
        by_fallback=classified_by_fallback,
    )
    return target


def add_baseline_evidence(section: LedgerSection, target: Target, settings: BriefSettings) -> None:
    """Explorer address link, always present."""
    section.add_evidence("BscScan", f"{settings.explorer_base}/address/{target.address}")
