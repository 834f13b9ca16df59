"""
Contract introspector.

Contracts: reads name/symbol/decimals/totalSupply independently (each failure
is local) and owner(). Wallets: balance and nonce heuristics only.
"""

from __future__ import annotations

import asyncio

from backend_brief.analytics.models import LedgerSection, Target, TokenFacts
from backend_brief.brief_logging import get_logger
from backend_brief.chain_reader.client import (
    SELECTOR_DECIMALS,
    SELECTOR_NAME,
    SELECTOR_OWNER,
    SELECTOR_SYMBOL,
    SELECTOR_TOTAL_SUPPLY,
    ChainReader,
)
from backend_brief.config.settings import BriefSettings
from backend_brief.core.i18n import paren, pick_text
from backend_brief.core.timeouts import bounded
from backend_brief.utils.address_utils import ZERO_ADDRESS, short_addr

logger = get_logger(__name__)

MAX_NAME_LEN = 64
MAX_SYMBOL_LEN = 32
LOW_BALANCE_NATIVE = 0.001
HIGH_TX_COUNT = 5000
# ERC-20 decimals() is uint8
MAX_DECIMALS = 255

_TEXT = {
    "low_balance": {
        "en": "Low BNB balance",
        "zh-CN": "该地址 BNB 余额较低",
        "zh-TW": "該地址 BNB 餘額較低",
        "ko": "해당 주소의 BNB 잔액이 낮습니다",
    },
    "no_tx": {
        "en": "No transactions (likely new address)",
        "zh-CN": "该地址交易次数为 0（可能是新地址）",
        "zh-TW": "該地址交易次數為 0（可能是新地址）",
        "ko": "거래 횟수가 0입니다 (신규 주소일 수 있음)",
    },
    "high_tx": {
        "en": "High transaction count (active address)",
        "zh-CN": "该地址历史交易较多（可能是活跃地址）",
        "zh-TW": "該地址歷史交易較多（可能是活躍地址）",
        "ko": "거래 횟수가 많습니다 (활성 주소일 수 있음)",
    },
    "token": {
        "en": "Detected token contract: {symbol}{name}",
        "zh-CN": "已识别为代币合约：{symbol}{name}",
        "zh-TW": "已識別為代幣合約：{symbol}{name}",
        "ko": "토큰 컨트랙트로 인식됨: {symbol}{name}",
    },
    "generic_contract": {
        "en": "Detected contract address (may not be ERC20)",
        "zh-CN": "已识别为合约地址（不一定是 ERC20 代币）",
        "zh-TW": "已識別為合約地址（不一定是 ERC20 代幣）",
        "ko": "컨트랙트 주소로 인식됨 (ERC20이 아닐 수 있음)",
    },
    "owner_zero": {
        "en": "owner() is zero (possibly renounced)",
        "zh-CN": "owner() 返回 0 地址（可能已放弃所有权）",
        "zh-TW": "owner() 返回 0 地址（可能已放棄所有權）",
        "ko": "owner()가 0 주소입니다 (소유권 포기 가능성)",
    },
    "owner_set": {
        "en": "owner() exists (owner controls may remain)",
        "zh-CN": "owner() 存在且非 0（可能仍可管理合约）",
        "zh-TW": "owner() 存在且非 0（可能仍可管理合約）",
        "ko": "owner()가 존재합니다 (소유자 권한이 남아 있을 수 있음)",
    },
}


def format_units(value: int, decimals: int) -> str:
    """Integer amount scaled by 10**decimals, without trailing zeros."""
    sign = "-" if value < 0 else ""
    value = abs(value)
    if decimals <= 0:
        return f"{sign}{value * 10 ** (-decimals)}"
    whole, frac = divmod(value, 10**decimals)
    frac_s = str(frac).rjust(decimals, "0").rstrip("0")
    return f"{sign}{whole}.{frac_s}" if frac_s else f"{sign}{whole}"


def _wallet_findings(target: Target, section: LedgerSection, locale: str) -> None:
    if target.native_balance is not None and target.native_balance <= LOW_BALANCE_NATIVE:
        section.info(pick_text(locale, _TEXT["low_balance"]))
    if target.nonce is not None:
        if target.nonce == 0:
            section.info(pick_text(locale, _TEXT["no_tx"]))
        if target.nonce > HIGH_TX_COUNT:
            section.info(pick_text(locale, _TEXT["high_tx"]))


async def introspect_contract(
    target: Target,
    chain: ChainReader,
    settings: BriefSettings,
    section: LedgerSection,
    locale: str,
) -> TokenFacts:
    facts = TokenFacts()
    if not target.is_contract:
        _wallet_findings(target, section, locale)
        return facts

    addr = target.address
    timeout = settings.timeouts.rpc_request
    name_r, symbol_r, decimals_r, supply_r, owner_r = await asyncio.gather(
        bounded(chain.call_string(addr, SELECTOR_NAME), timeout, source="bsc_rpc"),
        bounded(chain.call_string(addr, SELECTOR_SYMBOL), timeout, source="bsc_rpc"),
        bounded(chain.call_uint(addr, SELECTOR_DECIMALS), timeout, source="bsc_rpc"),
        bounded(chain.call_uint(addr, SELECTOR_TOTAL_SUPPLY), timeout, source="bsc_rpc"),
        bounded(chain.call_address(addr, SELECTOR_OWNER), timeout, source="bsc_rpc"),
    )
    if name_r.ok:
        facts.name = (name_r.value or "").strip()[:MAX_NAME_LEN]
    if symbol_r.ok:
        facts.symbol = (symbol_r.value or "").strip()[:MAX_SYMBOL_LEN]
    if decimals_r.ok:
        decimals = int(decimals_r.value)
        if 0 <= decimals <= MAX_DECIMALS:
            facts.decimals = decimals
        else:
            logger.info("token_decimals_out_of_range", decimals_bits=decimals.bit_length())
    if supply_r.ok and facts.decimals is not None:
        facts.total_supply = format_units(int(supply_r.value), facts.decimals)

    if facts.symbol or facts.name:
        section.info(pick_text(locale, _TEXT["token"]).format(
            symbol=facts.symbol or "TOKEN",
            name=paren(locale, facts.name or ""),
        ))
    else:
        section.info(pick_text(locale, _TEXT["generic_contract"]))

    if owner_r.ok and owner_r.value:
        owner = owner_r.value
        if owner.lower() == ZERO_ADDRESS:
            section.success(pick_text(locale, _TEXT["owner_zero"]))
        else:
            facts.owner_address = owner
            section.warning(pick_text(locale, _TEXT["owner_set"]))
            section.add_evidence("Owner", f"{settings.explorer_base}/address/{owner}", short_addr(owner))

    logger.debug(
        "contract_introspected",
        symbol=facts.symbol,
        decimals=facts.decimals,
        owner_status=owner_r.status,
    )
    return facts
