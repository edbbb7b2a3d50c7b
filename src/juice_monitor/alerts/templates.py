# SPDX-License-Identifier: MIT
# src/juice_monitor/alerts/templates.py
"""
Telegram (HTML parse mode) message templates, one per event category.

Every template takes the raw indexer item and the block-explorer base URL.
"""
from __future__ import annotations

from typing import Any, Mapping

from .formatting import (
    escape_html,
    format_bigint_value,
    format_bps,
    format_ppm,
    format_timestamp,
    short_addr,
    time_until,
    tx_url,
)

Item = Mapping[str, Any]

DESCRIPTION_LIMIT = 200


def _chain(e: Item) -> str:
    return f"Chain: Citrea ({e.get('chainId')})"


def _int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


# ---- JuiceSwap ---------------------------------------------------------------

def governor_proposal_created(e: Item, explorer_url: str) -> str:
    desc = e.get("description")
    desc = escape_html(desc[:DESCRIPTION_LIMIT]) if desc else "No description"
    execute_after = e.get("executeAfter")
    return (
        "<b>New Governor Proposal</b>\n\n"
        f"Proposal #{e.get('proposalId')}\n"
        f"Proposer: {short_addr(e.get('proposer'))}\n"
        f"Target: {short_addr(e.get('target'))}\n"
        f"Description: {desc}\n\n"
        f"<b>Auto-executes: {format_timestamp(execute_after)} ({time_until(execute_after)})</b>\n\n"
        f"{_chain(e)}\n"
        f"Tx: {tx_url(explorer_url, e.get('txHash'))}"
    )


def governor_proposal_executed(e: Item, explorer_url: str) -> str:
    return (
        "<b>Governor Proposal Executed</b>\n\n"
        f"Proposal #{e.get('proposalId')}\n"
        f"Executed by: {short_addr(e.get('executedBy') or 'unknown')}\n"
        f"Target: {short_addr(e.get('target'))}\n"
        f"Description: {escape_html((e.get('description') or '')[:DESCRIPTION_LIMIT])}\n\n"
        f"{_chain(e)}\n"
        f"Tx: {tx_url(explorer_url, e.get('resolvedTxHash') or e.get('txHash'))}"
    )


def governor_proposal_vetoed(e: Item, explorer_url: str) -> str:
    return (
        "<b>Governor Proposal Vetoed</b>\n\n"
        f"Proposal #{e.get('proposalId')}\n"
        f"Vetoed by: {short_addr(e.get('vetoedBy') or 'unknown')}\n"
        f"Target: {short_addr(e.get('target'))}\n"
        f"Description: {escape_html((e.get('description') or '')[:DESCRIPTION_LIMIT])}\n\n"
        f"{_chain(e)}\n"
        f"Tx: {tx_url(explorer_url, e.get('resolvedTxHash') or e.get('txHash'))}"
    )


def factory_owner_changed(e: Item, explorer_url: str) -> str:
    return (
        "<b>Factory Owner Changed</b>\n\n"
        f"Old: {short_addr(e.get('oldOwner'))}\n"
        f"New: {short_addr(e.get('newOwner'))}\n"
        f"{_chain(e)}\n\n"
        f"Tx: {tx_url(explorer_url, e.get('txHash'))}"
    )


def fee_collector_owner_updated(e: Item, explorer_url: str) -> str:
    return (
        "<b>FeeCollector Owner Updated</b>\n\n"
        f"New Owner: {short_addr(e.get('newOwner'))}\n"
        f"{_chain(e)}\n\n"
        f"Tx: {tx_url(explorer_url, e.get('txHash'))}"
    )


def swap_router_updated(e: Item, explorer_url: str) -> str:
    return (
        "<b>Swap Router Updated</b>\n\n"
        f"Old: {short_addr(e.get('oldRouter'))}\n"
        f"New: {short_addr(e.get('newRouter'))}\n"
        f"{_chain(e)}\n\n"
        f"Tx: {tx_url(explorer_url, e.get('txHash'))}"
    )


def fee_collector_updated(e: Item, explorer_url: str) -> str:
    return (
        "<b>Fee Collector Updated</b>\n\n"
        f"Old: {short_addr(e.get('oldCollector'))}\n"
        f"New: {short_addr(e.get('newCollector'))}\n"
        f"{_chain(e)}\n\n"
        f"Tx: {tx_url(explorer_url, e.get('txHash'))}"
    )


def protection_params_updated(e: Item, explorer_url: str) -> str:
    return (
        "<b>Protection Params Updated</b>\n\n"
        f"TWAP Period: {e.get('twapPeriod')}s\n"
        f"Max Slippage: {format_bps(e.get('maxSlippageBps'))}\n"
        f"{_chain(e)}\n\n"
        f"Tx: {tx_url(explorer_url, e.get('txHash'))}"
    )


def bridged_token_registered(e: Item, explorer_url: str) -> str:
    return (
        "<b>Bridged Token Registered</b>\n\n"
        f"Token: {short_addr(e.get('token'))}\n"
        f"Bridge: {short_addr(e.get('bridge'))}\n"
        f"Registered by: {short_addr(e.get('registeredBy'))}\n"
        f"Decimals: {e.get('decimals')}\n"
        f"{_chain(e)}\n\n"
        f"Tx: {tx_url(explorer_url, e.get('txHash'))}"
    )


# ---- JuiceDollar -------------------------------------------------------------

def new_original_position(e: Item, explorer_url: str) -> str:
    price = format_bigint_value(e.get("price"), e.get("stablecoinDecimals") or 18)
    collateral = escape_html(e.get("collateralSymbol")) or short_addr(e.get("collateral"))
    stablecoin = escape_html(e.get("stablecoinSymbol")) or "JUSD"
    cooldown = e.get("cooldown")
    return (
        "<b>New Original Position Opened</b>\n\n"
        f"Position: {short_addr(e.get('position'))}\n"
        f"Owner: {short_addr(e.get('owner'))}\n"
        f"Collateral: {collateral}\n"
        f"Price: {price} {stablecoin}\n\n"
        f"<b>Cooldown ends: {format_timestamp(cooldown)} ({time_until(cooldown)})</b>\n\n"
        "Action: Review and deny before cooldown ends if inappropriate.\n"
        f"Tx: {tx_url(explorer_url, e.get('txHash'))}"
    )


def minter_application(e: Item, explorer_url: str) -> str:
    deadline = _int(e.get("applyDate")) + _int(e.get("applicationPeriod"))
    return (
        "<b>New Minter Application</b>\n\n"
        f"Minter: {short_addr(e.get('minter'))}\n"
        f"Suggestor: {short_addr(e.get('suggestor'))}\n"
        f'Message: "{escape_html(e.get("applyMessage"))}"\n\n'
        f"<b>Auto-approved: {format_timestamp(deadline)} ({time_until(deadline)})</b>\n\n"
        "Action: Deny before deadline or minter is approved.\n"
        f"Tx: {tx_url(explorer_url, e.get('txHash'))}"
    )


def minter_denied(e: Item, explorer_url: str) -> str:
    return (
        "<b>Minter Denied</b>\n\n"
        f"Minter: {short_addr(e.get('minter'))}\n"
        f"Vetor: {short_addr(e.get('vetor') or 'unknown')}\n"
        f'Deny Message: "{escape_html(e.get("denyMessage"))}"\n'
        f'Original Application: "{escape_html(e.get("applyMessage"))}"\n\n'
        f"Tx: {tx_url(explorer_url, e.get('denyTxHash') or e.get('txHash'))}"
    )


def savings_rate_proposed(e: Item, explorer_url: str) -> str:
    next_change = e.get("nextChange")
    return (
        "<b>Savings Rate Proposed</b>\n\n"
        f"Proposer: {short_addr(e.get('proposer'))}\n"
        f"Next Rate: {format_ppm(e.get('nextRate'))}\n\n"
        f"<b>Takes effect: {format_timestamp(next_change)} ({time_until(next_change)})</b>\n\n"
        f"Tx: {tx_url(explorer_url, e.get('txHash'))}"
    )


def savings_rate_changed(e: Item, explorer_url: str) -> str:
    return (
        "<b>Savings Rate Changed</b>\n\n"
        f"Approved Rate: {format_ppm(e.get('approvedRate'))}\n\n"
        f"Tx: {tx_url(explorer_url, e.get('txHash'))}"
    )


def _fee_rates(e: Item) -> str:
    return (
        f"By: {short_addr(e.get('who'))}\n"
        f"Fee Rate: {format_ppm(e.get('nextFeeRate'))}\n"
        f"Savings Fee Rate: {format_ppm(e.get('nextSavingsFeeRate'))}\n"
        f"Minting Fee Rate: {format_ppm(e.get('nextMintingFeeRate'))}\n\n"
    )


def fee_rate_changes_proposed(e: Item, explorer_url: str) -> str:
    next_change = e.get("nextChange")
    return (
        "<b>Fee Rate Changes Proposed</b>\n\n"
        f"{_fee_rates(e)}"
        f"<b>Takes effect: {format_timestamp(next_change)} ({time_until(next_change)})</b>\n\n"
        f"Tx: {tx_url(explorer_url, e.get('txHash'))}"
    )


def fee_rate_changes_executed(e: Item, explorer_url: str) -> str:
    return (
        "<b>Fee Rate Changes Executed</b>\n\n"
        f"{_fee_rates(e)}"
        f"Tx: {tx_url(explorer_url, e.get('txHash'))}"
    )


def emergency_stop(e: Item, explorer_url: str) -> str:
    return (
        "<b>BRIDGE EMERGENCY STOP</b>\n\n"
        f"Bridge: {short_addr(e.get('bridgeAddress'))}\n"
        f"Caller: {short_addr(e.get('caller'))}\n"
        f'Message: "{escape_html(e.get("message"))}"\n\n'
        f"Tx: {tx_url(explorer_url, e.get('txHash'))}"
    )


def forced_liquidation(e: Item, explorer_url: str) -> str:
    return (
        "<b>Forced Liquidation</b>\n\n"
        f"Position: {short_addr(e.get('position'))}\n"
        f"Amount: {e.get('amount')}\n\n"
        f"Tx: {tx_url(explorer_url, e.get('txHash'))}"
    )


def position_denied(e: Item, explorer_url: str) -> str:
    return (
        "<b>Position Denied by Governance</b>\n\n"
        f"Position: {short_addr(e.get('position'))}\n"
        f"Denier: {short_addr(e.get('denier'))}\n"
        f'Message: "{escape_html(e.get("message"))}"\n\n'
        f"Tx: {tx_url(explorer_url, e.get('txHash'))}"
    )


def challenge_started(e: Item, explorer_url: str) -> str:
    return (
        "<b>Challenge Started</b>\n\n"
        f"Position: {short_addr(e.get('position'))}\n"
        f"Challenge #{e.get('number')}\n"
        f"Challenger: {short_addr(e.get('challenger'))}\n"
        f"Size: {e.get('size')}\n"
        f"Liq Price: {e.get('liqPrice')}\n"
        f"Duration: {e.get('duration')}s\n\n"
        f"Tx: {tx_url(explorer_url, e.get('txHash'))}"
    )


def challenge_succeeded(e: Item, explorer_url: str) -> str:
    return (
        "<b>Challenge Succeeded</b>\n\n"
        f"Position: {short_addr(e.get('position'))}\n"
        f"Challenge #{e.get('number')}\n"
        f"Bidder: {short_addr(e.get('bidder'))}\n"
        f"Bid: {e.get('bid')}\n"
        f"Filled Size: {e.get('filledSize')}\n"
        f"Acquired Collateral: {e.get('acquiredCollateral')}\n\n"
        f"Tx: {tx_url(explorer_url, e.get('txHash'))}"
    )


def challenge_averted(e: Item, explorer_url: str) -> str:
    return (
        "<b>Challenge Averted</b>\n\n"
        f"Position: {short_addr(e.get('position'))}\n"
        f"Challenge #{e.get('number')}\n"
        f"Bidder: {short_addr(e.get('bidder'))}\n"
        f"Bid: {e.get('bid')}\n"
        "Position saved.\n\n"
        f"Tx: {tx_url(explorer_url, e.get('txHash'))}"
    )


# ---- Operational messages ----------------------------------------------------

def startup_notice(settings) -> str:
    return (
        "<b>Juice Monitor Started</b>\n\n"
        f"JuiceSwap: {escape_html(settings.juiceswap_graphql_url)}\n"
        f"JuiceDollar: {escape_html(settings.juicedollar_graphql_url)}\n"
        f"Poll interval: {settings.poll_interval_ms // 1000}s\n"
        f"Init mode: {settings.init_mode}"
    )


def catchup_summary(cycles: int, counts: Mapping[str, int]) -> str:
    total = sum(counts.values())
    lines = [
        "<b>Catch-up Complete</b>\n",
        f"Historical events skipped: {total} over {cycles} cycle(s)",
    ]
    for category, n in sorted(counts.items(), key=lambda kv: (-kv[1], kv[0])):
        lines.append(f"  {escape_html(category)}: {n}")
    lines.append("\nLive alerting is now active.")
    return "\n".join(lines)
