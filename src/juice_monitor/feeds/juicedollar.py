# SPDX-License-Identifier: MIT
# src/juice_monitor/feeds/juicedollar.py
"""
JuiceDollar feed: positions, minters, rate governance, bridge stops and challenges.
"""
from __future__ import annotations

from typing import List

from ..alerts import templates
from ..categories import EventCategory as C, Feed
from ..models import Alert
from . import queries
from .base import CategoryQuery, Item, SourcePoller, single
from .client import GraphQLClient


def render_minter_application(e: Item, explorer_url: str) -> List[Alert]:
    # Applications that were already denied are reported by the minterDenied
    # query; they still advance the applyDate cursor.
    if e.get("denyDate"):
        return []
    return [Alert(C.MINTER_APPLICATION, templates.minter_application(e, explorer_url))]


JUICEDOLLAR_QUERIES = [
    CategoryQuery(
        C.NEW_ORIGINAL_POSITION, queries.POSITION_V2S_NEW, "positionV2s",
        single(C.NEW_ORIGINAL_POSITION, templates.new_original_position),
    ),
    CategoryQuery(
        C.MINTER_APPLICATION, queries.MINTERS_NEW, "minters",
        render_minter_application,
    ),
    CategoryQuery(
        C.MINTER_DENIED, queries.MINTERS_DENIED, "minters",
        single(C.MINTER_DENIED, templates.minter_denied),
    ),
    CategoryQuery(
        C.SAVINGS_RATE_PROPOSED, queries.SAVINGS_RATE_PROPOSEDS, "savingsRateProposeds",
        single(C.SAVINGS_RATE_PROPOSED, templates.savings_rate_proposed),
    ),
    CategoryQuery(
        C.SAVINGS_RATE_CHANGED, queries.SAVINGS_RATE_CHANGEDS, "savingsRateChangeds",
        single(C.SAVINGS_RATE_CHANGED, templates.savings_rate_changed),
    ),
    CategoryQuery(
        C.FEE_RATE_CHANGES_PROPOSED, queries.RATE_CHANGES_PROPOSEDS, "rateChangesProposeds",
        single(C.FEE_RATE_CHANGES_PROPOSED, templates.fee_rate_changes_proposed),
    ),
    CategoryQuery(
        C.FEE_RATE_CHANGES_EXECUTED, queries.RATE_CHANGES_EXECUTEDS, "rateChangesExecuteds",
        single(C.FEE_RATE_CHANGES_EXECUTED, templates.fee_rate_changes_executed),
    ),
    CategoryQuery(
        C.EMERGENCY_STOP, queries.EMERGENCY_STOPPEDS, "emergencyStoppeds",
        single(C.EMERGENCY_STOP, templates.emergency_stop),
    ),
    CategoryQuery(
        C.FORCED_LIQUIDATION, queries.FORCED_SALES, "forcedSales",
        single(C.FORCED_LIQUIDATION, templates.forced_liquidation),
    ),
    CategoryQuery(
        C.POSITION_DENIED, queries.POSITION_DENIED_BY_GOVERNANCES, "positionDeniedByGovernances",
        single(C.POSITION_DENIED, templates.position_denied),
    ),
    CategoryQuery(
        C.CHALLENGE_STARTED, queries.CHALLENGE_V2S, "challengeV2s",
        single(C.CHALLENGE_STARTED, templates.challenge_started),
    ),
    CategoryQuery(
        C.CHALLENGE_SUCCEEDED, queries.CHALLENGE_BID_V2S_SUCCEEDED, "challengeBidV2s",
        single(C.CHALLENGE_SUCCEEDED, templates.challenge_succeeded),
    ),
    CategoryQuery(
        C.CHALLENGE_AVERTED, queries.CHALLENGE_BID_V2S_AVERTED, "challengeBidV2s",
        single(C.CHALLENGE_AVERTED, templates.challenge_averted),
    ),
]


def build_juicedollar_poller(client: GraphQLClient) -> SourcePoller:
    return SourcePoller(Feed.JUICEDOLLAR, client, JUICEDOLLAR_QUERIES)
