# SPDX-License-Identifier: MIT
# src/juice_monitor/feeds/juiceswap.py
"""
JuiceSwap feed: governor proposals and fee-collector / factory / gateway admin events.
"""
from __future__ import annotations

import logging
from typing import List

from ..alerts import templates
from ..categories import EventCategory as C, Feed
from ..models import Alert
from . import queries
from .base import CategoryQuery, Item, SourcePoller, single
from .client import GraphQLClient

logger = logging.getLogger(__name__)


def render_resolved_proposal(e: Item, explorer_url: str) -> List[Alert]:
    """Executed and vetoed proposals come back from one query; split them by status."""
    status = e.get("status")
    if status == "executed":
        return [Alert(C.GOVERNOR_PROPOSAL_EXECUTED, templates.governor_proposal_executed(e, explorer_url))]
    if status == "vetoed":
        return [Alert(C.GOVERNOR_PROPOSAL_VETOED, templates.governor_proposal_vetoed(e, explorer_url))]
    logger.warning(f"[juiceswap] Resolved proposal {e.get('proposalId')} has unexpected status {status!r}")
    return []


JUICESWAP_QUERIES = [
    CategoryQuery(
        C.GOVERNOR_PROPOSAL_CREATED, queries.GOVERNOR_PROPOSALS_NEW, "governorProposals",
        single(C.GOVERNOR_PROPOSAL_CREATED, templates.governor_proposal_created),
    ),
    # Executed and vetoed share the resolvedAt cursor
    CategoryQuery(
        C.GOVERNOR_PROPOSAL_EXECUTED, queries.GOVERNOR_PROPOSALS_RESOLVED, "governorProposals",
        render_resolved_proposal,
        advances=(C.GOVERNOR_PROPOSAL_EXECUTED, C.GOVERNOR_PROPOSAL_VETOED),
    ),
    CategoryQuery(
        C.FACTORY_OWNER_CHANGED, queries.FACTORY_OWNER_CHANGES, "factoryOwnerChanges",
        single(C.FACTORY_OWNER_CHANGED, templates.factory_owner_changed),
    ),
    CategoryQuery(
        C.FEE_COLLECTOR_OWNER_UPDATED, queries.FEE_COLLECTOR_OWNER_UPDATES, "feeCollectorOwnerUpdates",
        single(C.FEE_COLLECTOR_OWNER_UPDATED, templates.fee_collector_owner_updated),
    ),
    CategoryQuery(
        C.SWAP_ROUTER_UPDATED, queries.FEE_COLLECTOR_ROUTER_UPDATES, "feeCollectorRouterUpdates",
        single(C.SWAP_ROUTER_UPDATED, templates.swap_router_updated),
    ),
    CategoryQuery(
        C.FEE_COLLECTOR_UPDATED, queries.FEE_COLLECTOR_COLLECTOR_UPDATES, "feeCollectorCollectorUpdates",
        single(C.FEE_COLLECTOR_UPDATED, templates.fee_collector_updated),
    ),
    CategoryQuery(
        C.PROTECTION_PARAMS_UPDATED, queries.FEE_COLLECTOR_PROTECTION_UPDATES, "feeCollectorProtectionUpdates",
        single(C.PROTECTION_PARAMS_UPDATED, templates.protection_params_updated),
    ),
    CategoryQuery(
        C.BRIDGED_TOKEN_REGISTERED, queries.GATEWAY_BRIDGED_TOKEN_REGISTRATIONS, "gatewayBridgedTokenRegistrations",
        single(C.BRIDGED_TOKEN_REGISTERED, templates.bridged_token_registered),
    ),
]


def build_juiceswap_poller(client: GraphQLClient) -> SourcePoller:
    return SourcePoller(Feed.JUICESWAP, client, JUICESWAP_QUERIES)
