# SPDX-License-Identifier: MIT
# src/juice_monitor/categories.py
"""
The closed set of protocol event categories the monitor watches.

Each category is owned by exactly one feed and is ordered by one cursor field
on that feed. The enum values double as the keys of the persisted watermark
file, so they must never be renamed.
"""
from __future__ import annotations

from enum import Enum
from typing import Dict, FrozenSet, List, NamedTuple

DEFAULT_CURSOR = "0"


class Feed(str, Enum):
    JUICESWAP = "juiceswap"
    JUICEDOLLAR = "juicedollar"


class EventCategory(str, Enum):
    GOVERNOR_PROPOSAL_CREATED = "governorProposalCreated"
    MINTER_APPLICATION = "minterApplication"
    NEW_ORIGINAL_POSITION = "newOriginalPosition"
    SAVINGS_RATE_PROPOSED = "savingsRateProposed"
    FEE_RATE_CHANGES_PROPOSED = "feeRateChangesProposed"
    EMERGENCY_STOP = "emergencyStop"
    FORCED_LIQUIDATION = "forcedLiquidation"
    GOVERNOR_PROPOSAL_EXECUTED = "governorProposalExecuted"
    GOVERNOR_PROPOSAL_VETOED = "governorProposalVetoed"
    FACTORY_OWNER_CHANGED = "factoryOwnerChanged"
    FEE_COLLECTOR_OWNER_UPDATED = "feeCollectorOwnerUpdated"
    SWAP_ROUTER_UPDATED = "swapRouterUpdated"
    FEE_COLLECTOR_UPDATED = "feeCollectorUpdated"
    PROTECTION_PARAMS_UPDATED = "protectionParamsUpdated"
    BRIDGED_TOKEN_REGISTERED = "bridgedTokenRegistered"
    POSITION_DENIED = "positionDenied"
    MINTER_DENIED = "minterDenied"
    CHALLENGE_STARTED = "challengeStarted"
    CHALLENGE_SUCCEEDED = "challengeSucceeded"
    CHALLENGE_AVERTED = "challengeAverted"
    SAVINGS_RATE_CHANGED = "savingsRateChanged"
    FEE_RATE_CHANGES_EXECUTED = "feeRateChangesExecuted"

    def __str__(self) -> str:
        return self.value


class CategoryInfo(NamedTuple):
    feed: Feed
    cursor_field: str


_C = EventCategory

CATEGORY_INFO: Dict[EventCategory, CategoryInfo] = {
    # JuiceSwap
    _C.GOVERNOR_PROPOSAL_CREATED: CategoryInfo(Feed.JUICESWAP, "createdAt"),
    _C.GOVERNOR_PROPOSAL_EXECUTED: CategoryInfo(Feed.JUICESWAP, "resolvedAt"),
    _C.GOVERNOR_PROPOSAL_VETOED: CategoryInfo(Feed.JUICESWAP, "resolvedAt"),
    _C.FACTORY_OWNER_CHANGED: CategoryInfo(Feed.JUICESWAP, "blockTimestamp"),
    _C.FEE_COLLECTOR_OWNER_UPDATED: CategoryInfo(Feed.JUICESWAP, "blockTimestamp"),
    _C.SWAP_ROUTER_UPDATED: CategoryInfo(Feed.JUICESWAP, "blockTimestamp"),
    _C.FEE_COLLECTOR_UPDATED: CategoryInfo(Feed.JUICESWAP, "blockTimestamp"),
    _C.PROTECTION_PARAMS_UPDATED: CategoryInfo(Feed.JUICESWAP, "blockTimestamp"),
    _C.BRIDGED_TOKEN_REGISTERED: CategoryInfo(Feed.JUICESWAP, "blockTimestamp"),
    # JuiceDollar
    _C.NEW_ORIGINAL_POSITION: CategoryInfo(Feed.JUICEDOLLAR, "created"),
    _C.MINTER_APPLICATION: CategoryInfo(Feed.JUICEDOLLAR, "applyDate"),
    _C.MINTER_DENIED: CategoryInfo(Feed.JUICEDOLLAR, "denyDate"),
    _C.SAVINGS_RATE_PROPOSED: CategoryInfo(Feed.JUICEDOLLAR, "created"),
    _C.SAVINGS_RATE_CHANGED: CategoryInfo(Feed.JUICEDOLLAR, "created"),
    _C.FEE_RATE_CHANGES_PROPOSED: CategoryInfo(Feed.JUICEDOLLAR, "timestamp"),
    _C.FEE_RATE_CHANGES_EXECUTED: CategoryInfo(Feed.JUICEDOLLAR, "timestamp"),
    _C.EMERGENCY_STOP: CategoryInfo(Feed.JUICEDOLLAR, "timestamp"),
    _C.FORCED_LIQUIDATION: CategoryInfo(Feed.JUICEDOLLAR, "timestamp"),
    _C.POSITION_DENIED: CategoryInfo(Feed.JUICEDOLLAR, "timestamp"),
    _C.CHALLENGE_STARTED: CategoryInfo(Feed.JUICEDOLLAR, "created"),
    _C.CHALLENGE_SUCCEEDED: CategoryInfo(Feed.JUICEDOLLAR, "created"),
    _C.CHALLENGE_AVERTED: CategoryInfo(Feed.JUICEDOLLAR, "created"),
}

# Fail fast at import if a category was added without its mapping
_missing = [c.value for c in EventCategory if c not in CATEGORY_INFO]
if _missing:
    raise RuntimeError(f"Categories without feed/cursor mapping: {', '.join(_missing)}")

ALL_CATEGORIES: List[EventCategory] = list(EventCategory)


def parse_category(tag: str) -> EventCategory:
    """Resolve a persisted tag to its category; unknown tags are rejected."""
    try:
        return EventCategory(tag)
    except ValueError as e:
        raise ValueError(f"Unknown event category '{tag}'") from e


def categories_for(feed: Feed) -> List[EventCategory]:
    return [c for c in ALL_CATEGORIES if CATEGORY_INFO[c].feed is feed]


# Categories filled by one query are re-fetched through a single cursor,
# so their watermarks must be held or advanced together.
CURSOR_GROUPS: List[FrozenSet[EventCategory]] = [
    frozenset({_C.GOVERNOR_PROPOSAL_EXECUTED, _C.GOVERNOR_PROPOSAL_VETOED}),
]


def cursor_group(category: EventCategory) -> FrozenSet[EventCategory]:
    """Every category sharing ``category``'s cursor (itself included)."""
    for group in CURSOR_GROUPS:
        if category in group:
            return group
    return frozenset({category})
