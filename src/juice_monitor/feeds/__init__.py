# SPDX-License-Identifier: MIT
# src/juice_monitor/feeds/__init__.py
"""
Incremental pollers for the JuiceSwap and JuiceDollar indexers.
"""

from .base import CategoryQuery, Poller, SourcePoller
from .client import FeedQueryError, GraphQLClient, RequestsGraphQLClient
from .juicedollar import build_juicedollar_poller
from .juiceswap import build_juiceswap_poller

__all__ = [
    "CategoryQuery",
    "Poller",
    "SourcePoller",
    "FeedQueryError",
    "GraphQLClient",
    "RequestsGraphQLClient",
    "build_juicedollar_poller",
    "build_juiceswap_poller",
]
