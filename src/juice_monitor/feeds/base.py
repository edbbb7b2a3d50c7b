# SPDX-License-Identifier: MIT
# src/juice_monitor/feeds/base.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Mapping, Optional, Protocol, Sequence, Tuple

from ..categories import CATEGORY_INFO, EventCategory, Feed
from ..models import Alert, PollResult
from .client import GraphQLClient

logger = logging.getLogger(__name__)

Item = Mapping[str, Any]
Renderer = Callable[[Item, str], Iterable[Alert]]


@dataclass(frozen=True)
class CategoryQuery:
    """
    One incremental query against a feed.

    ``category`` supplies the cursor fed into ``$watermark``; the last item's
    ``cursor_field`` becomes the candidate for every category in ``advances``
    (usually just ``category``; the resolved-proposals query advances both
    executed and vetoed together).
    """
    category: EventCategory
    document: str
    root_field: str
    render: Renderer
    advances: Tuple[EventCategory, ...] = ()

    @property
    def cursor_field(self) -> str:
        return CATEGORY_INFO[self.category].cursor_field

    @property
    def advanced_categories(self) -> Tuple[EventCategory, ...]:
        return self.advances or (self.category,)


class Poller(Protocol):
    """What the monitor needs from a feed poller."""

    feed: Feed

    def poll(self, watermarks: Mapping[EventCategory, str], explorer_url: str) -> PollResult: ...


def single(category: EventCategory, fmt: Callable[[Item, str], str]) -> Renderer:
    """Renderer emitting exactly one audible alert per item."""
    def render(item: Item, explorer_url: str) -> List[Alert]:
        return [Alert(category=category, message=fmt(item, explorer_url))]
    return render


class SourcePoller:
    """
    Runs every category query for one feed.

    Each query is isolated: a failure is logged and counted, and that category
    simply yields no candidate this cycle while its siblings proceed.
    """

    def __init__(self, feed: Feed, client: GraphQLClient, queries: Sequence[CategoryQuery]):
        self.feed = feed
        self.client = client
        self.queries = list(queries)

    def poll(self, watermarks: Mapping[EventCategory, str], explorer_url: str) -> PollResult:
        result = PollResult()
        for q in self.queries:
            try:
                alerts, cursor = self._poll_query(q, watermarks[q.category], explorer_url)
            except Exception as e:
                logger.error(f"[{self.feed.value}] Failed to poll {q.category.value}: {e}")
                result.query_failures += 1
                continue

            result.alerts.extend(alerts)
            if cursor is not None:
                for category in q.advanced_categories:
                    result.watermark_updates[category] = cursor

        if result.alerts or result.query_failures:
            logger.debug(
                f"[{self.feed.value}] {len(result.alerts)} alerts, "
                f"{len(result.watermark_updates)} cursor updates, "
                f"{result.query_failures} failed queries"
            )
        return result

    def _poll_query(
        self, q: CategoryQuery, watermark: str, explorer_url: str
    ) -> Tuple[List[Alert], Optional[str]]:
        """Fetch one page and render it. Any error fails the whole page, so no cursor moves."""
        data = self.client.query(q.document, {"watermark": watermark})
        items = list(data[q.root_field]["items"])
        if not items:
            return [], None

        alerts: List[Alert] = []
        for item in items:
            alerts.extend(q.render(item, explorer_url))

        # Advance even when the page produced no alerts, or the same
        # already-irrelevant items would be re-fetched forever.
        return alerts, _cursor_of(items[-1], q.cursor_field)

    def __repr__(self) -> str:
        return f"SourcePoller({self.feed.value}, {len(self.queries)} queries)"


def _cursor_of(item: Item, field_name: str) -> Optional[str]:
    value = item.get(field_name)
    if value is None or value == "":
        return None
    return str(value)
