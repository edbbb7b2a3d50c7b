# SPDX-License-Identifier: MIT
# src/juice_monitor/monitor.py
"""
Poll cycle orchestration.

Lifecycle: INIT (load watermarks) -> CATCHUP (first run only) -> STEADY
(fixed-interval cycles) -> SHUTDOWN (final flush). Watermarks are owned here
and only here; pollers and delivery just return values.

A category's watermark moves only when every alert produced for it in the
cycle was delivered. A category with a failed send keeps its cursor and is
re-fetched next cycle, so alerting is at-least-once for it.
"""
from __future__ import annotations

import logging
import threading
import time
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Collection, Dict, List, Mapping, Optional, Sequence, Set, Tuple

from .alerts import templates
from .alerts.delivery import DeliveryReport, TelegramDelivery
from .categories import EventCategory, cursor_group
from .config import Settings
from .feeds import RequestsGraphQLClient, build_juicedollar_poller, build_juiceswap_poller
from .feeds.base import Poller
from .health import HealthStats
from .models import Alert, PollResult
from .state.store import Watermarks, WatermarkStore

logger = logging.getLogger(__name__)

CATCHUP_THROTTLE_S = 1.0
MAX_INCOMPLETE_CATCHUP_CYCLES = 10

Updates = Dict[EventCategory, str]


@dataclass
class CycleOutcome:
    alerts: List[Alert] = field(default_factory=list)
    updates: Updates = field(default_factory=dict)
    failed_categories: Set[EventCategory] = field(default_factory=set)
    failures: int = 0
    polled: bool = False


def _cursor_key(value: str):
    # Cursors are decimal strings that may exceed 64 bits; compare numerically
    # when possible and fall back to string order otherwise.
    try:
        return (0, int(value), "")
    except ValueError:
        return (1, 0, value)


def merge_updates(*updates: Mapping[EventCategory, str]) -> Updates:
    """Combine candidate-update mappings; on conflict the greater cursor wins."""
    merged: Updates = {}
    for update in updates:
        for category, cursor in update.items():
            current = merged.get(category)
            if current is None or _cursor_key(cursor) > _cursor_key(current):
                merged[category] = cursor
    return merged


def held_categories(failed: Collection[EventCategory]) -> Set[EventCategory]:
    """Failed categories widened to every category sharing their cursor."""
    return {member for category in failed for member in cursor_group(category)}


def commit_updates(
    watermarks: Mapping[EventCategory, str],
    updates: Mapping[EventCategory, str],
    failed: Collection[EventCategory] = (),
) -> Watermarks:
    """
    Return a new watermark set with every candidate applied except held ones.

    A failed category holds its whole cursor group: when a vetoed proposal
    fails to send, the executed cursor (which drives the shared query) must
    stay put too or the vetoed item is never fetched again.
    """
    held = held_categories(failed)
    committed = dict(watermarks)
    for category, cursor in updates.items():
        if category in held:
            continue
        committed[category] = cursor
    return committed


class Monitor:
    """
    Drives the poll/deliver/commit loop.

    Cancellation is a ``threading.Event``: it is checked before every cycle
    and catch-up iteration, and every wait is a ``stop_event.wait`` so a
    shutdown request ends the sleep immediately. In-flight HTTP calls are not
    interrupted; they are bounded by their own timeouts.
    """

    def __init__(
        self,
        settings: Settings,
        store: WatermarkStore,
        pollers: Sequence[Poller],
        delivery: TelegramDelivery,
        health: Optional[HealthStats] = None,
        stop_event: Optional[threading.Event] = None,
        catchup_throttle_s: float = CATCHUP_THROTTLE_S,
        catchup_retry_wait_s: Optional[float] = None,
    ):
        self.settings = settings
        self.store = store
        self.pollers = list(pollers)
        self.delivery = delivery
        self.health = health or HealthStats()
        self.stop_event = stop_event or threading.Event()
        self.catchup_throttle_s = catchup_throttle_s
        # defaults to the steady poll interval
        self.catchup_retry_wait_s = (
            settings.poll_interval_s if catchup_retry_wait_s is None else catchup_retry_wait_s
        )

    @property
    def stopped(self) -> bool:
        return self.stop_event.is_set()

    # ------------------------------------------------------------------ polling

    def poll_all(self, watermarks: Mapping[EventCategory, str]) -> Tuple[List[Alert], Updates, bool, int]:
        """
        Run every poller concurrently against a snapshot of ``watermarks``.

        Returns:
            (alerts, merged candidate updates, whether any source produced a
            result, number of failed queries plus failed pollers)
        """
        snapshot = dict(watermarks)
        explorer = self.settings.citrea_explorer_url
        results: List[PollResult] = []
        failures = 0

        with ThreadPoolExecutor(max_workers=max(1, len(self.pollers)), thread_name_prefix="poll") as pool:
            futures = [(p, pool.submit(p.poll, snapshot, explorer)) for p in self.pollers]
            for poller, future in futures:
                try:
                    result = future.result()
                except Exception as e:
                    logger.error(f"[monitor] {poller.feed.value} poll failed: {e}", exc_info=True)
                    self.health.record_poll_errors(poller.feed)
                    failures += 1
                    continue
                if result.query_failures:
                    self.health.record_poll_errors(poller.feed, result.query_failures)
                    failures += result.query_failures
                results.append(result)

        polled = bool(results)
        if polled:
            self.health.record_successful_poll()

        alerts = [a for r in results for a in r.alerts]
        updates = merge_updates(*(r.watermark_updates for r in results))
        return alerts, updates, polled, failures

    # ------------------------------------------------------------------ phases

    def run_catchup(self, watermarks: Watermarks) -> Watermarks:
        """
        Drain the historical backlog after a first run.

        Cycles run back-to-back until one yields no alerts with every query
        answered. Backlog alerts are logged and tallied but not sent to the
        chat; every cycle commits all candidates and persists, so a crash
        resumes from the last page.

        An empty cycle with failed queries does not end catch-up, since the
        unreachable feed's history would otherwise be relayed live. Such
        cycles are retried every ``catchup_retry_wait_s``, at most
        MAX_INCOMPLETE_CATCHUP_CYCLES times in a row, before going live anyway.
        """
        logger.info("[catchup] First run: draining historical backlog (alerts are logged, not sent)")
        cycles = 0
        incomplete = 0
        counts: Counter = Counter()

        while not self.stopped:
            cycles += 1
            alerts, updates, _, failures = self.poll_all(watermarks)
            watermarks = commit_updates(watermarks, updates)
            self._persist(watermarks)

            for alert in alerts:
                counts[alert.category.value] += 1
            logger.info(f"[catchup] Cycle {cycles}: {len(alerts)} historical events skipped")

            if alerts:
                incomplete = 0
                self.stop_event.wait(self.catchup_throttle_s)
                continue
            if not failures:
                break

            incomplete += 1
            if incomplete >= MAX_INCOMPLETE_CATCHUP_CYCLES:
                logger.warning(
                    f"[catchup] {failures} queries still failing after {incomplete} retries; going live anyway"
                )
                break
            logger.warning(f"[catchup] {failures} queries failed, retrying before going live")
            self.stop_event.wait(self.catchup_retry_wait_s)

        if self.stopped:
            logger.info(f"[catchup] Interrupted after {cycles} cycles")
            return watermarks

        total = sum(counts.values())
        logger.info(f"[catchup] Complete: {total} historical events over {cycles} cycles")
        self.delivery.send(templates.catchup_summary(cycles, counts), silent=True)
        return watermarks

    def run_cycle(self, watermarks: Watermarks) -> Tuple[Watermarks, CycleOutcome]:
        """One steady-state cycle: poll, deliver, commit what was delivered, persist."""
        alerts, updates, polled, _ = self.poll_all(watermarks)

        report = DeliveryReport()
        if alerts:
            logger.info(f"[monitor] Sending {len(alerts)} alerts")
            report = self.delivery.send_all(alerts)
            self.health.record_delivery(len(alerts), report.failures)

        held = sorted(c.value for c in held_categories(report.failed_categories) if c in updates)
        if held:
            logger.warning(f"[monitor] Holding watermarks after failed delivery: {', '.join(held)}")

        committed = commit_updates(watermarks, updates, report.failed_categories)
        if polled:
            self._persist(committed)

        self.health.record_cycle()
        outcome = CycleOutcome(
            alerts=alerts,
            updates=updates,
            failed_categories=set(report.failed_categories),
            failures=report.failures,
            polled=polled,
        )
        return committed, outcome

    def run(self) -> Watermarks:
        """Run until the stop event is set. Returns the final (persisted) watermarks."""
        watermarks, first_run = self.store.load()
        logger.info(f"[monitor] Watermarks loaded from {self.store.path} (first_run={first_run})")

        try:
            if not self.stopped:
                self.delivery.send(templates.startup_notice(self.settings))
            if first_run and not self.stopped:
                watermarks = self.run_catchup(watermarks)

            interval = self.settings.poll_interval_s
            while not self.stopped:
                started = time.monotonic()
                watermarks, _ = self.run_cycle(watermarks)
                wait = max(0.0, interval - (time.monotonic() - started))
                if wait > 0:
                    self.stop_event.wait(wait)
        finally:
            logger.info("[monitor] Shutting down, flushing watermarks")
            self._persist(watermarks)

        logger.info("[monitor] Goodbye.")
        return watermarks

    def _persist(self, watermarks: Watermarks) -> bool:
        try:
            self.store.save(watermarks)
            return True
        except OSError as e:
            logger.error(f"[monitor] Failed to save watermarks: {e}")
            return False


def build_monitor(settings: Settings, stop_event: Optional[threading.Event] = None) -> Monitor:
    """Wire the production clients, pollers and delivery from settings."""
    pollers = [
        build_juiceswap_poller(RequestsGraphQLClient(settings.juiceswap_graphql_url)),
        build_juicedollar_poller(RequestsGraphQLClient(settings.juicedollar_graphql_url)),
    ]
    delivery = TelegramDelivery(settings.telegram_bot_token, settings.telegram_chat_id)
    store = WatermarkStore(settings.watermark_path, settings.init_mode)
    return Monitor(settings, store, pollers, delivery, stop_event=stop_event)
