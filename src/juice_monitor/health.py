# SPDX-License-Identifier: MIT
# src/juice_monitor/health.py
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .categories import Feed

logger = logging.getLogger(__name__)

HEALTH_LOG_INTERVAL_CYCLES = 20


@dataclass
class HealthStats:
    """Process counters. Purely observational; nothing reads them for control flow."""
    start_time: float = field(default_factory=time.time)
    cycles: int = 0
    alerts_sent: int = 0
    poll_errors: Dict[Feed, int] = field(default_factory=lambda: {feed: 0 for feed in Feed})
    delivery_errors: int = 0
    last_successful_poll: Optional[float] = None

    def record_poll_errors(self, feed: Feed, count: int = 1) -> None:
        self.poll_errors[feed] = self.poll_errors.get(feed, 0) + count

    def record_successful_poll(self, now: Optional[float] = None) -> None:
        self.last_successful_poll = time.time() if now is None else now

    def record_delivery(self, attempted: int, failures: int) -> None:
        self.alerts_sent += attempted - failures
        self.delivery_errors += failures

    def snapshot(self, now: Optional[float] = None) -> Dict[str, Any]:
        now = time.time() if now is None else now
        return {
            "uptime_h": round((now - self.start_time) / 3600, 1),
            "cycles": self.cycles,
            "alerts_sent": self.alerts_sent,
            "poll_errors": {feed.value: n for feed, n in self.poll_errors.items()},
            "delivery_errors": self.delivery_errors,
            "last_poll_age_s": (
                round(now - self.last_successful_poll) if self.last_successful_poll is not None else None
            ),
        }

    def record_cycle(self, now: Optional[float] = None) -> Optional[Dict[str, Any]]:
        """Count a finished cycle; every HEALTH_LOG_INTERVAL_CYCLES cycles log and return a snapshot."""
        self.cycles += 1
        if self.cycles % HEALTH_LOG_INTERVAL_CYCLES != 0:
            return None

        snap = self.snapshot(now)
        last_poll = f"{snap['last_poll_age_s']}s ago" if snap["last_poll_age_s"] is not None else "never"
        errors = " ".join(f"{name}={n}" for name, n in snap["poll_errors"].items())
        logger.info(
            f"[health] uptime={snap['uptime_h']}h cycles={snap['cycles']} "
            f"alerts_sent={snap['alerts_sent']} "
            f"errors=[{errors} tg={snap['delivery_errors']}] "
            f"last_poll={last_poll}"
        )
        return snap
