# SPDX-License-Identifier: MIT
# src/juice_monitor/models.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

from .categories import EventCategory


@dataclass(frozen=True)
class Alert:
    category: EventCategory
    message: str
    silent: bool = False


@dataclass
class PollResult:
    """
    Output of one poller for one cycle.

    ``watermark_updates`` only holds categories that returned items; an absent
    category means "nothing new", never "reset to zero".
    """
    alerts: List[Alert] = field(default_factory=list)
    watermark_updates: Dict[EventCategory, str] = field(default_factory=dict)
    query_failures: int = 0
