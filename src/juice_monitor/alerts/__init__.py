# SPDX-License-Identifier: MIT
# src/juice_monitor/alerts/__init__.py
"""
Alert rendering and delivery.

This module provides:
- Telegram HTML templates for every event category
- Display helpers (addresses, timestamps, token amounts, rates)
- Telegram delivery with retry, backoff and rate-limit handling
"""

from .delivery import DeliveryReport, TelegramDelivery, truncate_message

__all__ = [
    "DeliveryReport",
    "TelegramDelivery",
    "truncate_message",
]
