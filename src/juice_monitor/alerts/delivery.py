# SPDX-License-Identifier: MIT
# src/juice_monitor/alerts/delivery.py
"""
Alert delivery to a Telegram chat via the Bot API.

Two independent budgets bound every send:
- transient failures (network errors, timeouts, non-429 statuses) consume
  attempts, with exponential backoff between them;
- HTTP 429 responses never consume attempts; instead their requested waits
  accumulate, and the send gives up once the total exceeds a cap.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional, Set

import requests

from ..categories import EventCategory
from ..models import Alert

logger = logging.getLogger(__name__)

TELEGRAM_API = "https://api.telegram.org"
MAX_ATTEMPTS = 3
RETRY_BASE_S = 1.0
REQUEST_TIMEOUT_S = 30
DEFAULT_RETRY_AFTER_S = 5
MAX_RATE_LIMIT_WAIT_S = 60
MAX_MESSAGE_LENGTH = 4096
TRUNCATION_MARKER = "\n\n[truncated]"
# Telegram allows roughly 30 msg/s into a group; stay well under it
SEND_DELAY_S = 0.1


def truncate_message(text: str, limit: int = MAX_MESSAGE_LENGTH) -> str:
    """Cut ``text`` to at most ``limit`` chars, ending with the truncation marker if cut."""
    if len(text) <= limit:
        return text
    return text[: limit - len(TRUNCATION_MARKER)] + TRUNCATION_MARKER


@dataclass
class DeliveryReport:
    failures: int = 0
    failed_categories: Set[EventCategory] = field(default_factory=set)


class TelegramDelivery:
    """
    Sends alerts one at a time to a single Telegram chat.

    Messages are sent with HTML parse mode and link previews disabled; silent
    alerts use Telegram's ``disable_notification``.
    """

    def __init__(
        self,
        bot_token: str,
        chat_id: str,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
        timeout: float = REQUEST_TIMEOUT_S,
    ):
        """
        Args:
            bot_token: Bot API token from @BotFather
            chat_id: Target chat (user, group or channel id)
            session: Optional requests session (tests pass a fake)
            sleep: Blocking sleep used for backoff and rate-limit waits
            timeout: Per-request timeout in seconds
        """
        self.chat_id = chat_id
        self.session = session or requests.Session()
        self.sleep = sleep
        self.timeout = timeout
        self._url = f"{TELEGRAM_API}/bot{bot_token}/sendMessage"

    def send(self, text: str, silent: bool = False) -> bool:
        """
        Deliver one message.

        Returns:
            True once Telegram accepts the message, False when either budget
            is exhausted.
        """
        payload = {
            "chat_id": self.chat_id,
            "text": truncate_message(text),
            "parse_mode": "HTML",
            "disable_web_page_preview": True,
            "disable_notification": silent,
        }

        attempt = 0
        rate_limit_wait = 0.0
        while attempt < MAX_ATTEMPTS:
            try:
                response = self.session.post(self._url, json=payload, timeout=self.timeout)

                if response.ok:
                    return True

                # Rate limited: retry without consuming the attempt budget
                if response.status_code == 429:
                    retry_after = _retry_after(response)
                    rate_limit_wait += retry_after
                    if rate_limit_wait > MAX_RATE_LIMIT_WAIT_S:
                        logger.error(
                            f"[telegram] Rate limit wait exceeded {MAX_RATE_LIMIT_WAIT_S}s, giving up"
                        )
                        return False
                    logger.warning(f"[telegram] Rate limited, retrying after {retry_after}s")
                    self.sleep(retry_after)
                    continue

                logger.error(f"[telegram] Send failed ({response.status_code}): {response.text[:500]}")
            except requests.RequestException as e:
                # str(e) may embed the request URL, which carries the bot token
                logger.error(f"[telegram] Send error (attempt {attempt + 1}): {type(e).__name__}")

            attempt += 1
            if attempt < MAX_ATTEMPTS:
                self.sleep(RETRY_BASE_S * 2 ** (attempt - 1))

        return False

    def send_all(self, alerts: Iterable[Alert]) -> DeliveryReport:
        """
        Send alerts sequentially.

        Returns:
            DeliveryReport with the number of failed sends and the distinct
            categories that had at least one failure.
        """
        queue = list(alerts)
        report = DeliveryReport()
        for alert in queue:
            if not self.send(alert.message, alert.silent):
                logger.error(f"[telegram] Failed to send alert for {alert.category.value}")
                report.failures += 1
                report.failed_categories.add(alert.category)
            if len(queue) > 1:
                self.sleep(SEND_DELAY_S)
        return report


def _retry_after(response) -> float:
    try:
        body = response.json()
    except ValueError:
        return DEFAULT_RETRY_AFTER_S
    params = body.get("parameters") if isinstance(body, dict) else None
    value = params.get("retry_after") if isinstance(params, dict) else None
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
        return DEFAULT_RETRY_AFTER_S
    return value
