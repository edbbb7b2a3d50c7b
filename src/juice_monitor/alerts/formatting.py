# SPDX-License-Identifier: MIT
# src/juice_monitor/alerts/formatting.py
"""
Small display helpers shared by the Telegram templates.
"""
from __future__ import annotations

import html
import time
from datetime import datetime, timezone
from typing import Optional, Union

Number = Union[str, int, float, None]


def _to_int(value: Number) -> Optional[int]:
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None


def short_addr(addr: Optional[str]) -> str:
    """Shorten an address: 0xECc0...D82B"""
    if not addr or len(addr) < 10:
        return addr or ""
    return f"{addr[:6]}...{addr[-4:]}"


def format_timestamp(ts: Number) -> str:
    """Unix seconds -> 'Tue, 14 Nov 2023 22:13:20 UTC' ('N/A' for 0, garbage or out of range)."""
    seconds = _to_int(ts)
    if not seconds:
        return "N/A"
    try:
        dt = datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        # beyond what the platform's datetime can represent
        return "N/A"
    return dt.strftime("%a, %d %b %Y %H:%M:%S UTC")


def time_until(ts: Number, now: Optional[float] = None) -> str:
    """Human countdown to a future unix timestamp, e.g. 'in 2h 15m' or 'EXPIRED'."""
    seconds = _to_int(ts)
    if seconds is None:
        return "EXPIRED"
    current = int(time.time() if now is None else now)
    diff = seconds - current
    if diff <= 0:
        return "EXPIRED"

    days = diff // 86400
    hours = (diff % 86400) // 3600
    minutes = (diff % 3600) // 60

    parts = []
    if days > 0:
        parts.append(f"{days}d")
    if hours > 0:
        parts.append(f"{hours}h")
    # minutes are noise once we are counting days
    if minutes > 0 and days == 0:
        parts.append(f"{minutes}m")
    return f"in {' '.join(parts)}" if parts else "< 1m"


def format_bigint_value(value: Optional[str], decimals: int, display_decimals: int = 2) -> str:
    """
    Format an integer token amount with ``decimals`` places, truncating (not
    rounding) to ``display_decimals``: ('98500000', 6) -> '98.50'.
    """
    if not value or value == "0":
        return "0"

    negative = value.startswith("-")
    digits = value[1:] if negative else value

    padded = digits.rjust(decimals + 1, "0")
    int_part = padded[: len(padded) - decimals] or "0"
    frac_part = padded[len(padded) - decimals:]

    formatted = f"{int(int_part):,}"
    result = f"{formatted}.{frac_part[:display_decimals]}" if display_decimals > 0 else formatted
    return f"-{result}" if negative else result


def format_ppm(ppm: Number) -> str:
    """Parts-per-million as a percentage: 10000 -> '1.00%'."""
    return f"{(_to_int(ppm) or 0) / 10000:.2f}%"


def format_bps(bps: Number) -> str:
    """Basis points as a percentage: 100 -> '1.00%'."""
    return f"{(_to_int(bps) or 0) / 100:.2f}%"


def tx_url(explorer_url: str, tx_hash: Optional[str]) -> str:
    return f"{explorer_url}/tx/{tx_hash}"


def escape_html(text: Optional[str]) -> str:
    """Escape &, < and > for Telegram's HTML parse mode."""
    return html.escape(text or "", quote=False)
