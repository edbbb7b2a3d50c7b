# SPDX-License-Identifier: MIT
# src/juice_monitor/state/store.py
"""
Watermark persistence.

The watermark file is a flat JSON object mapping every event category to the
cursor (as a string) of the last item the monitor has consumed for it. Writes
go through a sibling ``.tmp`` file and an atomic rename so a reader never sees
a torn file. A file that cannot be parsed is moved aside to ``.bak`` and
replaced by a fresh default set.
"""
from __future__ import annotations

import json
import logging
import os
import time
from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple, Union

from ..categories import ALL_CATEGORIES, DEFAULT_CURSOR, EventCategory, parse_category

logger = logging.getLogger(__name__)

Watermarks = Dict[EventCategory, str]


class CorruptWatermarkFile(ValueError):
    """The watermark file exists but does not hold a valid watermark object."""


def initialize_watermarks(cursor: str = DEFAULT_CURSOR) -> Watermarks:
    return {category: cursor for category in ALL_CATEGORIES}


def default_cursor(init_mode: str, now: Optional[float] = None) -> str:
    """Cursor used for categories with no stored value."""
    if init_mode == "now":
        return str(int(time.time() if now is None else now))
    return DEFAULT_CURSOR


def decode_watermarks(raw: bytes, default: str = DEFAULT_CURSOR) -> Watermarks:
    """
    Parse file contents into a complete watermark set.

    Missing categories get ``default``; present values are kept verbatim.
    Unknown keys are dropped. Anything that is not a JSON object of scalar
    cursors raises CorruptWatermarkFile.
    """
    try:
        parsed = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise CorruptWatermarkFile(str(e)) from e

    if not isinstance(parsed, dict):
        raise CorruptWatermarkFile(f"expected a JSON object, got {type(parsed).__name__}")

    wm = initialize_watermarks(default)
    for key, value in parsed.items():
        try:
            category = parse_category(key)
        except ValueError:
            logger.warning(f"[watermark] Ignoring unknown category '{key}' in watermark file")
            continue
        # bool is an int subclass but never a valid cursor
        if isinstance(value, bool) or not isinstance(value, (str, int)):
            raise CorruptWatermarkFile(f"cursor for '{key}' is not a string: {value!r}")
        wm[category] = str(value)
    return wm


def encode_watermarks(watermarks: Mapping[EventCategory, str]) -> str:
    # Stable key order (category declaration order) keeps diffs readable
    payload = {category.value: str(watermarks[category]) for category in ALL_CATEGORIES}
    return json.dumps(payload, indent=2)


class WatermarkStore:
    """
    File-backed watermark store.

    The monitor is the only writer; the file can be inspected by operators at
    any time thanks to the atomic replace in ``save``.
    """

    def __init__(self, path: Union[str, Path], init_mode: str = "genesis"):
        """
        Args:
            path: Location of the watermark JSON file
            init_mode: "genesis" starts every category at "0",
                       "now" starts every category at the current epoch second
        """
        self.path = Path(path)
        self.init_mode = init_mode

    @property
    def tmp_path(self) -> Path:
        return self.path.with_name(self.path.name + ".tmp")

    @property
    def backup_path(self) -> Path:
        return self.path.with_name(self.path.name + ".bak")

    def load(self) -> Tuple[Watermarks, bool]:
        """
        Load the watermark set.

        Returns:
            (watermarks, is_first_run). ``is_first_run`` is True when no
            usable state existed (missing or corrupt file).
        """
        default = default_cursor(self.init_mode)

        if not self.path.exists():
            logger.info(
                f"[watermark] No watermark file at {self.path}. "
                f'Initializing with mode="{self.init_mode}" (ts={default})'
            )
            wm = initialize_watermarks(default)
            self.save(wm)
            return wm, True

        raw = self.path.read_bytes()
        try:
            wm = decode_watermarks(raw, default)
        except CorruptWatermarkFile as e:
            logger.warning(
                f"[watermark] Corrupted watermark file ({e}), backing up to {self.backup_path}"
            )
            os.replace(self.path, self.backup_path)
            wm = initialize_watermarks(default)
            self.save(wm)
            return wm, True

        return wm, False

    def save(self, watermarks: Mapping[EventCategory, str]) -> None:
        """Persist atomically: write ``<path>.tmp`` then rename over ``<path>``."""
        data = encode_watermarks(watermarks)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.tmp_path
        with open(tmp, "w", encoding="utf-8") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, self.path)


def load_watermarks(path: Union[str, Path], init_mode: str = "genesis") -> Tuple[Watermarks, bool]:
    return WatermarkStore(path, init_mode).load()


def save_watermarks(path: Union[str, Path], watermarks: Mapping[EventCategory, str]) -> None:
    WatermarkStore(path).save(watermarks)
