# SPDX-License-Identifier: MIT
# src/juice_monitor/cli.py
"""
Command-line entrypoint.

Usage:
  juice-monitor
  juice-monitor --init-mode now --poll-interval-ms 15000
  python -m juice_monitor --watermark-path /data/watermarks.json

Configuration comes from the environment (and an optional .env); flags
override the corresponding variables.
"""
from __future__ import annotations

import argparse
import logging
import signal
import threading
from typing import List, Optional

from .config import INIT_MODES, ConfigError, load_settings
from .monitor import build_monitor

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"

EXIT_OK = 0
EXIT_CONFIG = 2


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Monitor Juice Protocol feeds and alert a Telegram chat")
    p.add_argument("--watermark-path", help="Watermark JSON file (overrides WATERMARK_PATH)")
    p.add_argument("--init-mode", choices=INIT_MODES, help="Starting cursor when no state exists")
    p.add_argument("--poll-interval-ms", type=int, help="Cycle interval in milliseconds (>= 1000)")
    p.add_argument("--log-level", help="Logging level (DEBUG, INFO, WARNING, ...)")
    return p


def install_signal_handlers(stop_event: threading.Event) -> None:
    """SIGINT and SIGTERM both request a graceful shutdown."""
    def _handle(signum, frame):
        logger.info(f"Received {signal.Signals(signum).name}, shutting down...")
        stop_event.set()

    signal.signal(signal.SIGINT, _handle)
    signal.signal(signal.SIGTERM, _handle)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)

    try:
        settings = load_settings().from_overrides(
            watermark_path=args.watermark_path,
            init_mode=args.init_mode,
            poll_interval_ms=args.poll_interval_ms,
            log_level=args.log_level,
        )
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        return EXIT_CONFIG

    logging.getLogger().setLevel(settings.log_level)
    logger.info("%s", "=" * 60)
    logger.info("Juice Protocol Monitor")
    logger.info(
        "juiceswap=%s | juicedollar=%s | interval=%ss | watermarks=%s | init_mode=%s",
        settings.juiceswap_graphql_url, settings.juicedollar_graphql_url,
        settings.poll_interval_s, settings.watermark_path, settings.init_mode,
    )
    logger.info("%s", "=" * 60)

    stop_event = threading.Event()
    install_signal_handlers(stop_event)
    build_monitor(settings, stop_event).run()
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
