# SPDX-License-Identifier: MIT
# src/juice_monitor/state/__init__.py
"""
Durable per-category watermarks (how far each feed has been consumed).
"""

from .store import WatermarkStore, Watermarks, load_watermarks, save_watermarks

__all__ = ["WatermarkStore", "Watermarks", "load_watermarks", "save_watermarks"]
