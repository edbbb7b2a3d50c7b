# SPDX-License-Identifier: MIT
# src/juice_monitor/__init__.py
"""
Juice Protocol monitor: polls the JuiceSwap and JuiceDollar indexers for
governance-relevant events and relays them to a Telegram chat.
"""

__version__ = "0.1.0"
