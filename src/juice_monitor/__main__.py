# SPDX-License-Identifier: MIT
# src/juice_monitor/__main__.py
from .cli import main

raise SystemExit(main())
