"""Позволяет запускать утилиту как ``python -m reclaimer``."""

from __future__ import annotations

import sys

from reclaimer.main import main

sys.exit(main())
