"""Process-level defaults read from the environment."""

from __future__ import annotations

import os

LOG_LEVEL = os.environ.get("SAMPLESIM_LOG_LEVEL", "WARNING").upper()
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
