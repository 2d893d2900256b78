from __future__ import annotations

import time
from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def epoch_millis() -> int:
    """
    Wall-clock milliseconds since the Unix epoch.
    """
    return time.time_ns() // 1_000_000
