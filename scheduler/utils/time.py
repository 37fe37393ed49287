from datetime import datetime, timezone as dt_tz
import math
import time

MINUTE_MS = 60_000
DAY_MS = 24 * 60 * MINUTE_MS


def now_ms():
    return int(time.time() * 1000)


def to_datetime(ms):
    return datetime.fromtimestamp(ms / 1000, tz=dt_tz.utc)


def to_ms(dt):
    return int(dt.timestamp() * 1000)


def to_iso(ms):
    return to_datetime(ms).isoformat()


def day_key(ms):
    """UTC calendar day of a timestamp, e.g. ``2023-11-14``."""
    return to_datetime(ms).date().isoformat()


def format_due_relative(due_at, now):
    """
    Human-readable due label for card lists.

    Past due cards read "Due today"; later dates are counted in calendar days
    and coarsened to months (30 days) and years (365 days).
    """
    day_diff = (to_datetime(due_at).date() - to_datetime(now).date()).days
    if day_diff <= 0:
        return "Due today"
    if day_diff == 1:
        return "Due tomorrow"

    if day_diff >= 365:
        unit, n = "year", math.floor(day_diff / 365 + 0.5)
    elif day_diff >= 30:
        unit, n = "month", math.floor(day_diff / 30 + 0.5)
    else:
        unit, n = "day", day_diff

    n = max(1, n)
    return f"Due in {n} {unit if n == 1 else unit + 's'}"
