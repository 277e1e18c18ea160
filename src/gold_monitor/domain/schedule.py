"""Daily refresh schedule helpers."""

from datetime import UTC, datetime, timedelta, timezone


def duration_until_next_midnight(
    utc_offset_hours: float, now: datetime | None = None
) -> timedelta:
    """Return the time left until the next midnight at a fixed UTC offset."""
    tz = timezone(timedelta(hours=utc_offset_hours))
    local_now = (now or datetime.now(tz=UTC)).astimezone(tz)
    midnight = local_now.replace(hour=0, minute=0, second=0, microsecond=0)
    return midnight + timedelta(days=1) - local_now
