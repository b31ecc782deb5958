"""UTC datetime utilities."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def age_seconds(then: datetime, now: datetime | None = None) -> float:
    """Seconds elapsed since `then`; naive datetimes are treated as UTC."""
    if then.tzinfo is None:
        then = then.replace(tzinfo=timezone.utc)
    return ((now or utc_now()) - then).total_seconds()
