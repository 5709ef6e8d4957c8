from __future__ import annotations

from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def iso_timestamp(dt: datetime | None = None) -> str:
    """
    ISO-8601 UTC timestamp with millisecond precision and a 'Z' suffix,
    e.g. ``2024-05-01T12:30:00.250Z``.

    Naive datetimes are taken to be UTC already.
    """
    if dt is None:
        dt = utc_now()
    elif dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt = dt.astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"
