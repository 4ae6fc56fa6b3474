"""
UTC helpers shared by models and services.

SQLite drops tzinfo when it stores DateTime(timezone=True) columns, so values
read back from the database are naive. Everything in this service is UTC,
so a naive value is re-tagged as UTC before it is compared with "now".
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
