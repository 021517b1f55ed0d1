"""
Service clock.

Calendar checks (past travel dates, subscription validity) and stored
timestamps both use UTC, independent of the server's local time zone.
"""

from datetime import date, datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_today() -> date:
    return utc_now().date()
