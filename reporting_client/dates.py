"""Formatting of date-valued query parameters."""

from __future__ import annotations

from datetime import date, datetime

from reporting_client.config import DATE_FORMAT


def format_date(instant: datetime | date) -> str:
    """Render an instant in the service's fixed date pattern.

    Wall-clock fields are written as given; aware datetimes are not shifted
    to another zone. A plain date is rendered at midnight.
    """
    if not isinstance(instant, datetime):
        instant = datetime(instant.year, instant.month, instant.day)
    # %Y is not zero-padded below year 1000 on every platform
    return instant.strftime(DATE_FORMAT.replace("%Y", f"{instant.year:04d}"))
