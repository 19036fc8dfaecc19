"""
Season Classifier
Maps a point in time to the season label used to partition reviews.
"""

from datetime import datetime, tzinfo
from enum import Enum
from typing import Optional
from zoneinfo import ZoneInfo

# Seasons follow the calendar where the stores are
SERVICE_TIMEZONE = ZoneInfo("Asia/Seoul")


class Season(Enum):
    """Meteorological seasons."""

    SPRING = "SPRING"  # Mar - May
    SUMMER = "SUMMER"  # Jun - Aug
    FALL = "FALL"  # Sep - Nov
    WINTER = "WINTER"  # Dec - Feb


_MONTH_TO_SEASON = {
    1: Season.WINTER,
    2: Season.WINTER,
    3: Season.SPRING,
    4: Season.SPRING,
    5: Season.SPRING,
    6: Season.SUMMER,
    7: Season.SUMMER,
    8: Season.SUMMER,
    9: Season.FALL,
    10: Season.FALL,
    11: Season.FALL,
    12: Season.WINTER,
}


def season_of(month: int) -> Season:
    """Season a calendar month (1-12) falls in."""
    try:
        return _MONTH_TO_SEASON[month]
    except KeyError:
        raise ValueError(f"Invalid month: {month}") from None


def current_season(now: datetime, tz: Optional[tzinfo] = None) -> str:
    """
    Season label for a timestamp, e.g. "2026-FALL".

    Winter spans the year boundary and is labelled with the year it starts in,
    so 2027-01-10 falls in "2026-WINTER".

    Aware timestamps are converted to the service time zone before the month is
    read; naive timestamps are taken as already local.

    Args:
        now: Point in time to classify
        tz: Calendar to classify in (defaults to SERVICE_TIMEZONE)

    Returns:
        Season label "{year}-{SEASON}"
    """
    if now.tzinfo is not None:
        now = now.astimezone(tz or SERVICE_TIMEZONE)
    season = season_of(now.month)
    year = now.year - 1 if now.month in (1, 2) else now.year
    return f"{year}-{season.value}"
