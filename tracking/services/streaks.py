# tracking/services/streaks.py

from datetime import date, datetime, timedelta, timezone


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def to_utc_date(value) -> date:
    """Datetimes are converted to UTC first; naive ones are taken as UTC."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    return value


def consecutive_day_streak(dates, today=None) -> int:
    """
    Number of consecutive days ending `today` that appear in `dates`.

    A day without an entry today means a streak of 0, even if yesterday
    had one.
    """
    seen = {to_utc_date(d) for d in dates}
    cursor = today or utc_today()
    streak = 0

    while cursor in seen:
        streak += 1
        cursor -= timedelta(days=1)

    return streak
