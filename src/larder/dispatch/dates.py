"""
Larder - Day and time range resolution.

Every intent that carries a day reference resolves it here, so "friday"
means the same date whether it arrives with add_meal or move_meal.
"""

from datetime import date, timedelta

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
TIME_RANGES = ("today", "tomorrow", "this_week", "all")


def resolve_day(day: str | None, today: date | None = None) -> date:
    """
    Resolve a day reference to a calendar date.

    Weekday names resolve to the next occurrence on or after today, so
    naming today's weekday gives today. "tomorrow" is always today + 1.
    "today", a missing day and anything unrecognized give today.

    Examples (today = Wednesday 2024-05-15):
        resolve_day("wednesday") -> 2024-05-15
        resolve_day("monday") -> 2024-05-20
        resolve_day("tomorrow") -> 2024-05-16
    """
    today = today or date.today()
    name = (day or "").strip().lower()

    if name == "tomorrow":
        return today + timedelta(days=1)
    if name in WEEKDAYS:
        days_until = (WEEKDAYS.index(name) - today.weekday()) % 7
        return today + timedelta(days=days_until)
    return today


def _shift_years(value: date, years: int) -> date:
    try:
        return value.replace(year=value.year + years)
    except ValueError:
        # Feb 29 in a non-leap target year
        return value.replace(year=value.year + years, day=28)


def resolve_time_range(time_range: str | None, today: date | None = None) -> tuple[date, date]:
    """
    Resolve a named time range to an inclusive (start, end) pair.

    - today / tomorrow: that single day
    - this_week: Sunday through Saturday of the week containing today
    - all (and anything unrecognized): one year back to one year forward
    """
    today = today or date.today()

    match (time_range or "").strip().lower():
        case "today":
            return today, today
        case "tomorrow":
            tomorrow = today + timedelta(days=1)
            return tomorrow, tomorrow
        case "this_week":
            start = week_start(today)
            return start, start + timedelta(days=6)
        case _:
            return _shift_years(today, -1), _shift_years(today, 1)


def week_start(day: date) -> date:
    """The Sunday on or before `day`."""
    # date.weekday() is Monday=0
    return day - timedelta(days=(day.weekday() + 1) % 7)
