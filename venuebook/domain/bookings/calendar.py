"""
Calendar helpers for the appointment views.

Appointments are bucketed once by the date string of their start time, and the
month / week / day grids read from those buckets, so rendering any view is a
single pass over the appointment list.
"""

import calendar
from datetime import date, datetime, timedelta
from typing import Any, Iterable, Optional

from ...shared.validators import parse_datetime, utcnow

VIEWS = ("month", "week", "day")


def _start_of(appointment) -> datetime:
    if isinstance(appointment, dict):
        value = appointment.get("start_time") or appointment.get("startTime")
    else:
        value = appointment.start_time
    return parse_datetime(value)


def date_key(moment) -> str:
    """YYYY-MM-DD key for a date, datetime or ISO string"""
    if isinstance(moment, date) and not isinstance(moment, datetime):
        return moment.isoformat()
    return parse_datetime(moment).date().isoformat()


def bucket_by_date(appointments: Iterable[Any]) -> dict[str, list[Any]]:
    """Group appointments by start date, keeping input order within each day"""
    buckets: dict[str, list[Any]] = {}
    for appointment in appointments:
        buckets.setdefault(date_key(_start_of(appointment)), []).append(appointment)
    return buckets


def _cell(day: date, buckets: dict[str, list[Any]], in_month: bool = True) -> dict[str, Any]:
    key = day.isoformat()
    return {"date": key, "inMonth": in_month, "appointments": buckets.get(key, [])}


def month_grid(year: int, month: int, buckets: dict[str, list[Any]]) -> list[list[dict[str, Any]]]:
    """Weeks (Sunday first) covering the month, padded with the neighbouring days"""
    weeks = calendar.Calendar(firstweekday=calendar.SUNDAY).monthdatescalendar(year, month)
    return [[_cell(day, buckets, day.month == month) for day in week] for week in weeks]


def week_start(anchor: date) -> date:
    """The Sunday on or before anchor"""
    return anchor - timedelta(days=(anchor.weekday() + 1) % 7)


def week_view(anchor: date, buckets: dict[str, list[Any]]) -> list[dict[str, Any]]:
    first = week_start(anchor)
    return [_cell(first + timedelta(days=offset), buckets) for offset in range(7)]


def day_view(anchor: date, buckets: dict[str, list[Any]]) -> dict[str, Any]:
    return _cell(anchor, buckets)


def view_range(view: str, anchor: date) -> tuple[date, date]:
    """First and last calendar day shown by a view"""
    if view == "day":
        return anchor, anchor
    if view == "week":
        first = week_start(anchor)
        return first, first + timedelta(days=6)
    weeks = calendar.Calendar(firstweekday=calendar.SUNDAY).monthdatescalendar(
        anchor.year, anchor.month
    )
    return weeks[0][0], weeks[-1][-1]


def build_view(view: str, anchor: date, appointments: Iterable[Any]) -> dict[str, Any]:
    if view not in VIEWS:
        raise ValueError(f"view must be one of: {', '.join(VIEWS)}")

    buckets = bucket_by_date(appointments)
    result: dict[str, Any] = {"view": view, "date": anchor.isoformat()}
    if view == "month":
        result["weeks"] = month_grid(anchor.year, anchor.month, buckets)
    elif view == "week":
        result["days"] = week_view(anchor, buckets)
    else:
        result["day"] = day_view(anchor, buckets)
    return result


def upcoming(appointments: Iterable[Any], now: Optional[datetime] = None) -> list[Any]:
    """Appointments starting after now, soonest first"""
    now = now or utcnow()
    return sorted((a for a in appointments if _start_of(a) > now), key=_start_of)
