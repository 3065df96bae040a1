# File: mowen_mcp/memory/periods.py

"""Resolution of search query types into calendar date ranges."""

from datetime import date, timedelta
from typing import Optional, Tuple

QUERY_TYPES = (
    "specific_date",
    "date_range",
    "today",
    "yesterday",
    "this_week",
    "last_week",
    "this_month",
    "last_month",
)

DATE_FORMAT_HINT = "YYYY-MM-DD"

def parse_date(value: str) -> date:
    """Parse a YYYY-MM-DD string, raising ValueError with a readable message."""
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid date '{value}', expected {DATE_FORMAT_HINT}")

def _month_start(day: date) -> date:
    return day.replace(day=1)

def _month_end(day: date) -> date:
    next_month = (day.replace(day=28) + timedelta(days=4)).replace(day=1)
    return next_month - timedelta(days=1)

def resolve_period(
    query_type: Optional[str],
    today: date,
    specific_date: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None
) -> Tuple[date, date]:
    """
    Turn a query type into an inclusive (start, end) pair of days.

    Weeks run Monday to Sunday. An unknown or missing query type means
    today, and ``specific_date`` without a date also means today.

    Raises:
        ValueError: If ``date_range`` lacks a bound or a date is malformed
    """
    if query_type == "specific_date":
        day = parse_date(specific_date) if specific_date else today
        return day, day

    if query_type == "date_range":
        if not start_date or not end_date:
            raise ValueError("date_range queries need both start_date and end_date")
        start, end = parse_date(start_date), parse_date(end_date)
        if start > end:
            start, end = end, start
        return start, end

    if query_type == "yesterday":
        day = today - timedelta(days=1)
        return day, day

    if query_type == "this_week":
        start = today - timedelta(days=today.weekday())
        return start, start + timedelta(days=6)

    if query_type == "last_week":
        start = today - timedelta(days=today.weekday() + 7)
        return start, start + timedelta(days=6)

    if query_type == "this_month":
        return _month_start(today), _month_end(today)

    if query_type == "last_month":
        last_day = _month_start(today) - timedelta(days=1)
        return _month_start(last_day), last_day

    return today, today
