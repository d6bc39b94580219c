"""
Recurrence expansion for the shift form.

A rule is a start date, a cadence and a stop condition. The stop condition is
either Until(date) or Count(n); the two are mutually exclusive by type, so the
"both" and "neither" cases cannot be expressed.

Weekday numbers follow the calendar grid: 0 = Sunday … 6 = Saturday.
"""
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional, Union

CADENCES = ('none', 'daily', 'weekly', 'weekdays', 'custom')

# Upper bound on returned dates, and on Count(n)
MAX_OCCURRENCES = 366
# Candidates examined after the start date. A week per occurrence, so even
# a one-weekday rule reaches the occurrence cap before the scan ends.
MAX_SCAN_DAYS = (MAX_OCCURRENCES + 1) * 7


@dataclass(frozen=True)
class Until:
    end: str  # YYYY-MM-DD, inclusive


@dataclass(frozen=True)
class Count:
    n: int  # includes the start date


StopCondition = Union[Until, Count]


def parse_date(day: str) -> date:
    """Strict YYYY-MM-DD; week dates and other ISO forms are rejected."""
    try:
        if len(day) != 10:
            raise ValueError(day)
        return datetime.strptime(day, '%Y-%m-%d').date()
    except (TypeError, ValueError):
        raise ValueError(f"Invalid date {day!r}, use YYYY-MM-DD")


def sunday_weekday(d: date) -> int:
    """Weekday with Sunday = 0, as used by the calendar and custom rules."""
    return (d.weekday() + 1) % 7


def parse_stop(end_date: Optional[str] = None, count: Optional[int] = None) -> StopCondition:
    """Build the stop condition from form fields. Exactly one must be given."""
    if end_date and count is not None:
        raise ValueError("Give either an end date or an occurrence count, not both")
    if end_date:
        parse_date(end_date)
        return Until(end_date)
    if count is not None:
        if isinstance(count, bool) or not isinstance(count, int):
            raise ValueError("Occurrence count must be an integer")
        if count < 1 or count > MAX_OCCURRENCES:
            raise ValueError(f"Occurrence count must be between 1 and {MAX_OCCURRENCES}")
        return Count(count)
    raise ValueError("An end date or an occurrence count is required")


def _matches(candidate: date, start: date, cadence: str, selected: frozenset) -> bool:
    if cadence == 'daily':
        return True
    if cadence == 'weekly':
        return candidate.weekday() == start.weekday()
    if cadence == 'weekdays':
        return candidate.weekday() < 5
    if cadence == 'custom':
        return sunday_weekday(candidate) in selected
    return False


def _expand(start: str, cadence: str, stop: StopCondition,
            selected_days: Iterable[int], cap: int) -> List[str]:
    if cadence not in CADENCES:
        raise ValueError(f"Unknown cadence {cadence!r}")
    first = parse_date(start)
    selected = frozenset(int(d) for d in selected_days)
    if any(d < 0 or d > 6 for d in selected):
        raise ValueError("Weekdays must be between 0 (Sunday) and 6 (Saturday)")

    dates = [first.isoformat()]
    if cadence == 'none' or (cadence == 'custom' and not selected):
        return dates

    if isinstance(stop, Count):
        limit = min(stop.n, cap)
        end = None
    elif isinstance(stop, Until):
        limit = cap
        end = parse_date(stop.end)
    else:
        raise ValueError("stop must be Until or Count")

    candidate = first
    for _ in range(MAX_SCAN_DAYS):
        if len(dates) >= limit:
            break
        candidate += timedelta(days=1)
        if end is not None and candidate > end:
            break
        if _matches(candidate, first, cadence, selected):
            dates.append(candidate.isoformat())
    return dates


def expand(start: str, cadence: str, stop: StopCondition,
           selected_days: Iterable[int] = ()) -> List[str]:
    """Return the ordered ISO dates a recurring shift is materialised on.

    The start date is always first, whether or not it matches the rule.
    At most MAX_OCCURRENCES dates are returned.
    """
    return _expand(start, cadence, stop, selected_days, MAX_OCCURRENCES)


def exceeds_cap(start: str, cadence: str, stop: StopCondition,
                selected_days: Iterable[int] = ()) -> bool:
    """True if the rule yields more than MAX_OCCURRENCES dates."""
    return len(_expand(start, cadence, stop, selected_days, MAX_OCCURRENCES + 1)) > MAX_OCCURRENCES


def preview(dates: List[str], limit: int = 5) -> dict:
    """First `limit` dates plus how many more are hidden."""
    shown = dates[:limit]
    return {
        'dates': shown,
        'more': max(0, len(dates) - len(shown)),
        'total': len(dates),
    }
