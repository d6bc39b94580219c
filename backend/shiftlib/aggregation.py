"""
Derived figures over the in-memory shift list.

Everything here is a pure function recomputed on each call. Dates are
zero-padded 'YYYY-MM-DD' strings, so plain string comparison orders them and
a 'YYYY-MM' prefix selects a month.
"""
import math
import re
from collections import defaultdict
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from .constants import DASHBOARD_LIST_SIZE, RECENT_TRANSACTIONS_SIZE, CHART_MONTHS

ALL = 'all'

_MONTH_KEY_RE = re.compile(r'\d{4}-(0[1-9]|1[0-2])')


def _amount(value: Any) -> float:
    try:
        amount = float(value or 0)
    except (TypeError, ValueError, OverflowError):
        return 0.0
    return amount if math.isfinite(amount) else 0.0


def month_prefix(day: Optional[date] = None) -> str:
    day = day or date.today()
    return f"{day.year:04d}-{day.month:02d}"


def total_by_status(shifts: Iterable[dict], status: str) -> float:
    return sum(_amount(s.get('paymentAmount')) for s in shifts if s.get('paymentStatus') == status)


def totals(shifts: List[dict]) -> Dict[str, Any]:
    """Received/pending sums, counts and their share of the total."""
    received = total_by_status(shifts, 'received')
    pending = total_by_status(shifts, 'pending')
    total = received + pending
    return {
        'received': received,
        'pending': pending,
        'total': total,
        'received_count': sum(1 for s in shifts if s.get('paymentStatus') == 'received'),
        'pending_count': sum(1 for s in shifts if s.get('paymentStatus') == 'pending'),
        'count': len(shifts),
        'received_pct': (received / total * 100) if total > 0 else 0.0,
        'pending_pct': (pending / total * 100) if total > 0 else 0.0,
    }


def shifts_in_month(shifts: Iterable[dict], prefix: str) -> List[dict]:
    return [s for s in shifts if (s.get('date') or '').startswith(prefix)]


def upcoming(shifts: Iterable[dict], today: str, limit: int = DASHBOARD_LIST_SIZE) -> List[dict]:
    """Shifts on or after today, soonest first."""
    rows = [s for s in shifts if (s.get('date') or '') >= today]
    rows.sort(key=lambda s: s.get('date') or '')
    return rows[:limit]


def recent(shifts: Iterable[dict], today: str, limit: int = DASHBOARD_LIST_SIZE) -> List[dict]:
    """Shifts strictly before today, latest first."""
    rows = [s for s in shifts if (s.get('date') or '') < today]
    rows.sort(key=lambda s: s.get('date') or '', reverse=True)
    return rows[:limit]


def pending_amount(expected: Any, actual: Any) -> float:
    return max(0.0, _amount(expected) - _amount(actual))


def target_id(year: int, month: int) -> str:
    return f"{int(year):04d}-{int(month):02d}"


def monthly_progress(targets: Iterable[dict], year: int) -> Dict[str, Any]:
    """Expected vs. actual for each month of a year, plus the yearly sums.

    Months without a stored target count as zero. Pending is clamped at zero
    per month and in aggregate.
    """
    by_id = {t.get('id'): t for t in targets}
    months = []
    for m in range(1, 13):
        tid = target_id(year, m)
        t = by_id.get(tid) or {}
        expected = _amount(t.get('expected'))
        actual = _amount(t.get('actual'))
        months.append({
            'id': tid,
            'month': m,
            'expected': expected,
            'actual': actual,
            'pending': pending_amount(expected, actual),
        })
    expected_total = sum(r['expected'] for r in months)
    actual_total = sum(r['actual'] for r in months)
    return {
        'year': year,
        'months': months,
        'expected': expected_total,
        'actual': actual_total,
        'pending': pending_amount(expected_total, actual_total),
        'progress_pct': (actual_total / expected_total * 100) if expected_total > 0 else 0.0,
    }


def filter_shifts(shifts: Iterable[dict], location: Optional[str] = ALL,
                  specialty: Optional[str] = ALL) -> List[dict]:
    """Keep shifts matching every active filter; None or 'all' is inactive."""
    out = []
    for s in shifts:
        if location and location != ALL and s.get('location') != location:
            continue
        if specialty and specialty != ALL and s.get('specialty') != specialty:
            continue
        out.append(s)
    return out


def distinct(shifts: Iterable[dict], field: str) -> List[str]:
    return sorted({s.get(field) for s in shifts if s.get(field)})


def monthly_income(shifts: Iterable[dict], months: int = CHART_MONTHS) -> List[Dict[str, Any]]:
    """Received/pending per month for the last `months` months that have data."""
    data: Dict[str, Dict[str, float]] = defaultdict(lambda: {'received': 0.0, 'pending': 0.0})
    for s in shifts:
        day = s.get('date')
        key = day[:7] if isinstance(day, str) else ''
        if not _MONTH_KEY_RE.fullmatch(key):
            continue
        bucket = 'received' if s.get('paymentStatus') == 'received' else 'pending'
        data[key][bucket] += _amount(s.get('paymentAmount'))
    rows = []
    keys = sorted(data)[-months:] if months > 0 else []
    for key in keys:
        v = data[key]
        rows.append({
            'month': key,
            'received': v['received'],
            'pending': v['pending'],
            'total': v['received'] + v['pending'],
        })
    return rows


def pending_payments(shifts: Iterable[dict]) -> List[dict]:
    rows = [s for s in shifts if s.get('paymentStatus') == 'pending']
    rows.sort(key=lambda s: s.get('date') or '')
    return rows


def recent_transactions(shifts: Iterable[dict], limit: int = RECENT_TRANSACTIONS_SIZE) -> List[dict]:
    rows = sorted(shifts, key=lambda s: s.get('date') or '', reverse=True)
    return rows[:limit]


def toggle_status(status: Optional[str]) -> str:
    return 'pending' if status == 'received' else 'received'
