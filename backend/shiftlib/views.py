"""
View models for the dashboard, shift list, calendar and financial screens.

Each function takes the full shift list (and targets where needed) and
recomputes everything from scratch, the same way the browser views re-filter
the in-memory list on every render.
"""
import calendar
from datetime import date
from typing import Any, Dict, List, Optional

from . import aggregation as agg
from .color_utils import DEFAULT_COLOR, is_light_color
from .constants import (
    SHIFT_TYPES, PAYMENT_STATUSES, MONTH_NAMES, MONTH_ABBR, DAY_NAMES, CHART_MONTHS,
)

PIE_RADIUS = 40
PIE_CIRCUMFERENCE = 251.2  # 2·π·40, rounded as the chart draws it


# ── Display formatting ─────────────────────────────────────────

def format_currency(value: Any, symbol: str = 'R$') -> str:
    """1234.5 -> 'R$ 1.234,50' (dot thousands, comma decimals)."""
    amount = agg._amount(value)
    sign = '-' if amount < 0 else ''
    text = f"{abs(amount):,.2f}".replace(',', '_').replace('.', ',').replace('_', '.')
    return f"{sign}{symbol} {text}"


def format_date(day: str, long: bool = False) -> str:
    try:
        d = date.fromisoformat(day)
    except (TypeError, ValueError):
        return day or ''
    if long:
        return f"{calendar.day_name[d.weekday()]}, {d.day:02d} {MONTH_NAMES[d.month - 1]} {d.year}"
    return f"{d.day:02d} {MONTH_ABBR[d.month - 1]}"


def _present(shift: dict, currency: str) -> dict:
    color = shift.get('color') or DEFAULT_COLOR
    return {
        **shift,
        'shiftTypeLabel': SHIFT_TYPES.get(shift.get('shiftType'), shift.get('shiftType') or ''),
        'paymentStatusLabel': PAYMENT_STATUSES.get(shift.get('paymentStatus'), ''),
        'dateLabel': format_date(shift.get('date')),
        'amountLabel': format_currency(shift.get('paymentAmount'), currency),
        'displayColor': color,
        'darkText': is_light_color(color),
    }


# ── Dashboard ──────────────────────────────────────────────────

def dashboard_view(shifts: List[dict], today: Optional[date] = None, currency: str = 'R$') -> Dict[str, Any]:
    today = today or date.today()
    today_str = today.isoformat()
    this_month = agg.shifts_in_month(shifts, agg.month_prefix(today))
    totals = agg.totals(shifts)
    month_total = sum(agg._amount(s.get('paymentAmount')) for s in this_month)
    return {
        'today': today_str,
        'cards': {
            'total_received': totals['received'],
            'total_pending': totals['pending'],
            'month_total': month_total,
            'month_count': len(this_month),
            'total_shifts': len(shifts),
        },
        'labels': {
            'total_received': format_currency(totals['received'], currency),
            'total_pending': format_currency(totals['pending'], currency),
            'month_total': format_currency(month_total, currency),
        },
        'upcoming': [_present(s, currency) for s in agg.upcoming(shifts, today_str)],
        'recent': [_present(s, currency) for s in agg.recent(shifts, today_str)],
    }


# ── Shift list ─────────────────────────────────────────────────

def shifts_view(shifts: List[dict], currency: str = 'R$') -> Dict[str, Any]:
    rows = sorted(shifts, key=lambda s: s.get('date') or '', reverse=True)
    out = []
    for s in rows:
        item = _present(s, currency)
        item['dateLabel'] = format_date(s.get('date'), long=True)
        out.append(item)
    return {'shifts': out, 'count': len(out)}


# ── Calendar ───────────────────────────────────────────────────

def calendar_view(shifts: List[dict], year: int, month: int, today: Optional[date] = None,
                  location: Optional[str] = agg.ALL, specialty: Optional[str] = agg.ALL,
                  currency: str = 'R$') -> Dict[str, Any]:
    """Sunday-first month grid with the filtered shifts of each day."""
    today = today or date.today()
    prefix = f"{year:04d}-{month:02d}"
    visible = agg.filter_shifts(shifts, location, specialty)
    in_month = agg.shifts_in_month(visible, prefix)

    by_day: Dict[str, List[dict]] = {}
    for s in in_month:
        by_day.setdefault(s['date'], []).append(s)

    leading = (calendar.weekday(year, month, 1) + 1) % 7
    num_days = calendar.monthrange(year, month)[1]
    cells: List[Optional[dict]] = [None] * leading
    for d in range(1, num_days + 1):
        key = f"{prefix}-{d:02d}"
        day_shifts = sorted(by_day.get(key, []), key=lambda s: s.get('startTime') or '')
        cells.append({
            'day': d,
            'date': key,
            'is_today': key == today.isoformat(),
            'shifts': [_present(s, currency) for s in day_shifts],
        })
    while len(cells) % 7:
        cells.append(None)
    weeks = [cells[i:i + 7] for i in range(0, len(cells), 7)]

    totals = agg.totals(in_month)
    prev_y, prev_m = (year - 1, 12) if month == 1 else (year, month - 1)
    next_y, next_m = (year + 1, 1) if month == 12 else (year, month + 1)
    return {
        'year': year,
        'month': month,
        'title': f"{MONTH_NAMES[month - 1]} {year}",
        'day_names': DAY_NAMES,
        'leading_blanks': leading,
        'weeks': weeks,
        'filters': {
            'location': location or agg.ALL,
            'specialty': specialty or agg.ALL,
            'locations': agg.distinct(shifts, 'location'),
            'specialties': agg.distinct(shifts, 'specialty'),
        },
        'summary': {
            'count': len(in_month),
            'received': totals['received'],
            'pending': totals['pending'],
            'total': totals['total'],
        },
        'prev': {'year': prev_y, 'month': prev_m},
        'next': {'year': next_y, 'month': next_m},
    }


def calendar_day(shifts: List[dict], day: str, location: Optional[str] = agg.ALL,
                 specialty: Optional[str] = agg.ALL, currency: str = 'R$') -> Dict[str, Any]:
    rows = [s for s in agg.filter_shifts(shifts, location, specialty) if s.get('date') == day]
    rows.sort(key=lambda s: s.get('startTime') or '')
    total = sum(agg._amount(s.get('paymentAmount')) for s in rows)
    return {
        'date': day,
        'title': format_date(day, long=True),
        'shifts': [_present(s, currency) for s in rows],
        'total': total,
        'total_label': format_currency(total, currency),
    }


# ── Financial ──────────────────────────────────────────────────

def pie_segments(received_pct: float, pending_pct: float) -> List[Dict[str, Any]]:
    """SVG stroke-dash values for the two-slice payment status ring."""
    unit = PIE_CIRCUMFERENCE / 100
    return [
        {
            'status': 'received',
            'pct': received_pct,
            'dasharray': f"{received_pct * unit:.2f} {PIE_CIRCUMFERENCE}",
            'dashoffset': 0.0,
        },
        {
            'status': 'pending',
            'pct': pending_pct,
            'dasharray': f"{pending_pct * unit:.2f} {PIE_CIRCUMFERENCE}",
            'dashoffset': round(-received_pct * unit, 2),
        },
    ]


def bar_chart(shifts: List[dict], months: int = CHART_MONTHS) -> Dict[str, Any]:
    """Monthly income bars, heights as a percentage of the largest month."""
    data = agg.monthly_income(shifts, months)
    peak = max([row['total'] for row in data] + [1.0])
    bars = []
    for row in data:
        m = int(row['month'][5:7])
        bars.append({
            **row,
            'label': MONTH_ABBR[m - 1],
            'received_height': row['received'] / peak * 100,
            'pending_height': row['pending'] / peak * 100,
        })
    return {'bars': bars, 'max_total': peak}


def target_record(year: int, month: int, expected: Optional[float] = None,
                  actual: Optional[float] = None) -> Dict[str, Any]:
    """Upsert payload for an edit in the monthly target editor.

    Only the edited field(s) are included, so the other one keeps its stored
    value. Negative input is clamped to zero.
    """
    if not 1 <= int(month) <= 12:
        raise ValueError("month must be between 1 and 12")
    record: Dict[str, Any] = {
        'id': agg.target_id(year, month),
        'year': f"{int(year):04d}",
        'month': f"{int(month):02d}",
    }
    if expected is not None:
        record['expected'] = max(0.0, float(expected))
    if actual is not None:
        record['actual'] = max(0.0, float(actual))
    return record


def financial_view(shifts: List[dict], targets: List[dict], year: int,
                   currency: str = 'R$') -> Dict[str, Any]:
    totals = agg.totals(shifts)
    progress = agg.monthly_progress(targets, year)
    for row in progress['months']:
        row['label'] = MONTH_NAMES[row['month'] - 1]
    return {
        'year': year,
        'cards': {
            'received': totals['received'],
            'pending': totals['pending'],
            'total': totals['total'],
            'received_count': totals['received_count'],
            'pending_count': totals['pending_count'],
            'count': totals['count'],
        },
        'labels': {
            'received': format_currency(totals['received'], currency),
            'pending': format_currency(totals['pending'], currency),
            'total': format_currency(totals['total'], currency),
        },
        'pie': pie_segments(totals['received_pct'], totals['pending_pct']),
        'bars': bar_chart(shifts),
        'pending_payments': [_present(s, currency) for s in agg.pending_payments(shifts)],
        'recent_transactions': [_present(s, currency) for s in agg.recent_transactions(shifts)],
        'targets': progress,
    }
