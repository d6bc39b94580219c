"""View-model router: dashboard, calendar, financial and recurrence preview.

Every endpoint loads the full shift list and recomputes its figures on each
request; nothing is cached.
"""
from datetime import date
from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel
from typing import List, Optional
from shiftlib.recurrence import expand, parse_stop, preview
from shiftlib.views import calendar_day, calendar_view, dashboard_view, financial_view
from ..dependencies import get_db, check_date, check_year_month, CURRENCY

router = APIRouter()


def _today(value: Optional[str]) -> date:
    if value is None:
        return date.today()
    return date.fromisoformat(check_date(value, 'today'))


@router.get("/api/dashboard", tags=["Views"], summary="Dashboard summary")
def get_dashboard(today: Optional[str] = Query(None, description="Override today's date (YYYY-MM-DD)")):
    """Totals, this-month figures and the upcoming/recent shift lists."""
    return dashboard_view(get_db().list_shifts(), today=_today(today), currency=CURRENCY)


@router.get("/api/calendar", tags=["Views"], summary="Calendar month grid")
def get_calendar(
    year: Optional[int] = Query(None, description="Year (YYYY), defaults to current year"),
    month: Optional[int] = Query(None, description="Month (1-12), defaults to current month"),
    location: str = Query("all", description="Location filter, 'all' for none"),
    specialty: str = Query("all", description="Specialty filter, 'all' for none"),
    today: Optional[str] = Query(None),
):
    now = _today(today)
    year = now.year if year is None else year
    month = now.month if month is None else month
    check_year_month(year, month)
    return calendar_view(
        get_db().list_shifts(), year, month, today=now,
        location=location, specialty=specialty, currency=CURRENCY,
    )


@router.get("/api/calendar/day", tags=["Views"], summary="Calendar day drill-down")
def get_calendar_day(
    date: str = Query(..., description="Day (YYYY-MM-DD)"),
    location: str = Query("all"),
    specialty: str = Query("all"),
):
    date = check_date(date)
    return calendar_day(get_db().list_shifts(), date, location=location, specialty=specialty, currency=CURRENCY)


@router.get("/api/financial", tags=["Views"], summary="Financial overview")
def get_financial(year: Optional[int] = Query(None, description="Target year, defaults to current year")):
    year = date.today().year if year is None else year
    check_year_month(year, 1)
    db = get_db()
    return financial_view(db.list_shifts(), db.list_targets(), year, currency=CURRENCY)


class RecurrencePreviewRequest(BaseModel):
    date: str
    recurrence: str = 'none'
    endDate: Optional[str] = None
    count: Optional[int] = None
    selectedDays: List[int] = []
    limit: int = 5


@router.post("/api/recurrence/preview", tags=["Views"], summary="Preview recurrence dates")
def post_recurrence_preview(body: RecurrencePreviewRequest):
    """Expand a recurrence rule and return the first dates plus a '+K more' count."""
    start = check_date(body.date)
    if body.limit < 1:
        raise HTTPException(status_code=400, detail="limit must be at least 1")
    try:
        if body.recurrence == 'none':
            dates = expand(start, 'none', parse_stop(count=1))
        else:
            stop = parse_stop(end_date=body.endDate, count=body.count)
            dates = expand(start, body.recurrence, stop, body.selectedDays)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return preview(dates, body.limit)
