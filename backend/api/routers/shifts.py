"""Shifts router: list, upsert, delete, plus the shift form and list view."""
from fastapi import APIRouter, Body, HTTPException, Request
from fastapi.responses import JSONResponse
from typing import Any, Dict
from shiftlib.color_utils import SHIFT_COLORS
from shiftlib.constants import DAY_NAMES, PAYMENT_STATUSES, SHIFT_TYPES, SPECIALTIES
from shiftlib.forms import FormValidationError, build_shifts
from shiftlib.recurrence import CADENCES, MAX_OCCURRENCES
from shiftlib.views import shifts_view
from ..dependencies import get_db, _sanitize_500, _logger, limiter, CURRENCY
from ..types import ShiftList, UpsertBody

router = APIRouter(tags=["Shifts"])


@router.get("/api/shifts", summary="List shifts", description="Return every shift entry, unordered.")
def list_shifts() -> ShiftList:
    return get_db().list_shifts()


@router.post(
    "/api/shifts",
    summary="Upsert shifts",
    description="Insert or overwrite one shift or an array of shifts, keyed by id. Best effort per item.",
)
def upsert_shifts(body: UpsertBody = Body(...)):
    try:
        saved, failed = get_db().upsert_shifts(body)
    except Exception as e:
        raise _sanitize_500(e, 'upsert_shifts')
    if failed:
        _logger.warning("POST /api/shifts: %d of %d items not saved", failed, saved + failed)
    return {"success": True}


@router.delete("/api/shifts/{shift_id}", summary="Delete shift", description="Remove a shift by id. Unknown ids are a no-op.")
def delete_shift(shift_id: str):
    try:
        get_db().delete_shift(shift_id)
    except Exception as e:
        raise _sanitize_500(e, f'delete_shift/{shift_id}')
    return {"success": True}


@router.get("/api/shifts/view", summary="Shift list view", description="All shifts newest first, with display labels.")
def get_shifts_view():
    return shifts_view(get_db().list_shifts(), currency=CURRENCY)


@router.post(
    "/api/shifts/form",
    summary="Submit shift form",
    description=(
        "Validate a shift form and save the resulting shifts. A form carrying an `id` edits that shift; "
        "otherwise one shift is created per recurrence date. Invalid forms return 400 with per-field errors."
    ),
)
@limiter.limit("60/minute")
def submit_shift_form(request: Request, form: Dict[str, Any] = Body(...)):
    editing = {"id": form["id"]} if form.get("id") else None
    try:
        records = build_shifts(form, editing=editing)
    except FormValidationError as e:
        return JSONResponse(status_code=400, content={"detail": "Invalid shift form", "errors": e.errors})
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    try:
        get_db().upsert_shifts(records)
    except Exception as e:
        raise _sanitize_500(e, 'submit_shift_form')
    return {"success": True, "shifts": records}


@router.get(
    "/api/shifts/form/options",
    summary="Shift form options",
    description="Choices offered by the shift form: shift types, payment statuses, suggested specialties, colors and recurrence cadences.",
)
def get_shift_form_options():
    return {
        "shiftTypes": [{"value": k, "label": v} for k, v in SHIFT_TYPES.items()],
        "paymentStatuses": [{"value": k, "label": v} for k, v in PAYMENT_STATUSES.items()],
        "specialties": list(SPECIALTIES),
        "colors": SHIFT_COLORS,
        "recurrences": list(CADENCES),
        "dayNames": DAY_NAMES,
        "maxOccurrences": MAX_OCCURRENCES,
    }
