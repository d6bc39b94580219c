"""
Shift entry form: per-field validation and materialisation into records.

A form is a dict with the ShiftEntry wire keys plus the optional recurrence
fields `recurrence` (cadence), `endDate`, `count` and `selectedDays`.
Nothing is sent to the API unless validate_shift_form() returns no errors.
"""
import math
import re
from typing import Any, Callable, Dict, List, Optional

from .color_utils import is_palette_color
from .constants import (
    SHIFT_TYPES, PAYMENT_STATUSES, DEFAULT_SHIFT_TYPE, DEFAULT_PAYMENT_STATUS,
)
from .recurrence import CADENCES, MAX_OCCURRENCES, Until, exceeds_cap, expand, parse_date, parse_stop

_TIME_RE = re.compile(r'([01]\d|2[0-3]):[0-5]\d')

SHIFT_FIELDS = (
    'date', 'startTime', 'endTime', 'location', 'specialty', 'shiftType',
    'paymentAmount', 'paymentStatus', 'notes', 'color',
)


class FormValidationError(ValueError):
    def __init__(self, errors: Dict[str, str]):
        self.errors = errors
        super().__init__("; ".join(f"{k}: {v}" for k, v in errors.items()))


def _is_iso_date(value: Any) -> bool:
    try:
        parse_date(value)
        return True
    except ValueError:
        return False


def _is_valid_amount(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        amount = float(value)
    except OverflowError:
        return False
    return math.isfinite(amount) and amount > 0


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def validate_shift_form(form: Dict[str, Any]) -> Dict[str, str]:
    """Return {field: message} for every invalid field; empty means valid."""
    errors: Dict[str, str] = {}

    if _blank(form.get('date')):
        errors['date'] = 'Date is required'
    elif not _is_iso_date(form.get('date')):
        errors['date'] = 'Date must be YYYY-MM-DD'

    for field, label in (('startTime', 'Start time'), ('endTime', 'End time')):
        value = form.get(field)
        if _blank(value):
            errors[field] = f'{label} is required'
        elif not isinstance(value, str) or not _TIME_RE.fullmatch(value):
            errors[field] = f'{label} must be HH:MM'

    if _blank(form.get('location')):
        errors['location'] = 'Location is required'
    if _blank(form.get('specialty')):
        errors['specialty'] = 'Specialty is required'

    if not _is_valid_amount(form.get('paymentAmount')):
        errors['paymentAmount'] = 'Amount must be a finite number greater than zero'

    shift_type = form.get('shiftType')
    if shift_type is not None and shift_type not in SHIFT_TYPES:
        errors['shiftType'] = 'Unknown shift type'
    status = form.get('paymentStatus')
    if status is not None and status not in PAYMENT_STATUSES:
        errors['paymentStatus'] = 'Unknown payment status'
    color = form.get('color')
    if not _blank(color) and not is_palette_color(color):
        errors['color'] = 'Color must be one of the palette colors'

    errors.update(_validate_recurrence(form))
    return errors


def _validate_recurrence(form: Dict[str, Any]) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    cadence = form.get('recurrence') or 'none'
    if cadence not in CADENCES:
        return {'recurrence': 'Unknown recurrence'}
    if cadence == 'none':
        return errors

    end_date = form.get('endDate') or None
    count = form.get('count')
    if end_date and count is not None:
        errors['recurrence'] = 'Choose an end date or a number of occurrences, not both'
    elif not end_date and count is None:
        errors['recurrence'] = 'An end date or a number of occurrences is required'
    elif end_date:
        if not _is_iso_date(end_date):
            errors['endDate'] = 'End date must be YYYY-MM-DD'
        elif _is_iso_date(form.get('date')) and parse_date(end_date) < parse_date(form['date']):
            errors['endDate'] = 'End date must not be before the start date'
    elif isinstance(count, bool) or not isinstance(count, int) or not 1 <= count <= MAX_OCCURRENCES:
        errors['count'] = f'Occurrences must be between 1 and {MAX_OCCURRENCES}'

    if cadence == 'custom':
        days = form.get('selectedDays') or []
        if not isinstance(days, list) or any(
            isinstance(d, bool) or not isinstance(d, int) or not 0 <= d <= 6 for d in days
        ):
            errors['selectedDays'] = 'Weekdays must be numbers from 0 (Sunday) to 6 (Saturday)'

    if not errors and end_date and _is_iso_date(form.get('date')):
        if exceeds_cap(form['date'], cadence, Until(end_date), form.get('selectedDays') or ()):
            errors['endDate'] = f'End date allows more than {MAX_OCCURRENCES} occurrences'
    return errors


def recurrence_dates(form: Dict[str, Any]) -> List[str]:
    """Dates a valid create-mode form expands to."""
    cadence = form.get('recurrence') or 'none'
    if cadence == 'none':
        return [parse_date(form['date']).isoformat()]
    stop = parse_stop(end_date=form.get('endDate') or None, count=form.get('count'))
    return expand(form['date'], cadence, stop, form.get('selectedDays') or ())


def _record(form: Dict[str, Any], record_id: str, day: str) -> Dict[str, Any]:
    notes = form.get('notes')
    color = form.get('color')
    return {
        'id': record_id,
        'date': day,
        'startTime': form['startTime'],
        'endTime': form['endTime'],
        'location': form['location'].strip(),
        'specialty': form['specialty'].strip(),
        'shiftType': form.get('shiftType') or DEFAULT_SHIFT_TYPE,
        'paymentAmount': float(form['paymentAmount']),
        'paymentStatus': form.get('paymentStatus') or DEFAULT_PAYMENT_STATUS,
        'notes': notes if not _blank(notes) else None,
        'color': color.lower() if not _blank(color) else None,
    }


def build_shifts(form: Dict[str, Any], editing: Optional[Dict[str, Any]] = None,
                 id_factory: Optional[Callable[[], str]] = None) -> List[Dict[str, Any]]:
    """Turn a submitted form into the ShiftEntry records to upsert.

    Editing keeps the record's id and yields exactly one record. Creating
    yields one record per recurrence date, each with its own id and every
    other field shared.
    """
    errors = validate_shift_form(form)
    if errors:
        raise FormValidationError(errors)
    if editing is not None:
        return [_record(form, editing['id'], parse_date(form['date']).isoformat())]
    if id_factory is None:
        from .client import generate_id
        id_factory = generate_id
    return [_record(form, id_factory(), day) for day in recurrence_dates(form)]
