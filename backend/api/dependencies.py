"""
Shared dependencies for the MedShift API.
Logging, rate limiter, database access and error sanitising used by main.py
and the routers.
"""
import os
import logging
import logging.handlers
import traceback

from fastapi import HTTPException
from shiftlib.database import ShiftDatabase
from slowapi import Limiter
from slowapi.util import get_remote_address

# ── Structured JSON Logging setup ───────────────────────────────
import json as _json
from datetime import datetime as _dt, timezone as _tz

class _JsonFormatter(logging.Formatter):
    """Emit log records as single-line JSON objects."""
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": _dt.fromtimestamp(record.created, tz=_tz.utc).strftime('%Y-%m-%dT%H:%M:%S.') + f"{int(record.msecs):03d}Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return _json.dumps(entry, ensure_ascii=False)

_log_file = os.environ.get('MEDSHIFT_LOG_FILE', '/tmp/medshift-api.log')
_handler = logging.handlers.RotatingFileHandler(
    _log_file, maxBytes=10 * 1024 * 1024, backupCount=3
)
_handler.setFormatter(_JsonFormatter())

_logger = logging.getLogger('medshift')
# Log level configurable via ENV
_log_level_str = os.environ.get('MEDSHIFT_LOG_LEVEL', 'INFO').upper()
_log_level = getattr(logging, _log_level_str, logging.INFO)
_logger.setLevel(_log_level)
_logger.addHandler(_handler)
_stderr_handler = logging.StreamHandler()
_stderr_handler.setFormatter(_JsonFormatter())
_logger.addHandler(_stderr_handler)

# shiftlib logs under its module names; route them through the same handlers
_lib_logger = logging.getLogger('shiftlib')
_lib_logger.setLevel(_log_level)
_lib_logger.addHandler(_handler)
_lib_logger.addHandler(_stderr_handler)

MEDSHIFT_LOG_FILE = _log_file

# ── Display settings ─────────────────────────────────────────────
CURRENCY = os.environ.get('MEDSHIFT_CURRENCY', 'R$')

# ── Rate Limiter ─────────────────────────────────────────────────
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[os.environ.get('MEDSHIFT_RATE_LIMIT', '200/minute')],
)


def get_db() -> ShiftDatabase:
    """Get a database handle for the current DB_PATH from the main module."""
    import api.main as _main
    return ShiftDatabase(_main.DB_PATH)


def _sanitize_500(e: Exception, context: str = '') -> HTTPException:
    """Log full exception, return sanitized 500."""
    _logger.error(
        "500 error context=%s type=%s msg=%s trace=%s",
        context, type(e).__name__, str(e),
        traceback.format_exc().splitlines()[-1],
    )
    return HTTPException(
        status_code=500,
        detail="Internal server error. Please try again.",
    )


def check_year_month(year: int, month: int) -> None:
    """Raise 400 for out-of-range calendar parameters."""
    if not (1 <= month <= 12):
        raise HTTPException(status_code=400, detail="Invalid month: must be between 1 and 12")
    if not (2000 <= year <= 2100):
        raise HTTPException(status_code=400, detail="Invalid year: must be between 2000 and 2100")


def check_date(value: str, field: str = 'date') -> str:
    """Raise 400 unless value is a YYYY-MM-DD date."""
    from datetime import datetime as _dtt
    try:
        if len(value) != 10:
            raise ValueError(value)
        normalized = _dtt.strptime(value, '%Y-%m-%d').date().isoformat()
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail=f"{field} must be in YYYY-MM-DD format")
    return normalized
