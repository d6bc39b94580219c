"""FastAPI application for MedShift Tracker."""
import os
import sys
import time as _startup_time_module
from contextlib import asynccontextmanager
from dotenv import load_dotenv

_APP_START_TIME = _startup_time_module.time()

# Load .env file if present
load_dotenv(os.path.join(os.path.dirname(__file__), '..', '.env'))

# Add parent dir to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fastapi import FastAPI, Request  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402
from fastapi.responses import JSONResponse  # noqa: E402
from fastapi.exceptions import RequestValidationError  # noqa: E402
from slowapi import _rate_limit_exceeded_handler  # noqa: E402
from slowapi.errors import RateLimitExceeded  # noqa: E402

from .dependencies import (  # noqa: E402
    get_db,
    _logger,
    limiter,
)

# ── Config ──────────────────────────────────────────────────────
DB_PATH = os.environ.get(
    'MEDSHIFT_DB_PATH',
    os.path.join(os.path.dirname(__file__), '..', 'data', 'medshift.db')
)
DB_PATH = os.path.normpath(DB_PATH)

# CORS origins from env; open by default (single-user personal tool)
_raw_origins = os.environ.get('ALLOWED_ORIGINS', '')
ALLOWED_ORIGINS = (
    [o.strip() for o in _raw_origins.split(',') if o.strip()]
    or ['*']
)

_OPENAPI_TAGS = [
    {"name": "Health", "description": "Liveness, version and store statistics"},
    {"name": "Shifts", "description": "Shift entries (list, upsert, delete) and the shift form"},
    {"name": "Targets", "description": "Monthly income targets keyed by year-month"},
    {"name": "Locations", "description": "Saved locations used for autocomplete"},
    {"name": "Views", "description": "Dashboard, calendar and financial view models"},
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        stats = get_db().get_stats()
        _logger.info("Store ready at %s: %s", DB_PATH, stats)
    except Exception as _exc:
        _logger.warning("Store initialisation failed: %s", _exc)
    yield
    _logger.info("MedShift API shutting down")


app = FastAPI(
    lifespan=lifespan,
    title="MedShift Tracker API",
    description=(
        "REST API for a personal medical shift and billing tracker.\n\n"
        "All resources are upserted by id: `POST` accepts a single object or an array, "
        "`DELETE` of an unknown id is a no-op."
    ),
    version="1.0.0",
    openapi_tags=_OPENAPI_TAGS,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)


@app.middleware("http")
async def security_headers_middleware(request: Request, call_next):
    """Add basic security headers to all responses."""
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    return response


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Flatten pydantic validation errors into one readable detail string."""
    _TYPE_MSGS = {
        "missing": "Required field missing",
        "json_invalid": "Body is not valid JSON",
        "int_parsing": "Must be an integer",
        "float_parsing": "Must be a number",
        "bool_parsing": "Must be true or false",
        "dict_type": "Must be an object",
        "list_type": "Must be an array",
        "model_attributes_type": "Must be an object",
        "value_error": "Invalid value",
        "type_error": "Wrong data type",
    }
    errors = []
    for e in exc.errors():
        field = ".".join(str(loc) for loc in e.get("loc", []) if loc not in ("body", "query", "path"))
        etype = e.get("type", "")
        msg = _TYPE_MSGS.get(etype, e.get("msg", "Invalid value"))
        if field:
            errors.append(f"{field}: {msg}")
        else:
            errors.append(msg)
    detail = "; ".join(dict.fromkeys(errors)) if errors else "Invalid input"
    return JSONResponse(status_code=422, content={"detail": detail})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch unhandled exceptions, log with details, return sanitized 500."""
    import traceback
    _logger.error(
        "Unhandled exception: %s %s | %s | %s",
        request.method, request.url.path,
        type(exc).__name__,
        traceback.format_exc().splitlines()[-1],
    )
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error. Please try again."},
    )


@app.middleware("http")
async def request_logging_middleware(request: Request, call_next):
    """Log every request as structured JSON with timing info and request-ID."""
    import time as _t
    import uuid as _uuid
    import json as _json_mod
    from datetime import datetime as _dt2, timezone as _tz2
    # Generate a short unique request ID for correlating log entries
    req_id = _uuid.uuid4().hex[:8]
    start = _t.time()
    response = await call_next(request)
    duration_ms = round((_t.time() - start) * 1000)
    now = _dt2.now(_tz2.utc)
    ts = now.strftime('%Y-%m-%dT%H:%M:%S.') + f"{now.microsecond // 1000:03d}Z"
    entry = {
        "timestamp": ts,
        "req_id": req_id,
        "method": request.method,
        "path": request.url.path,
        "status": response.status_code,
        "duration_ms": duration_ms,
    }
    _logger.info(_json_mod.dumps(entry, ensure_ascii=False))
    if request.method in ('POST', 'PUT', 'DELETE') and response.status_code < 400:
        client_ip = request.client.host if request.client else 'unknown'
        _logger.info("WRITE %s | ip=%s path=%s", request.method, client_ip, request.url.path)
    response.headers["X-Request-ID"] = req_id
    return response


# ── Include routers ─────────────────────────────────────────────
from .routers import shifts, targets, locations, views  # noqa: E402

app.include_router(shifts.router)
app.include_router(targets.router)
app.include_router(locations.router)
app.include_router(views.router)


# ── Routes ──────────────────────────────────────────────────────

_API_VERSION = "1.0.0"


@app.get("/api/ping", tags=["Health"], summary="Liveness check")
def ping():
    """Return a timestamped pong (epoch milliseconds)."""
    import time as _t
    return {"message": f"Pong! {int(_t.time() * 1000)}"}


@app.get(
    "/api/health",
    tags=["Health"],
    summary="Health check",
    description="Returns service status, API version, uptime in seconds, and store connection state.",
)
def health():
    import time as _t
    db_status = "connected"
    try:
        get_db().get_stats()
    except Exception as e:
        _logger.warning("Health check: store unavailable: %s", e)
        db_status = "error"

    return {
        "status": "ok",
        "version": _API_VERSION,
        "uptime_seconds": round(_t.time() - _APP_START_TIME, 1),
        "db": {"status": db_status},
    }


@app.get("/api/version", tags=["Health"], summary="API version")
def version():
    return {"version": _API_VERSION, "service": "MedShift Tracker API"}


@app.get("/api", tags=["Health"], summary="API root", description="Returns basic service info.")
def root():
    return {"service": "MedShift Tracker API", "version": _API_VERSION, "backend": "sqlite"}


@app.get("/api/stats", tags=["Health"], summary="Store statistics")
def get_stats():
    return get_db().get_stats()


if __name__ == "__main__":  # pragma: no cover
    import uvicorn
    uvicorn.run("api.main:app", host=os.environ.get("HOST", "127.0.0.1"), port=int(os.environ.get("PORT", "8000")))
