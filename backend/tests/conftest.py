"""
Shared test fixtures for MedShift backend tests.
"""
import os
import sys
import pytest

# ── Python path setup ──────────────────────────────────────────────────────────
_BACKEND_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _BACKEND_DIR not in sys.path:
    sys.path.insert(0, _BACKEND_DIR)

# Keep test runs from writing into the default log location
os.environ.setdefault("MEDSHIFT_LOG_FILE", os.path.join(
    os.environ.get("TMPDIR", "/tmp"), "medshift-api-test.log"))


# ── Sample data factories ──────────────────────────────────────────────────────

def make_shift(**overrides):
    """A complete, valid ShiftEntry; override any field by keyword."""
    shift = {
        "id": "s1",
        "date": "2024-01-15",
        "startTime": "07:00",
        "endTime": "19:00",
        "location": "General Hospital",
        "color": "#3b82f6",
        "specialty": "Emergency",
        "shiftType": "12h",
        "paymentAmount": 1200.0,
        "paymentStatus": "pending",
        "notes": None,
    }
    shift.update(overrides)
    return shift


def make_form(**overrides):
    """A valid create-mode shift form without recurrence."""
    form = {
        "date": "2024-03-04",
        "startTime": "07:00",
        "endTime": "19:00",
        "location": "General Hospital",
        "specialty": "Emergency",
        "shiftType": "day",
        "paymentAmount": 900,
        "paymentStatus": "pending",
        "notes": "",
        "color": "#22C55E",
    }
    form.update(overrides)
    return form


@pytest.fixture
def db_path(tmp_path):
    """Function-scoped: fresh SQLite file per test, patched into api.main."""
    path = str(tmp_path / "data" / "medshift.db")
    import api.main as main_module
    original = main_module.DB_PATH
    main_module.DB_PATH = path
    yield path
    main_module.DB_PATH = original


@pytest.fixture
def db(db_path):
    from shiftlib.database import ShiftDatabase
    return ShiftDatabase(db_path)


@pytest.fixture(scope="session")
def app():
    """Return the FastAPI app."""
    from api.main import app as _app
    return _app


@pytest.fixture
def client(db_path, app):
    """Function-scoped TestClient on a fresh database."""
    from starlette.testclient import TestClient
    with TestClient(app, raise_server_exceptions=True) as c:
        yield c


@pytest.fixture
def lenient_client(db_path, app):
    """TestClient that turns unhandled errors into 500 responses."""
    from starlette.testclient import TestClient
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c
