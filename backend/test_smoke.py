"""
Smoke tests for MedShift backend API endpoints.
These tests use FastAPI's TestClient and work without a real SQLite file
by checking the API structure and response shapes against a mocked store.
"""
import os
import sys
import pytest

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from fastapi.testclient import TestClient
from unittest.mock import patch, MagicMock

# Import the app
from api.main import app

client = TestClient(app)


# ── Helpers ───────────────────────────────────────────────────────────────────

_SHIFT = {
    'id': 'x1', 'date': '2025-06-16', 'startTime': '07:00', 'endTime': '19:00',
    'location': 'General Hospital', 'color': None, 'specialty': 'ICU',
    'shiftType': '12h', 'paymentAmount': 1500.0, 'paymentStatus': 'received', 'notes': None,
}


def mock_db_factory(overrides: dict = None):
    """Build a mock ShiftDatabase with sensible defaults."""
    db = MagicMock()
    defaults = {
        'get_stats': lambda: {'shifts': 1, 'targets': 0, 'locations': 0},
        'list_shifts': lambda: [dict(_SHIFT)],
        'list_targets': lambda: [],
        'list_locations': lambda: [],
        'upsert_shifts': lambda items: (1, 0),
        'upsert_targets': lambda items: (1, 0),
        'upsert_locations': lambda items: (1, 0),
        'delete_shift': lambda sid: 0,
        'delete_location': lambda lid: 0,
    }
    if overrides:
        defaults.update(overrides)
    for method, ret in defaults.items():
        if callable(ret):
            getattr(db, method).side_effect = ret
        else:
            getattr(db, method).return_value = ret
    return db


# ── Tests ─────────────────────────────────────────────────────────────────────

class TestRootEndpoint:
    def test_root_returns_service_info(self):
        r = client.get('/api')
        assert r.status_code == 200
        data = r.json()
        assert data['service'] == 'MedShift Tracker API'
        assert 'version' in data


class TestStatsEndpoint:
    def test_stats_shape(self):
        with patch('api.main.get_db', return_value=mock_db_factory()):
            r = client.get('/api/stats')
        assert r.status_code == 200
        data = r.json()
        for key in ('shifts', 'targets', 'locations'):
            assert key in data, f"Missing key: {key}"

    def test_health_reports_store_error(self):
        db = mock_db_factory({'get_stats': MagicMock(side_effect=RuntimeError('locked'))})
        with patch('api.main.get_db', return_value=db):
            r = client.get('/api/health')
        assert r.status_code == 200
        assert r.json()['db']['status'] == 'error'


class TestShiftsEndpoint:
    def test_list_returns_list(self):
        with patch('api.routers.shifts.get_db', return_value=mock_db_factory()):
            r = client.get('/api/shifts')
        assert r.status_code == 200
        assert r.json()[0]['id'] == 'x1'

    def test_post_passes_body_through(self):
        db = mock_db_factory()
        with patch('api.routers.shifts.get_db', return_value=db):
            r = client.post('/api/shifts', json=[_SHIFT])
        assert r.json() == {'success': True}
        db.upsert_shifts.assert_called_once_with([_SHIFT])

    def test_partial_failure_still_success(self):
        db = mock_db_factory({'upsert_shifts': lambda items: (0, 1)})
        with patch('api.routers.shifts.get_db', return_value=db):
            r = client.post('/api/shifts', json={'id': 'x'})
        assert r.status_code == 200
        assert r.json() == {'success': True}

    def test_store_failure_returns_sanitized_500(self):
        db = mock_db_factory({'upsert_shifts': MagicMock(side_effect=RuntimeError('disk I/O error'))})
        with patch('api.routers.shifts.get_db', return_value=db):
            r = client.post('/api/shifts', json=_SHIFT)
        assert r.status_code == 500
        assert 'disk' not in r.json()['detail']

    def test_delete_calls_store(self):
        db = mock_db_factory()
        with patch('api.routers.shifts.get_db', return_value=db):
            r = client.delete('/api/shifts/x1')
        assert r.status_code == 200
        db.delete_shift.assert_called_once_with('x1')


class TestTargetsEndpoint:
    def test_list_returns_list(self):
        with patch('api.routers.targets.get_db', return_value=mock_db_factory()):
            r = client.get('/api/targets')
        assert r.status_code == 200
        assert isinstance(r.json(), list)


class TestLocationsEndpoint:
    def test_delete_unknown_returns_success(self):
        with patch('api.routers.locations.get_db', return_value=mock_db_factory()):
            r = client.delete('/api/locations/none')
        assert r.json() == {'success': True}


class TestCalendarEndpoint:
    def test_valid_params(self):
        with patch('api.routers.views.get_db', return_value=mock_db_factory()):
            r = client.get('/api/calendar?year=2025&month=6')
        assert r.status_code == 200
        data = r.json()
        assert data['summary']['count'] == 1

    def test_invalid_month(self):
        with patch('api.routers.views.get_db', return_value=mock_db_factory()):
            r = client.get('/api/calendar?year=2025&month=0')
        assert r.status_code == 400

    def test_non_integer_month_returns_422(self):
        r = client.get('/api/calendar?year=2025&month=june')
        assert r.status_code == 422

    def test_day_requires_date(self):
        r = client.get('/api/calendar/day')
        assert r.status_code == 422

    def test_day_invalid_date_returns_400(self):
        with patch('api.routers.views.get_db', return_value=mock_db_factory()):
            r = client.get('/api/calendar/day?date=not-a-date')
        assert r.status_code == 400


class TestDashboardEndpoint:
    def test_shape(self):
        with patch('api.routers.views.get_db', return_value=mock_db_factory()):
            r = client.get('/api/dashboard?today=2025-06-01')
        assert r.status_code == 200
        data = r.json()
        for key in ('cards', 'labels', 'upcoming', 'recent'):
            assert key in data
        assert data['cards']['total_received'] == 1500


class TestFinancialEndpoint:
    def test_shape(self):
        with patch('api.routers.views.get_db', return_value=mock_db_factory()):
            r = client.get('/api/financial?year=2025')
        assert r.status_code == 200
        data = r.json()
        assert len(data['pie']) == 2
        assert len(data['targets']['months']) == 12


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
