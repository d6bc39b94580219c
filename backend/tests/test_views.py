"""Tests for the view models and display helpers."""
from datetime import date

import pytest

from conftest import make_shift
from shiftlib import views
from shiftlib.color_utils import DEFAULT_COLOR, color_label, is_light_color, is_palette_color


class TestFormatting:
    def test_currency(self):
        assert views.format_currency(1234.5) == "R$ 1.234,50"
        assert views.format_currency(0) == "R$ 0,00"
        assert views.format_currency(-10, "$") == "-$ 10,00"

    def test_date_short_and_long(self):
        assert views.format_date("2024-01-15") == "15 Jan"
        assert views.format_date("2024-01-15", long=True) == "Monday, 15 January 2024"

    def test_date_invalid_passthrough(self):
        assert views.format_date("soon") == "soon"


class TestColors:
    def test_palette(self):
        assert is_palette_color("#3B82F6")
        assert not is_palette_color("#123456")
        assert color_label("#ec4899") == "Pink"

    def test_light(self):
        assert is_light_color("#eab308")
        assert not is_light_color("#3b82f6")


class TestDashboard:
    def test_cards_and_lists(self):
        shifts = [
            make_shift(id="a", date="2024-01-10", paymentAmount=500, paymentStatus="received"),
            make_shift(id="b", date="2024-01-16", paymentAmount=700, color=None),
            make_shift(id="c", date="2023-12-30", paymentAmount=300),
        ]
        data = views.dashboard_view(shifts, today=date(2024, 1, 15))
        assert data["cards"]["month_total"] == 1200
        assert data["cards"]["total_shifts"] == 3
        assert data["labels"]["total_pending"] == "R$ 1.000,00"
        assert [s["id"] for s in data["upcoming"]] == ["b"]
        assert [s["id"] for s in data["recent"]] == ["a", "c"]
        assert data["upcoming"][0]["displayColor"] == DEFAULT_COLOR
        assert data["upcoming"][0]["shiftTypeLabel"] == "12h shift"


class TestCalendar:
    def test_grid(self):
        shifts = [
            make_shift(id="late", date="2024-02-10", startTime="19:00"),
            make_shift(id="early", date="2024-02-10", startTime="07:00"),
        ]
        data = views.calendar_view(shifts, 2024, 2, today=date(2024, 2, 10))
        # 1 Feb 2024 is a Thursday
        assert data["leading_blanks"] == 4
        assert data["weeks"][0][:4] == [None] * 4
        assert all(len(w) == 7 for w in data["weeks"])
        days = [c for w in data["weeks"] for c in w if c]
        assert len(days) == 29
        tenth = days[9]
        assert tenth["is_today"]
        assert [s["id"] for s in tenth["shifts"]] == ["early", "late"]
        assert data["next"] == {"year": 2024, "month": 3}

    def test_filters(self):
        shifts = [
            make_shift(id="a", date="2024-02-01", location="ER"),
            make_shift(id="b", date="2024-02-01", location="Clinic"),
        ]
        data = views.calendar_view(shifts, 2024, 2, location="ER")
        assert data["summary"]["count"] == 1
        assert data["filters"]["locations"] == ["Clinic", "ER"]

    def test_day(self):
        shifts = [make_shift(id="a", date="2024-02-01", paymentAmount=250)]
        data = views.calendar_day(shifts, "2024-02-01")
        assert data["total"] == 250
        assert data["title"] == "Thursday, 01 February 2024"


class TestFinancial:
    def test_pie(self):
        segs = views.pie_segments(75.0, 25.0)
        assert segs[0]["dasharray"] == "188.40 251.2"
        assert segs[1]["dashoffset"] == -188.4

    def test_bar_heights(self):
        shifts = [
            make_shift(id="a", date="2024-01-01", paymentAmount=1000, paymentStatus="received"),
            make_shift(id="b", date="2024-02-01", paymentAmount=500),
        ]
        bars = views.bar_chart(shifts)["bars"]
        assert bars[0]["received_height"] == 100
        assert bars[1]["pending_height"] == 50
        assert bars[1]["label"] == "Feb"

    def test_financial_view(self):
        shifts = [make_shift(id=str(i), date=f"2024-01-{i:02d}") for i in range(1, 13)]
        data = views.financial_view(shifts, [], 2024)
        assert len(data["recent_transactions"]) == 10
        assert data["targets"]["months"][11]["label"] == "December"
        assert data["cards"]["pending_count"] == 12


class TestTargetRecord:
    def test_partial(self):
        assert views.target_record(2024, 3, expected=5000) == {
            "id": "2024-03", "year": "2024", "month": "03", "expected": 5000.0,
        }

    def test_negative_clamped(self):
        assert views.target_record(2024, 3, actual=-5)["actual"] == 0.0

    def test_bad_month(self):
        with pytest.raises(ValueError):
            views.target_record(2024, 13)
