"""Tests for shiftlib.aggregation: totals, lists, targets and chart data."""
from datetime import date

from conftest import make_shift
from shiftlib import aggregation as agg


def _shifts():
    return [
        make_shift(id="a", date="2024-01-05", paymentAmount=1000, paymentStatus="received"),
        make_shift(id="b", date="2024-01-20", paymentAmount=800, paymentStatus="pending"),
        make_shift(id="c", date="2024-02-02", paymentAmount=600, paymentStatus="received"),
        make_shift(id="d", date="2024-02-10", paymentAmount=None, paymentStatus="pending"),
    ]


class TestTotals:
    def test_total_received_mixed(self):
        assert agg.total_by_status(_shifts(), "received") == 1600
        assert agg.total_by_status(_shifts(), "pending") == 800

    def test_totals_shape(self):
        t = agg.totals(_shifts())
        assert t["total"] == 2400
        assert t["received_count"] == 2
        assert t["pending_count"] == 2
        assert t["count"] == 4
        assert round(t["received_pct"], 2) == 66.67

    def test_empty(self):
        t = agg.totals([])
        assert t["total"] == 0
        assert t["received_pct"] == 0.0


class TestLists:
    def test_upcoming_excludes_past(self):
        rows = agg.upcoming(_shifts(), "2024-01-20")
        assert [s["id"] for s in rows] == ["b", "c", "d"]

    def test_upcoming_limit(self):
        many = [make_shift(id=str(i), date=f"2024-03-{i:02d}") for i in range(1, 10)]
        assert len(agg.upcoming(many, "2024-01-01")) == 5

    def test_recent_strictly_before_today(self):
        rows = agg.recent(_shifts(), "2024-01-20")
        assert [s["id"] for s in rows] == ["a"]

    def test_shifts_in_month(self):
        assert [s["id"] for s in agg.shifts_in_month(_shifts(), "2024-02")] == ["c", "d"]

    def test_month_prefix(self):
        assert agg.month_prefix(date(2024, 3, 9)) == "2024-03"

    def test_pending_payments_ascending(self):
        rows = agg.pending_payments(list(reversed(_shifts())))
        assert [s["id"] for s in rows] == ["b", "d"]

    def test_recent_transactions_descending_capped(self):
        many = [make_shift(id=str(i), date=f"2024-03-{i:02d}") for i in range(1, 15)]
        rows = agg.recent_transactions(many)
        assert len(rows) == 10
        assert rows[0]["date"] == "2024-03-14"


class TestTargets:
    def test_pending_never_negative(self):
        assert agg.pending_amount(1000, 1500) == 0
        assert agg.pending_amount(1000, 400) == 600

    def test_monthly_progress(self):
        targets = [
            {"id": "2024-01", "year": "2024", "month": "01", "expected": 1000, "actual": 1500},
            {"id": "2024-02", "year": "2024", "month": "02", "expected": 2000, "actual": 500},
            {"id": "2023-12", "year": "2023", "month": "12", "expected": 9999, "actual": 0},
        ]
        p = agg.monthly_progress(targets, 2024)
        assert len(p["months"]) == 12
        assert p["months"][0]["pending"] == 0
        assert p["months"][1]["pending"] == 1500
        assert p["months"][2]["expected"] == 0
        assert p["expected"] == 3000
        assert p["actual"] == 2000
        assert p["pending"] == 1000
        assert round(p["progress_pct"], 2) == 66.67

    def test_target_id_zero_padded(self):
        assert agg.target_id(2024, 3) == "2024-03"


class TestFilters:
    def test_filter_all_is_inactive(self):
        assert len(agg.filter_shifts(_shifts(), "all", "all")) == 4
        assert len(agg.filter_shifts(_shifts(), None, None)) == 4

    def test_filter_combined(self):
        shifts = _shifts() + [make_shift(id="e", location="Clinic", specialty="ICU")]
        assert [s["id"] for s in agg.filter_shifts(shifts, "Clinic", "ICU")] == ["e"]
        assert agg.filter_shifts(shifts, "Clinic", "Emergency") == []

    def test_distinct_sorted(self):
        shifts = [make_shift(location="b"), make_shift(location="a"), make_shift(location="b")]
        assert agg.distinct(shifts, "location") == ["a", "b"]


class TestMonthlyIncome:
    def test_buckets(self):
        rows = agg.monthly_income(_shifts())
        assert rows == [
            {"month": "2024-01", "received": 1000.0, "pending": 800.0, "total": 1800.0},
            {"month": "2024-02", "received": 600.0, "pending": 0.0, "total": 600.0},
        ]

    def test_last_n_months(self):
        many = [make_shift(id=str(m), date=f"2024-{m:02d}-01") for m in range(1, 13)]
        rows = agg.monthly_income(many, months=6)
        assert [r["month"] for r in rows] == [f"2024-{m:02d}" for m in range(7, 13)]

    def test_malformed_dates_skipped(self):
        rows = agg.monthly_income(_shifts() + [
            make_shift(id="x", date="2024"),
            make_shift(id="y", date="2024-13-01"),
            make_shift(id="z", date=None),
        ])
        assert [r["month"] for r in rows] == ["2024-01", "2024-02"]

    def test_non_finite_amount_counts_as_zero(self):
        rows = agg.monthly_income([make_shift(id="n", date="2024-03-01", paymentAmount=float("inf"))])
        assert rows[0]["total"] == 0.0


def test_toggle_status():
    assert agg.toggle_status("pending") == "received"
    assert agg.toggle_status("received") == "pending"
