"""Tests for the saved-locations manager helpers."""
from conftest import make_shift
from shiftlib import locations as loc

SAVED = [
    {"id": "l1", "name": "General Hospital", "usageCount": 0},
    {"id": "l2", "name": "City Clinic", "usageCount": 0},
]


def test_usage_counts():
    shifts = [make_shift(location="A"), make_shift(location="A"), make_shift(location="B")]
    assert loc.usage_counts(shifts) == {"A": 2, "B": 1}


def test_search_case_insensitive():
    assert [r["id"] for r in loc.search(SAVED, "CLIN")] == ["l2"]
    assert loc.search(SAVED, "  ") == SAVED


class TestAdd:
    def test_add(self):
        rec = loc.add_location(SAVED, "  Downtown ER ", id_factory=lambda: "new")
        assert rec == {"id": "new", "name": "Downtown ER", "usageCount": 0}

    def test_duplicate_rejected(self):
        assert loc.add_location(SAVED, "city clinic", id_factory=lambda: "x") is None

    def test_blank_rejected(self):
        assert loc.add_location(SAVED, "   ", id_factory=lambda: "x") is None


class TestRename:
    def test_rename(self):
        assert loc.rename_location(SAVED, "l1", "Central Hospital")["name"] == "Central Hospital"

    def test_rename_to_own_name_case(self):
        assert loc.rename_location(SAVED, "l2", "CITY CLINIC")["name"] == "CITY CLINIC"

    def test_rename_conflict(self):
        assert loc.rename_location(SAVED, "l1", "City Clinic") is None

    def test_rename_unknown(self):
        assert loc.rename_location(SAVED, "zz", "Other") is None


def test_remove():
    assert [r["id"] for r in loc.remove_location(SAVED, "l1")] == ["l2"]


def test_manager_view_sorted_by_usage():
    shifts = [make_shift(location="City Clinic")]
    data = loc.manager_view(SAVED, shifts)
    assert [r["id"] for r in data["locations"]] == ["l2", "l1"]
    assert data["locations"][0]["usageCount"] == 1
