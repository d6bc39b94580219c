"""Saved-locations manager: search, add, rename, remove, usage counts.

Saved locations are only an autocomplete list. Renaming or removing one never
touches the location text stored on existing shifts.
"""
from collections import Counter
from typing import Callable, Dict, Iterable, List, Optional


def usage_counts(shifts: Iterable[dict]) -> Dict[str, int]:
    return dict(Counter(s.get('location') for s in shifts if s.get('location')))


def search(locations: List[dict], query: Optional[str]) -> List[dict]:
    q = (query or '').strip().lower()
    if not q:
        return list(locations)
    return [loc for loc in locations if q in (loc.get('name') or '').lower()]


def _exists(locations: List[dict], name: str, exclude_id: Optional[str] = None) -> bool:
    key = name.lower()
    return any(
        (loc.get('name') or '').lower() == key and loc.get('id') != exclude_id
        for loc in locations
    )


def add_location(locations: List[dict], name: str,
                 id_factory: Optional[Callable[[], str]] = None) -> Optional[dict]:
    """Return the new location record, or None for a blank or duplicate name."""
    name = (name or '').strip()
    if not name or _exists(locations, name):
        return None
    if id_factory is None:
        from .client import generate_id
        id_factory = generate_id
    return {'id': id_factory(), 'name': name, 'usageCount': 0}


def rename_location(locations: List[dict], location_id: str, name: str) -> Optional[dict]:
    """Return the renamed record, or None if blank, duplicate or unknown id."""
    name = (name or '').strip()
    if not name or _exists(locations, name, exclude_id=location_id):
        return None
    for loc in locations:
        if loc.get('id') == location_id:
            return {**loc, 'name': name}
    return None


def remove_location(locations: List[dict], location_id: str) -> List[dict]:
    return [loc for loc in locations if loc.get('id') != location_id]


def manager_view(locations: List[dict], shifts: Iterable[dict], query: Optional[str] = None) -> dict:
    """Saved locations with live usage counts, most used first."""
    counts = usage_counts(shifts)
    rows = [
        {**loc, 'usageCount': counts.get(loc.get('name'), 0)}
        for loc in search(locations, query)
    ]
    rows.sort(key=lambda r: (-r['usageCount'], (r.get('name') or '').lower()))
    return {'locations': rows, 'total': len(locations), 'shown': len(rows)}
