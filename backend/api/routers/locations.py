"""Saved locations router."""
from fastapi import APIRouter, Body, HTTPException, Query
from pydantic import BaseModel
from typing import Optional
from shiftlib.locations import add_location, manager_view, rename_location
from ..dependencies import get_db, _sanitize_500, _logger
from ..types import LocationList, UpsertBody

router = APIRouter(tags=["Locations"])


@router.get("/api/locations", summary="List saved locations")
def list_locations() -> LocationList:
    return get_db().list_locations()


@router.post("/api/locations", summary="Upsert saved locations")
def upsert_locations(body: UpsertBody = Body(...)):
    try:
        saved, failed = get_db().upsert_locations(body)
    except Exception as e:
        raise _sanitize_500(e, 'upsert_locations')
    if failed:
        _logger.warning("POST /api/locations: %d of %d items not saved", failed, saved + failed)
    return {"success": True}


@router.delete("/api/locations/{location_id}", summary="Delete saved location")
def delete_location(location_id: str):
    try:
        get_db().delete_location(location_id)
    except Exception as e:
        raise _sanitize_500(e, f'delete_location/{location_id}')
    return {"success": True}


@router.get(
    "/api/locations/manager",
    summary="Location manager view",
    description="Saved locations with usage counts from the shift list, filtered by an optional search term.",
)
def get_location_manager(q: Optional[str] = Query(None, description="Case-insensitive name filter")):
    db = get_db()
    return manager_view(db.list_locations(), db.list_shifts(), q)


class LocationName(BaseModel):
    name: str


@router.post(
    "/api/locations/manager",
    summary="Add saved location",
    description="Add a location by name. Blank names and case-insensitive duplicates are rejected with 400.",
)
def add_saved_location(body: LocationName):
    db = get_db()
    record = add_location(db.list_locations(), body.name)
    if record is None:
        raise HTTPException(status_code=400, detail="Location name is blank or already saved")
    try:
        db.upsert_locations(record)
    except Exception as e:
        raise _sanitize_500(e, 'add_saved_location')
    return {"success": True, "location": record}


@router.put(
    "/api/locations/{location_id}",
    summary="Rename saved location",
    description="Rename a saved location. Shifts keep the location text they were saved with.",
)
def rename_saved_location(location_id: str, body: LocationName):
    db = get_db()
    saved = db.list_locations()
    if not any(loc.get('id') == location_id for loc in saved):
        raise HTTPException(status_code=404, detail="Location not found")
    record = rename_location(saved, location_id, body.name)
    if record is None:
        raise HTTPException(status_code=400, detail="Location name is blank or already saved")
    try:
        db.upsert_locations({"id": location_id, "name": record["name"]})
    except Exception as e:
        raise _sanitize_500(e, f'rename_saved_location/{location_id}')
    return {"success": True, "location": record}
