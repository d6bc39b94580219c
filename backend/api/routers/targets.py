"""Monthly targets router. Targets are keyed 'YYYY-MM' and only ever upserted."""
from fastapi import APIRouter, Body
from ..dependencies import get_db, _sanitize_500, _logger
from ..types import TargetList, UpsertBody

router = APIRouter(tags=["Targets"])


@router.get("/api/targets", summary="List monthly targets")
def list_targets() -> TargetList:
    return get_db().list_targets()


@router.post("/api/targets", summary="Upsert monthly targets", description="Insert or overwrite one target or an array, keyed by 'YYYY-MM'.")
def upsert_targets(body: UpsertBody = Body(...)):
    try:
        saved, failed = get_db().upsert_targets(body)
    except Exception as e:
        raise _sanitize_500(e, 'upsert_targets')
    if failed:
        _logger.warning("POST /api/targets: %d of %d items not saved", failed, saved + failed)
    return {"success": True}
