"""Activity routes."""
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from metrics.store import RunStore
from web.deps import get_records, get_settings, get_store
from web.services.analysis import get_activity_metrics

router = APIRouter()


@router.get("/{activity_id}", response_class=JSONResponse)
async def activity_detail(
    activity_id: str,
    store: RunStore = Depends(get_store),
):
    """Return one activity including its streams."""
    run = store.get(activity_id)
    if run is None:
        return JSONResponse(content={"error": "Activity not found"}, status_code=404)
    return JSONResponse(content=run.to_dict(include_streams=True))


@router.get("/{activity_id}/metrics", response_class=JSONResponse)
async def activity_metrics(
    activity_id: str,
    store: RunStore = Depends(get_store),
    settings: dict = Depends(get_settings),
    records: dict = Depends(get_records),
):
    """Return power and HR load metrics and the effort classification for an activity."""
    data = get_activity_metrics(store, settings, activity_id, records)
    if data is None:
        return JSONResponse(content={"error": "Activity not found"}, status_code=404)
    return JSONResponse(content=data)
