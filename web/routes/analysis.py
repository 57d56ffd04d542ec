"""Training analysis routes."""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from metrics.config import ZONE_WINDOW_DAYS
from metrics.store import RunStore
from web.deps import get_records, get_settings, get_store
from web.services.analysis import (
    get_dashboard,
    get_summary_view,
    get_traffic_lights,
    get_weekly_view,
    get_weekly_zones_view,
    get_zones_view,
    resolve_reference_date,
)

router = APIRouter()


@router.get("/weekly", response_class=JSONResponse)
async def api_weekly(
    store: RunStore = Depends(get_store),
    as_of: Optional[str] = None,
):
    """Return weekly distances over the last 6 months."""
    data = get_weekly_view(store, resolve_reference_date(as_of))
    return JSONResponse(content=data)


@router.get("/zones", response_class=JSONResponse)
async def api_zones(
    store: RunStore = Depends(get_store),
    records: dict = Depends(get_records),
    settings: dict = Depends(get_settings),
    window_days: int = Query(default=ZONE_WINDOW_DAYS, gt=0),
    as_of: Optional[str] = None,
):
    """Return the HR zone distribution over the trailing window."""
    data = get_zones_view(store, records, settings, resolve_reference_date(as_of), window_days)
    return JSONResponse(content=data)


@router.get("/summary", response_class=JSONResponse)
async def api_summary(
    store: RunStore = Depends(get_store),
    as_of: Optional[str] = None,
):
    data = get_summary_view(store, resolve_reference_date(as_of))
    return JSONResponse(content=data)


@router.get("/weekly-zones", response_class=JSONResponse)
async def api_weekly_zones(
    store: RunStore = Depends(get_store),
    records: dict = Depends(get_records),
    settings: dict = Depends(get_settings),
    as_of: Optional[str] = None,
):
    """Return weekly distance split by HR zone."""
    data = get_weekly_zones_view(store, records, settings, resolve_reference_date(as_of))
    return JSONResponse(content=data)


@router.get("/traffic-lights", response_class=JSONResponse)
async def api_traffic_lights(
    store: RunStore = Depends(get_store),
    records: dict = Depends(get_records),
    settings: dict = Depends(get_settings),
    as_of: Optional[str] = None,
):
    data = get_traffic_lights(store, records, settings, resolve_reference_date(as_of))
    return JSONResponse(content=data)


@router.get("/dashboard", response_class=JSONResponse)
async def api_dashboard(
    store: RunStore = Depends(get_store),
    records: dict = Depends(get_records),
    settings: dict = Depends(get_settings),
    as_of: Optional[str] = None,
):
    """Return every dashboard view in one response."""
    data = get_dashboard(store, records, settings, resolve_reference_date(as_of))
    return JSONResponse(content=data)
