"""Run ingestion and detailed record routes."""
import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from ingest.normalize import normalize_runs, normalize_strava_activity
from metrics.store import RunStore
from web.deps import get_records, get_store

logger = logging.getLogger(__name__)

router = APIRouter()


class RecordSample(BaseModel):
    """One detailed sample. Fields other than heart_rate are kept as sent."""

    model_config = ConfigDict(extra="allow")

    heart_rate: Optional[float] = Field(default=None, allow_inf_nan=False)


def _merge_batch(store: RunStore, runs: list, received: int, source: str) -> dict:
    before = len(store)
    store.add(runs, source=source)
    added = len(store) - before
    return {
        "received": received,
        "valid": len(runs),
        "skipped": received - len(runs),
        "added": added,
        "duplicates": len(runs) - added,
        "total": len(store),
    }


@router.post("/runs", response_class=JSONResponse)
async def ingest_runs(
    raw_runs: list[dict[str, Any]] = Body(...),
    source: str = "API",
    store: RunStore = Depends(get_store),
):
    """Normalize a batch of raw run records and merge it into the store."""
    runs = normalize_runs(raw_runs, source=source)
    return JSONResponse(content=_merge_batch(store, runs, len(raw_runs), source))


@router.post("/runs/strava", response_class=JSONResponse)
async def ingest_strava_activities(
    activities: list[dict[str, Any]] = Body(...),
    store: RunStore = Depends(get_store),
):
    """Merge Strava API activities. Each may carry its key_by_type streams under 'streams'."""
    runs = []
    for activity in activities:
        run = normalize_strava_activity(activity, activity.get("streams"))
        if run is not None:
            runs.append(run)
    return JSONResponse(content=_merge_batch(store, runs, len(activities), "Strava API"))


@router.get("/runs", response_class=JSONResponse)
async def list_runs(store: RunStore = Depends(get_store)):
    """Return the known runs in merge order."""
    return JSONResponse(content={
        "total": len(store),
        "runs": [run.to_dict() for run in store],
    })


@router.delete("/runs", response_class=JSONResponse)
async def clear_runs(
    store: RunStore = Depends(get_store),
    records: dict = Depends(get_records),
):
    """Forget all runs and detailed records."""
    removed = len(store)
    store.clear()
    records.clear()
    logger.info("Cleared %d runs", removed)
    return JSONResponse(content={"removed": removed})


@router.put("/records/{filename}", response_class=JSONResponse)
async def put_records(
    filename: str,
    samples: list[RecordSample] = Body(...),
    records: dict = Depends(get_records),
):
    """Store the detailed per-sample records of one activity file.

    The body is validated before anything is stored; a non-numeric
    heart_rate is rejected with 422.
    """
    records[filename] = [sample.model_dump() for sample in samples]
    with_hr = sum(1 for s in samples if s.heart_rate is not None and s.heart_rate > 0)
    return JSONResponse(content={
        "filename": filename,
        "samples": len(samples),
        "samples_with_hr": with_hr,
    })


@router.get("/records", response_class=JSONResponse)
async def list_records(records: dict = Depends(get_records)):
    return JSONResponse(content={
        "files": {name: len(samples) for name, samples in records.items()},
    })
