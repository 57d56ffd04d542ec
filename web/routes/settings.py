"""Settings routes for zone and profile configuration."""
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from metrics.power import estimate_ftp
from metrics.store import RunStore
from web.app import default_settings
from web.deps import get_settings, get_store
from web.services.analysis import get_effective, get_settings_view

router = APIRouter()


class ZonesUpdate(BaseModel):
    z2: float
    z3: float
    z4: float
    z5: float
    hr_max: Optional[float] = None


class ProfileUpdate(BaseModel):
    """Empty fields fall back to estimates or defaults."""

    ftp: Optional[float] = None
    weight_kg: Optional[float] = None
    resting_hr: Optional[int] = None
    max_hr: Optional[float] = None


def _apply(store: RunStore, settings: dict, changes: dict) -> dict:
    """Validate the changed settings before storing them.

    Raises:
        ValidationError: if the resulting zone configuration is invalid
    """
    candidate = {**settings, **changes}
    get_effective(store, candidate)
    settings.update(candidate)
    return get_settings_view(store, settings)


@router.get("", response_class=JSONResponse)
async def read_settings(
    store: RunStore = Depends(get_store),
    settings: dict = Depends(get_settings),
):
    """Return user settings and the effective values derived from them."""
    return JSONResponse(content=get_settings_view(store, settings))


@router.put("/zones", response_class=JSONResponse)
async def update_zones(
    payload: ZonesUpdate,
    store: RunStore = Depends(get_store),
    settings: dict = Depends(get_settings),
):
    """Update zone boundaries (fractions of max HR) and optionally max HR."""
    changes = {
        "boundaries": {"z2": payload.z2, "z3": payload.z3, "z4": payload.z4, "z5": payload.z5},
    }
    if payload.hr_max is not None:
        changes["hr_max"] = payload.hr_max
    return JSONResponse(content=_apply(store, settings, changes))


@router.put("/profile", response_class=JSONResponse)
async def update_profile(
    payload: ProfileUpdate,
    store: RunStore = Depends(get_store),
    settings: dict = Depends(get_settings),
):
    """Update rider profile values.

    Only fields present in the body change; an explicit null clears a value.
    """
    changes = payload.model_dump(exclude_unset=True)
    if "max_hr" in changes:
        changes["hr_max"] = changes.pop("max_hr")
    return JSONResponse(content=_apply(store, settings, changes))


@router.delete("", response_class=JSONResponse)
async def reset_settings(
    store: RunStore = Depends(get_store),
    settings: dict = Depends(get_settings),
):
    """Drop all user values."""
    settings.clear()
    settings.update(default_settings())
    return JSONResponse(content=get_settings_view(store, settings))


@router.get("/ftp-estimate", response_class=JSONResponse)
async def ftp_estimate(store: RunStore = Depends(get_store)):
    """Estimate FTP from the best 20- or 5-minute power across activities."""
    return JSONResponse(content={"estimated_ftp": estimate_ftp(store.runs)})
