"""Analysis services for the dashboard API."""
from datetime import datetime
from typing import Any

from ingest.normalize import parse_date
from metrics.aggregations import (
    average_weekly,
    summarize_runs,
    weekly_distances,
    weekly_zone_distances,
)
from metrics.compute import compute_activity_metrics, run_full_computation
from metrics.config import ZONE_WINDOW_DAYS
from metrics.exceptions import ValidationError
from metrics.profile import EffectiveSettings, get_effective_settings
from metrics.store import RunStore
from metrics.classification import classify_activity
from metrics.training_load import analyze_training_load
from metrics.zones import classify, zone_bounds_bpm


def resolve_reference_date(as_of: str | None) -> datetime:
    """Parse the `as_of` query parameter, defaulting to now."""
    if not as_of:
        return datetime.now()
    parsed = parse_date(as_of)
    if parsed is None:
        raise ValidationError("Invalid reference date", {"as_of": as_of})
    return parsed


def get_effective(store: RunStore, settings: dict) -> EffectiveSettings:
    """Resolve user settings against estimates from the stored runs."""
    return get_effective_settings(store.runs, **settings)


def get_settings_view(store: RunStore, settings: dict) -> dict[str, Any]:
    effective = get_effective(store, settings)
    return {
        "user": settings,
        "zones": effective.zones.to_dict(),
        "zone_bpm": zone_bounds_bpm(effective.zones),
        "profile": effective.profile.to_dict(),
        "has_user_hr_max": effective.has_user_hr_max,
        "estimated_hr_max": effective.estimated_hr_max,
        "notes": effective.notes,
    }


def get_weekly_view(store: RunStore, reference_date: datetime) -> dict[str, Any]:
    """Weekly distances for the bar chart."""
    weekly = weekly_distances(store.runs, reference_date)
    data = {
        "labels": list(weekly),
        "distances": list(weekly.values()),
    }
    avg = average_weekly(store.runs, reference_date)
    if avg is not None:
        data["average_weekly"] = avg
    return data


def get_zones_view(
    store: RunStore,
    records: dict,
    settings: dict,
    reference_date: datetime,
    window_days: int = ZONE_WINDOW_DAYS,
) -> dict[str, Any]:
    effective = get_effective(store, settings)
    distribution = classify(store.runs, effective.zones, records, reference_date, window_days)
    data = distribution.to_dict()
    data["window_days"] = window_days
    return data


def get_summary_view(store: RunStore, reference_date: datetime) -> dict[str, Any]:
    return summarize_runs(store.runs, reference_date)


def get_weekly_zones_view(
    store: RunStore,
    records: dict,
    settings: dict,
    reference_date: datetime,
) -> list[dict[str, Any]]:
    effective = get_effective(store, settings)
    return weekly_zone_distances(store.runs, effective.zones, records, reference_date)


def get_traffic_lights(
    store: RunStore,
    records: dict,
    settings: dict,
    reference_date: datetime,
) -> dict[str, Any]:
    """Recovery, intensity, volume, long run and race effort indicators."""
    effective = get_effective(store, settings)
    return analyze_training_load(
        store.runs,
        effective.zones,
        records,
        reference_date,
        effective.profile.ftp,
    )


def get_dashboard(
    store: RunStore,
    records: dict,
    settings: dict,
    reference_date: datetime,
) -> dict[str, Any]:
    """Everything the dashboard shows, computed in one pass."""
    effective = get_effective(store, settings)
    data = run_full_computation(
        store.runs,
        effective.zones,
        effective.profile,
        records,
        reference_date,
    )
    data["notes"] = effective.notes
    return data


def get_activity_metrics(
    store: RunStore,
    settings: dict,
    run_id: str,
    records: dict | None = None,
) -> dict[str, Any] | None:
    """Per-activity metrics and effort classification, or None if the activity is unknown."""
    run = store.get(run_id)
    if run is None:
        return None

    effective = get_effective(store, settings)
    return {
        "activity": run.to_dict(),
        "metrics": compute_activity_metrics(run, effective.profile),
        "classification": classify_activity(
            run,
            effective.zones,
            effective.profile.ftp,
            average_weekly(store.runs, run.date),
            records,
        ).to_dict(),
    }
