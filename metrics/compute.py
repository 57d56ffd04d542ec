"""Main metrics computation orchestration."""

import logging
from datetime import datetime
from typing import Iterable

from metrics.aggregations import (
    average_weekly,
    summarize_runs,
    weekly_distances,
    weekly_zone_distances,
)
from metrics.config import ZONE_WINDOW_DAYS
from metrics.models import Run, as_naive_utc
from metrics.power import compute_ride_metrics
from metrics.profile import RiderProfile, ZoneConfig
from metrics.training_load import (
    analyze_intensity_distribution,
    analyze_long_runs,
    analyze_race_efforts,
    analyze_recovery,
    analyze_volume,
    classify_sessions,
)
from metrics.tss import compute_run_hr_tss
from metrics.zones import RecordProvider, classify

logger = logging.getLogger(__name__)


def compute_activity_metrics(run: Run, profile: RiderProfile) -> dict:
    """Compute all per-activity metrics.

    Power metrics come first; hrTSS is only reported when no power-based TSS
    exists, since the two describe the same load.

    Args:
        run: Activity to process
        profile: Rider FTP, weight and HR values

    Returns:
        Dict with any of np, if, ifCategory, tss, tssCategory, vi, work,
        avgWkg, npWkg, hrTSS. Absent metrics are omitted.
    """
    metrics = compute_ride_metrics(run, profile.ftp, profile.weight_kg)

    if "tss" not in metrics:
        hr_load = compute_run_hr_tss(run, profile.max_hr, profile.resting_hr)
        if hr_load is not None:
            metrics["hrTSS"] = hr_load

    return metrics


def run_full_computation(
    runs: Iterable[Run],
    zone_config: ZoneConfig,
    profile: RiderProfile,
    records: RecordProvider,
    reference_date: datetime | None = None,
    zone_window_days: int = ZONE_WINDOW_DAYS,
) -> dict:
    """Run the complete dashboard computation.

    Steps:
    1. Weekly distances and average over the last 6 months
    2. HR zone distribution over the trailing window
    3. Weekly per-zone distance breakdown
    4. Session classification (easy, intensity, race, mixed)
    5. Summary statistics and the five training load traffic lights
    6. Per-activity power / HR load metrics

    Args:
        runs: Deduplicated runs
        zone_config: Zone boundaries and max HR
        profile: Rider parameters
        records: Filename -> detailed record lookup
        reference_date: End of all windows (default: now)
        zone_window_days: Window for the zone distribution

    Returns:
        Dict with the computed views plus an 'errors' list

    Raises:
        ValidationError: if the zone configuration is invalid
    """
    runs = list(runs)
    if reference_date is None:
        reference_date = datetime.now()
    reference_date = as_naive_utc(reference_date)

    logger.info("Computing metrics for %d runs as of %s", len(runs), reference_date.date())

    weekly = weekly_distances(runs, reference_date)
    avg = average_weekly(runs, reference_date)

    distribution = classify(runs, zone_config, records, reference_date, zone_window_days)
    if not distribution.has_data:
        logger.info("No detailed HR data in the last %d days", zone_window_days)

    classified = classify_sessions(runs, zone_config, records, profile.ftp, avg)

    result = {
        "reference_date": reference_date.isoformat(),
        "weekly_distances": weekly,
        "zones": distribution.to_dict(),
        "weekly_zones": weekly_zone_distances(runs, zone_config, records, reference_date),
        "summary": summarize_runs(runs, reference_date),
        "traffic_lights": {
            "recovery": analyze_recovery(classified, reference_date),
            "intensity": analyze_intensity_distribution(classified, reference_date),
            "volume": analyze_volume(runs, reference_date),
            "long_runs": analyze_long_runs(runs, reference_date, avg),
            "race_efforts": analyze_race_efforts(classified, reference_date),
        },
        "classifications": {run.id: c.to_dict() for run, c in classified},
        "activities": {},
        "errors": [],
    }
    if avg is not None:
        result["average_weekly"] = avg

    for run in runs:
        try:
            result["activities"][run.id] = compute_activity_metrics(run, profile)
        except Exception as e:
            logger.warning("Failed to compute metrics for %s: %s", run.id, e)
            result["errors"].append(f"Activity {run.id}: {e}")

    logger.info(
        "Computed metrics for %d activities (%d errors)",
        len(result["activities"]),
        len(result["errors"]),
    )
    return result
