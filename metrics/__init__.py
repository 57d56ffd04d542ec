"""Training metrics computation for Runboard."""

from metrics.config import (
    DEFAULT_HR_MAX,
    DEFAULT_RESTING_HR,
    DEFAULT_ZONE_BOUNDARIES,
)
from metrics.exceptions import ValidationError
from metrics.models import Run, ZoneDistribution
from metrics.profile import RiderProfile, ZoneConfig, get_effective_settings
from metrics.store import RunStore, merge
from metrics.aggregations import average_weekly, iso_week_key, weekly_distances
from metrics.zones import classify
from metrics.classification import Classification, classify_activity
from metrics.power import compute_ride_metrics, normalized_power
from metrics.tss import hr_tss
from metrics.training_load import analyze_training_load
from metrics.compute import compute_activity_metrics, run_full_computation

__all__ = [
    "DEFAULT_HR_MAX",
    "DEFAULT_RESTING_HR",
    "DEFAULT_ZONE_BOUNDARIES",
    "ValidationError",
    "Run",
    "ZoneDistribution",
    "RiderProfile",
    "ZoneConfig",
    "get_effective_settings",
    "RunStore",
    "merge",
    "average_weekly",
    "iso_week_key",
    "weekly_distances",
    "classify",
    "Classification",
    "classify_activity",
    "compute_ride_metrics",
    "normalized_power",
    "hr_tss",
    "analyze_training_load",
    "compute_activity_metrics",
    "run_full_computation",
]
