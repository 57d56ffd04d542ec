"""HR zone classification and distance attribution."""

import logging
from datetime import datetime, timedelta
from typing import Any, Iterable, Mapping, Protocol, Sequence

from metrics.config import (
    SAMPLE_INTERVAL_SECONDS,
    Z6_THRESHOLD,
    ZONE_COUNT,
    ZONE_WINDOW_DAYS,
)
from metrics.models import Run, ZoneDistribution, as_naive_utc, parse_float
from metrics.profile import ZoneConfig, validate_zone_config

logger = logging.getLogger(__name__)


class RecordProvider(Protocol):
    """Lookup of detailed per-sample records keyed by filename.

    A plain dict satisfies this.
    """

    def get(self, filename: str) -> Sequence[Mapping[str, Any]] | None:
        ...


def zone_index(heart_rate: float, zone_config: ZoneConfig) -> int:
    """Return the 0-based zone (0 = Z1 .. 5 = Z6) for a heart rate.

    Half-open intervals on the fraction of max HR; Z6 catches everything
    at or above 95%.
    """
    p = heart_rate / zone_config.hr_max
    z2, z3, z4, z5 = zone_config.boundaries

    if p < z2:
        return 0
    elif p < z3:
        return 1
    elif p < z4:
        return 2
    elif p < z5:
        return 3
    elif p < Z6_THRESHOLD:
        return 4
    else:
        return 5


def zone_bounds_bpm(zone_config: ZoneConfig) -> dict:
    """Zone boundaries converted to beats per minute."""
    hr_max = zone_config.hr_max
    return {
        "z2": zone_config.z2 * hr_max,
        "z3": zone_config.z3 * hr_max,
        "z4": zone_config.z4 * hr_max,
        "z5": zone_config.z5 * hr_max,
        "z6": Z6_THRESHOLD * hr_max,
    }


def zone_labels(zone_config: ZoneConfig) -> tuple[str, ...]:
    """Human readable labels, e.g. 'Z2: 75-85% (142-162 bpm)'."""

    def pct(x):
        return round(x * 100)

    def bpm(x):
        return round(x * zone_config.hr_max)

    b = (*zone_config.boundaries, Z6_THRESHOLD)
    return (
        f"Z1: <{pct(b[0])}% (<{bpm(b[0])} bpm)",
        f"Z2: {pct(b[0])}-{pct(b[1])}% ({bpm(b[0])}-{bpm(b[1])} bpm)",
        f"Z3: {pct(b[1])}-{pct(b[2])}% ({bpm(b[1])}-{bpm(b[2])} bpm)",
        f"Z4: {pct(b[2])}-{pct(b[3])}% ({bpm(b[2])}-{bpm(b[3])} bpm)",
        f"Z5: {pct(b[3])}-{pct(b[4])}% ({bpm(b[3])}-{bpm(b[4])} bpm)",
        f"Z6: >{pct(b[4])}% (>{bpm(b[4])} bpm)",
    )


def heart_rates_from_records(records: Sequence[Mapping[str, Any]] | None) -> list[float]:
    """Valid (> 0) heart rate samples from a detailed record set.

    Numeric strings are accepted; anything non-numeric is skipped.
    """
    if not records:
        return []

    samples = []
    for record in records:
        if not isinstance(record, Mapping):
            continue
        hr = parse_float(record.get("heart_rate"))
        if hr is not None and hr > 0:
            samples.append(hr)
    return samples


def runs_in_last_days(
    runs: Iterable[Run],
    reference_date: datetime,
    days: int,
) -> list[Run]:
    """Runs at most `days` elapsed days before the reference date."""
    reference_date = as_naive_utc(reference_date)
    window = timedelta(days=days)
    return [r for r in runs if reference_date - r.date <= window]


def classify(
    runs: Iterable[Run],
    zone_config: ZoneConfig,
    records: RecordProvider,
    reference_date: datetime,
    window_days: int = ZONE_WINDOW_DAYS,
) -> ZoneDistribution:
    """Compute HR zone occupancy and distance per zone over a trailing window.

    Only runs whose filename resolves to detailed records contribute. Each
    run's distance is split evenly across the distinct zones its samples
    touched, independent of how many samples landed in each zone.

    Args:
        runs: Runs to consider
        zone_config: Zone boundaries and max HR
        records: Filename -> detailed record lookup
        reference_date: End of the window
        window_days: Window length in elapsed days

    Returns:
        ZoneDistribution (total_samples == 0 means no data)

    Raises:
        ValidationError: if the zone configuration is invalid
    """
    validate_zone_config(*zone_config.boundaries, zone_config.hr_max)

    counts = [0] * ZONE_COUNT
    distances = [0.0] * ZONE_COUNT
    total_samples = 0
    runs_with_detail = 0
    total_distance = 0.0

    for run in runs_in_last_days(runs, reference_date, window_days):
        if run.filename is None:
            continue
        run_records = records.get(run.filename)
        if run_records is None:
            continue

        runs_with_detail += 1
        total_distance += run.distance

        touched: set[int] = set()
        for hr in heart_rates_from_records(run_records):
            idx = zone_index(hr, zone_config)
            counts[idx] += 1
            total_samples += 1
            touched.add(idx)

        if touched:
            share = run.distance / len(touched)
            for idx in touched:
                distances[idx] += share

    logger.debug(
        "Zone distribution: %d samples from %d runs over %d days",
        total_samples,
        runs_with_detail,
        window_days,
    )

    return ZoneDistribution(
        sample_counts=tuple(counts),
        distances=tuple(distances),
        time_seconds=tuple(c * SAMPLE_INTERVAL_SECONDS for c in counts),
        total_samples=total_samples,
        runs_with_detail=runs_with_detail,
        total_distance=total_distance,
        labels=zone_labels(zone_config),
    )


def zone_fractions(
    heart_rates: Sequence[float],
    zone_config: ZoneConfig,
) -> list[float] | None:
    """Fraction of samples in each zone, or None without samples."""
    valid = [hr for hr in heart_rates if hr and hr > 0]
    if not valid:
        return None

    counts = [0] * ZONE_COUNT
    for hr in valid:
        counts[zone_index(hr, zone_config)] += 1
    return [c / len(valid) for c in counts]
