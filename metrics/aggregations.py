"""Period aggregations (ISO weeks, rolling windows)."""

from collections import defaultdict
from datetime import datetime, timedelta
from typing import Iterable

from dateutil.relativedelta import relativedelta

from metrics.config import SUMMARY_WINDOWS_DAYS, WEEKLY_WINDOW_MONTHS, ZONE_COUNT
from metrics.models import Run, as_naive_utc
from metrics.profile import ZoneConfig
from metrics.zones import (
    RecordProvider,
    heart_rates_from_records,
    runs_in_last_days,
    zone_fractions,
    zone_index,
)


def iso_week_key(date: datetime) -> str:
    """ISO 8601 week key like '2025-W01'.

    The week belongs to the year containing its Thursday, so Dec 31 can
    fall in week 1 of the next year and Jan 1 in week 52/53 of the previous.
    """
    year, week, _ = date.isocalendar()
    return f"{year}-W{week:02d}"


def get_week_start(date: datetime) -> datetime:
    """Get Monday of the week containing the date."""
    monday = date - timedelta(days=date.weekday())
    return monday.replace(hour=0, minute=0, second=0, microsecond=0)


def window_start(reference_date: datetime, months: int) -> datetime:
    """Calendar-month subtraction (Aug 31 - 6 months = Feb 28/29)."""
    return as_naive_utc(reference_date) - relativedelta(months=months)


def runs_since(runs: Iterable[Run], start: datetime) -> list[Run]:
    return [r for r in runs if r.date >= start]


def weekly_distances(
    runs: Iterable[Run],
    reference_date: datetime,
    window_months: int = WEEKLY_WINDOW_MONTHS,
) -> dict[str, float]:
    """Total distance (km) per ISO week over the trailing calendar months.

    Returns:
        Dict of week key -> km, ordered by week key ascending. Weeks without
        runs are absent.
    """
    start = window_start(reference_date, window_months)

    weekly: dict[str, float] = defaultdict(float)
    for run in runs_since(runs, start):
        weekly[iso_week_key(run.date)] += run.distance

    return {key: weekly[key] for key in sorted(weekly)}


def average_weekly(
    runs: Iterable[Run],
    reference_date: datetime,
    window_months: int = WEEKLY_WINDOW_MONTHS,
) -> float | None:
    """Mean weekly distance over weeks that contain at least one run.

    Returns:
        Average km per week, or None if no run falls in the window
    """
    weekly = weekly_distances(runs, reference_date, window_months)
    if not weekly:
        return None
    return sum(weekly.values()) / len(weekly)


def _consecutive_run_days(runs: list[Run], reference_date: datetime) -> int:
    """Days in a row with running, counting back from the reference date.

    Zero unless there was a run within the last day.
    """
    ordered = sorted(runs, key=lambda r: r.date, reverse=True)
    if not ordered or reference_date - ordered[0].date > timedelta(days=1):
        return 0

    for i in range(len(ordered) - 1):
        gap_days = (ordered[i].date - ordered[i + 1].date).days
        if gap_days > 1:
            return i + 1
    return len(ordered)


def summarize_runs(runs: Iterable[Run], reference_date: datetime) -> dict:
    """Summary statistics for the dashboard header.

    Returns:
        Dict with:
            - total_runs
            - last_7_days / last_28_days: {"runs", "distance"}
            - last_6_months: {"runs", "distance", "avg_weekly"}
            - runs_with_basic_hr, runs_with_stream_hr, runs_with_pace
            - consecutive_run_days
    """
    runs = list(runs)
    reference_date = as_naive_utc(reference_date)

    summary = {"total_runs": len(runs)}

    for days in SUMMARY_WINDOWS_DAYS:
        in_window = runs_in_last_days(runs, reference_date, days)
        summary[f"last_{days}_days"] = {
            "runs": len(in_window),
            "distance": sum(r.distance for r in in_window),
        }

    recent = runs_since(runs, window_start(reference_date, WEEKLY_WINDOW_MONTHS))
    six_months = {
        "runs": len(recent),
        "distance": sum(r.distance for r in recent),
    }
    avg = average_weekly(runs, reference_date)
    if avg is not None:
        six_months["avg_weekly"] = avg
    summary["last_6_months"] = six_months

    summary["runs_with_basic_hr"] = sum(1 for r in runs if r.avg_hr and r.avg_hr > 0)
    summary["runs_with_stream_hr"] = sum(1 for r in runs if r.has_hr_stream)
    summary["runs_with_pace"] = sum(1 for r in runs if r.has_pace_stream)
    summary["consecutive_run_days"] = _consecutive_run_days(runs, reference_date)

    return summary


def weekly_zone_distances(
    runs: Iterable[Run],
    zone_config: ZoneConfig,
    records: RecordProvider,
    reference_date: datetime,
    window_months: int = WEEKLY_WINDOW_MONTHS,
) -> list[dict]:
    """Weekly distance split by HR zone for the stacked distance chart.

    Runs with detailed records (or an HR stream) are split by the fraction of
    samples per zone; runs with only an average HR put their whole distance in
    that zone; anything else counts as 'no_hr'.

    Returns:
        List of dicts ordered by week: week, week_start, total, z1..z6, no_hr
    """
    start = window_start(reference_date, window_months)
    weeks: dict[str, dict] = {}

    for run in runs_since(runs, start):
        key = iso_week_key(run.date)
        week = weeks.get(key)
        if week is None:
            week = {
                "week": key,
                "week_start": get_week_start(run.date).strftime("%Y-%m-%d"),
                "total": 0.0,
                **{f"z{i + 1}": 0.0 for i in range(ZONE_COUNT)},
                "no_hr": 0.0,
            }
            weeks[key] = week

        week["total"] += run.distance

        heart_rates = []
        if run.filename is not None:
            heart_rates = heart_rates_from_records(records.get(run.filename))
        if not heart_rates and run.hr_stream:
            heart_rates = [hr for _, hr in run.hr_stream]

        fractions = zone_fractions(heart_rates, zone_config)
        if fractions is not None:
            for i, fraction in enumerate(fractions):
                week[f"z{i + 1}"] += run.distance * fraction
        elif run.avg_hr and run.avg_hr > 0:
            week[f"z{zone_index(run.avg_hr, zone_config) + 1}"] += run.distance
        else:
            week["no_hr"] += run.distance

    return [weeks[key] for key in sorted(weeks)]
