"""Training load traffic lights.

Five indicators: volume progression, long run frequency, recovery,
intensity distribution and race effort frequency. The last three work on
classified sessions.
"""

from datetime import datetime, timedelta
from typing import Iterable, Sequence

from metrics.aggregations import average_weekly
from metrics.classification import Classification, classify_activity
from metrics.config import (
    CATEGORY_RACE,
    INTENSITY_POLARIZED_PCT,
    INTENSITY_RED,
    INTENSITY_YELLOW,
    LONG_RUN_FRACTION,
    LONG_RUN_MAX_PER_28D,
    RACE_FORTNIGHT_YELLOW,
    RACE_MONTH_MAX,
    RACE_WEEK_RED,
    RECOVERY_BUSY_WEEK,
    RECOVERY_EASY_SHARE,
    RECOVERY_HARD_RED,
    RECOVERY_HARD_YELLOW,
    VOLUME_DECREASE_YELLOW,
    VOLUME_INCREASE_RED,
    VOLUME_INCREASE_YELLOW,
)
from metrics.models import Run, as_naive_utc
from metrics.profile import ZoneConfig
from metrics.zones import RecordProvider, runs_in_last_days

ClassifiedRun = tuple[Run, Classification]


def analyze_volume(runs: Iterable[Run], reference_date: datetime) -> dict:
    """Compare the last 7 days against the 14-day weekly average.

    Returns:
        Dict with metric, status ('green', 'yellow', 'red'), message and
        the underlying numbers
    """
    runs = list(runs)
    dist_7 = sum(r.distance for r in runs_in_last_days(runs, reference_date, 7))
    dist_14 = sum(r.distance for r in runs_in_last_days(runs, reference_date, 14))
    dist_28 = sum(r.distance for r in runs_in_last_days(runs, reference_date, 28))

    avg_week_14 = dist_14 / 2
    avg_week_28 = dist_28 / 4
    change = (dist_7 - avg_week_14) / avg_week_14 * 100 if avg_week_14 > 0 else 0.0

    if dist_7 == 0:
        status = "yellow"
        message = "No running volume in the last 7 days."
    elif change > VOLUME_INCREASE_RED:
        status = "red"
        message = (
            f"Volume increased {change:.0f}% from previous week "
            f"({dist_7:.1f} km vs {avg_week_14:.1f} km). Exceeds the 10% rule significantly."
        )
    elif change > VOLUME_INCREASE_YELLOW:
        status = "yellow"
        message = (
            f"Volume increased {change:.0f}% this week "
            f"({dist_7:.1f} km vs {avg_week_14:.1f} km avg). Moderate increase detected."
        )
    elif change < VOLUME_DECREASE_YELLOW:
        status = "yellow"
        message = (
            f"Volume decreased {abs(change):.0f}% ({dist_7:.1f} km this week vs "
            f"{avg_week_14:.1f} km average). Significant drop in training load."
        )
    else:
        status = "green"
        message = (
            f"Consistent weekly volume: {dist_7:.1f} km last 7 days, "
            f"{avg_week_28:.1f} km average per week over 28 days."
        )

    return {
        "metric": "Volume Progression",
        "status": status,
        "message": message,
        "distance_7d": dist_7,
        "avg_week_14d": avg_week_14,
        "avg_week_28d": avg_week_28,
        "change_pct": change,
    }


def analyze_long_runs(
    runs: Iterable[Run],
    reference_date: datetime,
    avg_weekly: float | None,
) -> dict:
    """Count long runs (> half the weekly average) in the last 28 days."""
    reference_date = as_naive_utc(reference_date)
    runs_28 = runs_in_last_days(runs, reference_date, 28)

    if avg_weekly is None:
        long_runs = []
    else:
        long_runs = [r for r in runs_28 if r.distance > LONG_RUN_FRACTION * avg_weekly]

    if long_runs:
        days_since_long = min((reference_date - r.date).days for r in long_runs)
    else:
        days_since_long = 28

    if not long_runs:
        status = "yellow"
        message = (
            f"No long runs in the last 28 days. "
            f"Last long run was {days_since_long}+ days ago."
        )
    elif len(long_runs) >= LONG_RUN_MAX_PER_28D:
        status = "yellow"
        message = f"{len(long_runs)} long runs in 28 days. High frequency may impact recovery."
    elif days_since_long <= 10:
        status = "green"
        message = (
            f"{len(long_runs)} long run(s) in last 28 days. Most recent: "
            f"{days_since_long} days ago. Consistent endurance training."
        )
    else:
        status = "green"
        message = f"{len(long_runs)} long run(s) completed. Last long run: {days_since_long} days ago."

    return {
        "metric": "Long Run Frequency",
        "status": status,
        "message": message,
        "long_runs": len(long_runs),
        "days_since_long_run": days_since_long,
    }


def classify_sessions(
    runs: Iterable[Run],
    zone_config: ZoneConfig,
    records: RecordProvider | None = None,
    ftp: float | None = None,
    avg_weekly: float | None = None,
) -> list[ClassifiedRun]:
    """Pair every run with its effort classification."""
    return [
        (run, classify_activity(run, zone_config, ftp, avg_weekly, records))
        for run in runs
    ]


def _in_window(
    classified: Iterable[ClassifiedRun],
    reference_date: datetime,
    days: int,
) -> list[ClassifiedRun]:
    window = timedelta(days=days)
    return [(r, c) for r, c in classified if reference_date - r.date <= window]


def analyze_recovery(classified: Sequence[ClassifiedRun], reference_date: datetime) -> dict:
    """Balance of hard and easy sessions over the last 7 days."""
    reference_date = as_naive_utc(reference_date)
    week = _in_window(classified, reference_date, 7)

    total = len(week)
    hard = sum(1 for _, c in week if c.is_hard)
    easy = sum(1 for _, c in week if c.is_easy)

    if total == 0:
        past = [r.date for r, _ in classified if r.date <= reference_date]
        status = "yellow"
        if past:
            days = (reference_date - max(past)).days
            message = f"No runs recorded in the last 7 days. Last run was {days} days ago."
        else:
            message = "No runs recorded in the last 7 days."
    elif hard >= RECOVERY_HARD_RED:
        status = "red"
        message = (
            f"{hard} hard efforts in the last 7 days. "
            f"High risk of overtraining; add easy days."
        )
    elif hard == RECOVERY_HARD_YELLOW and easy < 2:
        status = "yellow"
        message = f"{hard} hard efforts with only {easy} easy run(s) this week. Consider more recovery."
    elif total >= RECOVERY_BUSY_WEEK and easy < 3:
        status = "yellow"
        message = f"{total} runs this week with only {easy} easy. Make sure to include rest days."
    elif easy >= RECOVERY_EASY_SHARE * total:
        status = "green"
        message = f"Good recovery balance: {easy} easy of {total} runs in the last 7 days."
    else:
        status = "green"
        message = f"{total} runs with {hard} hard effort(s) this week. Training load is manageable."

    return {
        "metric": "Recovery & Rest",
        "status": status,
        "message": message,
        "runs_7d": total,
        "hard_7d": hard,
        "easy_7d": easy,
    }


def analyze_intensity_distribution(
    classified: Sequence[ClassifiedRun],
    reference_date: datetime,
) -> dict:
    """Share of easy and hard sessions over the last 28 days (80/20 rule).

    Shares are counted by session; the distances are reported alongside.
    """
    reference_date = as_naive_utc(reference_date)
    month = _in_window(classified, reference_date, 28)

    total = len(month)
    easy = [r for r, c in month if c.is_easy]
    hard = [r for r, c in month if c.is_hard]
    easy_km = sum(r.distance for r in easy)
    hard_km = sum(r.distance for r in hard)
    easy_pct = len(easy) * 100 / total if total else 0.0
    hard_pct = len(hard) * 100 / total if total else 0.0

    if total == 0:
        status = "yellow"
        message = "No runs in the last 28 days to assess intensity distribution."
    elif easy_pct < INTENSITY_RED[0] and hard_pct > INTENSITY_RED[1]:
        status = "red"
        message = (
            f"Only {easy_pct:.0f}% easy runs, {hard_pct:.0f}% hard. "
            f"Too much intensity; aim for about 80% easy."
        )
    elif easy_pct < INTENSITY_YELLOW[0] and hard_pct > INTENSITY_YELLOW[1]:
        status = "yellow"
        message = f"{easy_pct:.0f}% easy, {hard_pct:.0f}% hard. Consider more easy running."
    elif easy_pct >= INTENSITY_POLARIZED_PCT:
        status = "green"
        message = (
            f"Excellent polarization: {easy_pct:.0f}% easy ({easy_km:.1f} km), "
            f"{hard_pct:.0f}% hard ({hard_km:.1f} km)."
        )
    else:
        status = "green"
        message = f"Balanced intensity: {easy_pct:.0f}% easy, {hard_pct:.0f}% hard."

    return {
        "metric": "Intensity Distribution (28 days)",
        "status": status,
        "message": message,
        "runs_28d": total,
        "easy_pct": easy_pct,
        "hard_pct": hard_pct,
        "easy_km": easy_km,
        "hard_km": hard_km,
    }


def analyze_race_efforts(classified: Sequence[ClassifiedRun], reference_date: datetime) -> dict:
    """Frequency of race-category efforts over 7, 14 and 28 days."""
    reference_date = as_naive_utc(reference_date)

    def races(days):
        window = _in_window(classified, reference_date, days)
        return [r for r, c in window if c.category == CATEGORY_RACE]

    race_7 = len(races(7))
    race_14 = len(races(14))
    race_28 = len(races(28))
    total_7 = len(_in_window(classified, reference_date, 7))

    if race_7 >= RACE_WEEK_RED:
        status = "red"
        message = f"{race_7} race efforts in 7 days. Too many maximal efforts; recovery is compromised."
    elif race_7 == 2 and total_7 <= 4:
        status = "yellow"
        message = f"2 race efforts out of {total_7} runs this week. Allow recovery before the next one."
    elif race_14 >= RACE_FORTNIGHT_YELLOW:
        status = "yellow"
        message = f"{race_14} race efforts in 14 days. High frequency of maximal efforts."
    elif race_28 == 0:
        status = "green"
        message = "No race efforts in the last 28 days."
    elif race_28 <= RACE_MONTH_MAX:
        status = "green"
        message = f"{race_28} race effort(s) in 28 days. Appropriate frequency."
    else:
        status = "yellow"
        message = f"{race_28} race efforts in 28 days. Consider spacing them out."

    return {
        "metric": "Race Effort Frequency",
        "status": status,
        "message": message,
        "race_7d": race_7,
        "race_14d": race_14,
        "race_28d": race_28,
    }


def analyze_training_load(
    runs: Iterable[Run],
    zone_config: ZoneConfig,
    records: RecordProvider | None,
    reference_date: datetime,
    ftp: float | None = None,
) -> dict:
    """All five traffic lights, keyed recovery, intensity, volume, long_runs, race_efforts."""
    runs = list(runs)
    reference_date = as_naive_utc(reference_date)
    avg = average_weekly(runs, reference_date)
    classified = classify_sessions(runs, zone_config, records, ftp, avg)

    return {
        "recovery": analyze_recovery(classified, reference_date),
        "intensity": analyze_intensity_distribution(classified, reference_date),
        "volume": analyze_volume(runs, reference_date),
        "long_runs": analyze_long_runs(runs, reference_date, avg),
        "race_efforts": analyze_race_efforts(classified, reference_date),
    }
