"""Power-based training metrics (NP, IF, TSS, VI, Work, W/kg).

Every function returns None when its inputs are missing or degenerate.
None means "not computable" and must never be read as zero.
"""

import math
from typing import Iterable, Sequence

from metrics.config import (
    FTP_FACTOR_20MIN,
    FTP_FACTOR_5MIN,
    FTP_WINDOW_20MIN,
    FTP_WINDOW_5MIN,
    IF_CATEGORIES,
    IF_CATEGORY_MAX,
    NP_WINDOW,
    TSS_CATEGORIES,
    TSS_CATEGORY_MAX,
)
from metrics.models import Run


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (builtin round() is banker's)."""
    return int(math.floor(value + 0.5))


def _positive(value) -> bool:
    return value is not None and value > 0


def _clean_stream(stream: Sequence[float | None] | None) -> list[float]:
    if not stream:
        return []
    return [w for w in stream if w is not None]


def normalized_power(stream: Sequence[float | None] | None) -> int | None:
    """Compute Normalized Power from a ~1 Hz watts stream.

    NP = (mean(rolling_30s_mean ^ 4)) ^ 0.25

    The rolling mean is causal and shrinks at the start: sample i averages
    samples [max(0, i - 29), i]. Missing samples are dropped.

    Args:
        stream: Watts samples

    Returns:
        NP in watts (rounded), or None with fewer than 30 samples
    """
    watts = _clean_stream(stream)
    if len(watts) < NP_WINDOW:
        return None

    fourth_powers = []
    window_sum = 0.0
    for i, w in enumerate(watts):
        window_sum += w
        if i >= NP_WINDOW:
            window_sum -= watts[i - NP_WINDOW]
        window_len = min(i + 1, NP_WINDOW)
        fourth_powers.append((window_sum / window_len) ** 4)

    mean_fourth = sum(fourth_powers) / len(fourth_powers)
    return round_half_up(mean_fourth ** 0.25)


def intensity_factor(np_watts: float | None, ftp: float | None) -> float | None:
    """IF = NP / FTP."""
    if not _positive(np_watts) or not _positive(ftp):
        return None
    return np_watts / ftp


def training_stress_score(
    duration_seconds: float | None,
    np_watts: float | None,
    intensity: float | None,
    ftp: float | None,
) -> int | None:
    """TSS = (duration_s × NP × IF) / (FTP × 3600) × 100, rounded.

    100 = one hour at threshold.
    """
    if not all(_positive(v) for v in (duration_seconds, np_watts, intensity, ftp)):
        return None
    tss = (duration_seconds * np_watts * intensity) / (ftp * 3600) * 100
    return round_half_up(tss)


def variability_index(np_watts: float | None, avg_power: float | None) -> float | None:
    """VI = NP / average power. Close to 1.0 is a steady effort."""
    if not _positive(np_watts) or not _positive(avg_power):
        return None
    return np_watts / avg_power


def work_kj(avg_power: float | None, duration_seconds: float | None) -> int | None:
    """Mechanical work in kilojoules, rounded."""
    if not _positive(avg_power) or not _positive(duration_seconds):
        return None
    return round_half_up(avg_power * duration_seconds / 1000)


def watts_per_kg(power: float | None, weight_kg: float | None) -> float | None:
    if not _positive(power) or not _positive(weight_kg):
        return None
    return power / weight_kg


def if_category(intensity: float | None) -> str | None:
    if intensity is None:
        return None
    for upper, label in IF_CATEGORIES:
        if intensity < upper:
            return label
    return IF_CATEGORY_MAX


def tss_category(tss: float | None) -> str | None:
    if tss is None:
        return None
    for upper, label in TSS_CATEGORIES:
        if tss < upper:
            return label
    return TSS_CATEGORY_MAX


def compute_ride_metrics(
    run: Run,
    ftp: float | None,
    weight_kg: float | None = None,
) -> dict:
    """Compute all power metrics for one activity.

    Follows the dependency order: NP first; IF/TSS only with NP and FTP;
    VI only with NP and average power; Work only with average power and
    duration; per-kg values only with a weight. Duration is the moving time.

    Returns:
        Dict with any of np, if, ifCategory, tss, tssCategory, vi, work,
        avgWkg, npWkg. Keys that cannot be computed are omitted.
    """
    metrics = {}
    duration = run.duration_seconds

    np_watts = normalized_power(run.power_stream) if run.power_stream else None
    if np_watts is not None:
        metrics["np"] = np_watts

        intensity = intensity_factor(np_watts, ftp)
        if intensity is not None:
            metrics["if"] = intensity
            metrics["ifCategory"] = if_category(intensity)

            tss = training_stress_score(duration, np_watts, intensity, ftp)
            if tss is not None:
                metrics["tss"] = tss
                metrics["tssCategory"] = tss_category(tss)

        vi = variability_index(np_watts, run.avg_power)
        if vi is not None:
            metrics["vi"] = vi

    work = work_kj(run.avg_power, duration)
    if work is not None:
        metrics["work"] = work

    if _positive(weight_kg):
        avg_wkg = watts_per_kg(run.avg_power, weight_kg)
        if avg_wkg is not None:
            metrics["avgWkg"] = avg_wkg
        if np_watts is not None:
            metrics["npWkg"] = watts_per_kg(np_watts, weight_kg)

    return metrics


def best_average_power(stream: Sequence[float | None] | None, window: int) -> float | None:
    """Highest mean power over any `window` consecutive samples."""
    watts = _clean_stream(stream)
    if len(watts) < window or window <= 0:
        return None

    window_sum = sum(watts[:window])
    best = window_sum
    for i in range(window, len(watts)):
        window_sum += watts[i] - watts[i - window]
        best = max(best, window_sum)
    return best / window


def estimate_ftp(runs: Iterable[Run]) -> int | None:
    """Estimate FTP from the best efforts across activities.

    Prefers 95% of the best 20-minute power; falls back to 76% of the best
    5-minute power when no activity has 20 minutes of data.
    """
    best_20 = 0.0
    best_5 = 0.0

    for run in runs:
        if not run.power_stream:
            continue
        p20 = best_average_power(run.power_stream, FTP_WINDOW_20MIN)
        if p20 is not None and p20 > best_20:
            best_20 = p20
        p5 = best_average_power(run.power_stream, FTP_WINDOW_5MIN)
        if p5 is not None and p5 > best_5:
            best_5 = p5

    if best_20 > 0:
        return round_half_up(best_20 * FTP_FACTOR_20MIN)
    if best_5 > 0:
        return round_half_up(best_5 * FTP_FACTOR_5MIN)
    return None
