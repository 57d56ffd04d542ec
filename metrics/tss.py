"""Heart-rate based training stress (hrTSS)."""

from metrics.config import DEFAULT_RESTING_HR
from metrics.models import Run
from metrics.power import round_half_up


def hr_reserve_fraction(avg_hr: float, max_hr: float, resting_hr: float) -> float | None:
    """Fraction of heart rate reserve, clamped to [0, 1].

    HRr = (avg - resting) / (max - resting)
    """
    reserve = max_hr - resting_hr
    if reserve <= 0:
        return None
    fraction = (avg_hr - resting_hr) / reserve
    return max(0.0, min(1.0, fraction))


def hr_tss(
    duration_seconds: float | None,
    avg_hr: float | None,
    max_hr: float | None,
    resting_hr: float = DEFAULT_RESTING_HR,
) -> int | None:
    """Estimate training stress from heart rate alone.

    hrTSS = duration_hours × HRr² × 100

    A coarser proxy for power TSS on activities without a power meter. The
    two scores describe the same activity and are never summed.

    Args:
        duration_seconds: Activity duration in seconds
        avg_hr: Average heart rate
        max_hr: Maximum heart rate
        resting_hr: Resting heart rate (default 50)

    Returns:
        hrTSS (rounded), or None if inputs are missing
    """
    if not duration_seconds or not avg_hr or not max_hr:
        return None

    fraction = hr_reserve_fraction(avg_hr, max_hr, resting_hr)
    if fraction is None:
        return None

    hours = duration_seconds / 3600
    return round_half_up(hours * fraction ** 2 * 100)


def compute_run_hr_tss(
    run: Run,
    max_hr: float | None,
    resting_hr: float = DEFAULT_RESTING_HR,
) -> int | None:
    """hrTSS for a run, using the profile max HR before the run's own peak."""
    return hr_tss(
        run.duration_seconds,
        run.avg_hr,
        max_hr or run.max_hr,
        resting_hr,
    )
