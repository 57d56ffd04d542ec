"""Domain types shared by the metrics modules."""

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from metrics.config import ZONE_COUNT


def as_naive_utc(value: datetime) -> datetime:
    """Drop tzinfo after converting aware datetimes to UTC.

    Strava timestamps are timezone-aware, file imports are naive. Run dates
    are always naive UTC.
    """
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def parse_float(value: Any) -> float | None:
    """Parse a float value, returning None for empty, invalid or non-finite values."""
    if value is None or isinstance(value, bool):
        return None
    if not isinstance(value, (int, float)):
        value = str(value).strip()
        if not value:
            return None

    try:
        result = float(value)
    except (ValueError, OverflowError):
        return None

    return result if math.isfinite(result) else None


@dataclass(frozen=True)
class Run:
    """One completed activity."""

    id: str
    date: datetime
    distance: float = 0.0  # km
    duration: float = 0.0  # minutes, including pauses
    moving_time: float | None = None  # seconds, excluding pauses

    avg_hr: float | None = None  # bpm
    max_hr: float | None = None  # bpm
    avg_power: float | None = None  # watts
    max_power: float | None = None  # watts

    # (time, heartrate) and (time, pace min/km) pairs
    hr_stream: tuple[tuple[float, float], ...] | None = None
    pace_stream: tuple[tuple[float, float], ...] | None = None
    # Watts samples at ~1 Hz
    power_stream: tuple[float, ...] | None = None

    filename: str | None = None
    source: str = "unknown"

    def __repr__(self) -> str:
        return f"<Run {self.id}: {self.date:%Y-%m-%d} {self.distance:.1f} km ({self.source})>"

    @property
    def duration_seconds(self) -> float | None:
        """Moving time, falling back to total duration."""
        if self.moving_time:
            return self.moving_time
        if self.duration:
            return self.duration * 60
        return None

    @property
    def has_hr_stream(self) -> bool:
        return bool(self.hr_stream)

    @property
    def has_pace_stream(self) -> bool:
        return bool(self.pace_stream)

    @property
    def has_basic_hr(self) -> bool:
        return bool(self.avg_hr and self.avg_hr > 0 and self.max_hr and self.max_hr > 0)

    def to_dict(self, include_streams: bool = False) -> dict:
        result = {
            "id": self.id,
            "date": self.date.isoformat(),
            "distance": self.distance,
            "duration": self.duration,
            "moving_time": self.moving_time,
            "avg_hr": self.avg_hr,
            "max_hr": self.max_hr,
            "avg_power": self.avg_power,
            "max_power": self.max_power,
            "filename": self.filename,
            "source": self.source,
            "has_hr_stream": self.has_hr_stream,
            "has_pace_stream": self.has_pace_stream,
            "has_power_stream": bool(self.power_stream),
        }
        if include_streams:
            result["hr_stream"] = [list(p) for p in self.hr_stream or ()]
            result["pace_stream"] = [list(p) for p in self.pace_stream or ()]
            result["power_stream"] = list(self.power_stream or ())
        return result


@dataclass(frozen=True)
class ZoneDistribution:
    """Six-zone HR distribution over a time window.

    Index 0 is Z1, index 5 is Z6.
    """

    sample_counts: tuple[int, ...] = (0,) * ZONE_COUNT
    distances: tuple[float, ...] = (0.0,) * ZONE_COUNT
    time_seconds: tuple[float, ...] = (0.0,) * ZONE_COUNT
    total_samples: int = 0
    runs_with_detail: int = 0
    total_distance: float = 0.0
    labels: tuple[str, ...] = field(default=(), compare=False)

    @property
    def has_data(self) -> bool:
        return self.total_samples > 0

    @property
    def percentages(self) -> tuple[float, ...]:
        if not self.has_data:
            return (0.0,) * ZONE_COUNT
        return tuple(count / self.total_samples * 100 for count in self.sample_counts)

    @property
    def low_intensity_distance(self) -> float:
        """Z1 + Z2 distance."""
        return self.distances[0] + self.distances[1]

    @property
    def high_intensity_distance(self) -> float:
        """Z4 + Z5 + Z6 distance."""
        return self.distances[3] + self.distances[4] + self.distances[5]

    @property
    def polarization_ratio(self) -> float | None:
        """Low-intensity over high-intensity distance, None without high-intensity work."""
        high = self.high_intensity_distance
        if high <= 0:
            return None
        return self.low_intensity_distance / high

    def to_dict(self) -> dict:
        result = {
            "has_data": self.has_data,
            "zones": [
                {
                    "zone": f"Z{i + 1}",
                    "label": self.labels[i] if i < len(self.labels) else f"Z{i + 1}",
                    "percent": self.percentages[i],
                    "samples": self.sample_counts[i],
                    "time_seconds": self.time_seconds[i],
                    "distance": self.distances[i],
                }
                for i in range(ZONE_COUNT)
            ],
            "total_samples": self.total_samples,
            "runs_with_detail": self.runs_with_detail,
            "total_distance": self.total_distance,
            "low_intensity_distance": self.low_intensity_distance,
            "high_intensity_distance": self.high_intensity_distance,
        }
        ratio = self.polarization_ratio
        if ratio is not None:
            result["polarization_ratio"] = ratio
        return result
