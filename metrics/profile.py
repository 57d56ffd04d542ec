"""Athlete profile and zone configuration."""

import math
from dataclasses import dataclass, field
from typing import Iterable

from metrics.config import DEFAULT_HR_MAX, DEFAULT_RESTING_HR, DEFAULT_ZONE_BOUNDARIES
from metrics.exceptions import ValidationError
from metrics.models import Run


def _is_finite_number(value) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def validate_zone_config(z2, z3, z4, z5, hr_max) -> None:
    """Check zone boundaries and max HR.

    Boundaries must be finite fractions in (0, 1), strictly increasing.
    Max HR must be finite and positive.

    Raises:
        ValidationError: naming the offending values
    """
    bounds = {"z2": z2, "z3": z3, "z4": z4, "z5": z5}

    if not all(_is_finite_number(v) and 0 < v < 1 for v in bounds.values()):
        raise ValidationError("Zone boundaries must be finite fractions in (0, 1)", bounds)

    if not (z2 < z3 < z4 < z5):
        raise ValidationError("Zone boundaries must be strictly increasing", bounds)

    if not _is_finite_number(hr_max) or hr_max <= 0:
        raise ValidationError("HR_MAX must be a positive finite number", {"hr_max": hr_max})


@dataclass(frozen=True)
class ZoneConfig:
    """Zone boundaries as fractions of max HR.

    Validated on construction; an instance is always usable for classification.
    """

    z2: float = DEFAULT_ZONE_BOUNDARIES["z2"]
    z3: float = DEFAULT_ZONE_BOUNDARIES["z3"]
    z4: float = DEFAULT_ZONE_BOUNDARIES["z4"]
    z5: float = DEFAULT_ZONE_BOUNDARIES["z5"]
    hr_max: float = DEFAULT_HR_MAX

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        validate_zone_config(self.z2, self.z3, self.z4, self.z5, self.hr_max)

    @property
    def boundaries(self) -> tuple[float, float, float, float]:
        return (self.z2, self.z3, self.z4, self.z5)

    def to_dict(self) -> dict:
        return {
            "z2": self.z2,
            "z3": self.z3,
            "z4": self.z4,
            "z5": self.z5,
            "hr_max": self.hr_max,
        }


@dataclass(frozen=True)
class RiderProfile:
    """Rider parameters used by the power and HR load metrics."""

    ftp: float | None = None
    weight_kg: float | None = None
    resting_hr: int = DEFAULT_RESTING_HR
    max_hr: float | None = None

    def to_dict(self) -> dict:
        return {
            "ftp": self.ftp,
            "weight_kg": self.weight_kg,
            "resting_hr": self.resting_hr,
            "max_hr": self.max_hr,
        }


@dataclass
class EffectiveSettings:
    """Zone config and rider profile after resolving user values and estimates."""

    zones: ZoneConfig
    profile: RiderProfile
    has_user_hr_max: bool = False
    estimated_hr_max: int | None = None
    notes: list[str] = field(default_factory=list)


def estimate_max_hr(runs: Iterable[Run]) -> int | None:
    """Estimate max HR from activity data.

    Returns the highest value seen in either the per-run max HR or the HR stream.
    """
    max_hr = 0
    for run in runs:
        if run.max_hr and run.max_hr > max_hr:
            max_hr = run.max_hr
        if run.hr_stream:
            stream_max = max(hr for _, hr in run.hr_stream)
            if stream_max > max_hr:
                max_hr = stream_max
    return int(max_hr) if max_hr > 0 else None


def get_effective_settings(
    runs: Iterable[Run] = (),
    boundaries: dict | None = None,
    hr_max: float | None = None,
    ftp: float | None = None,
    weight_kg: float | None = None,
    resting_hr: int | None = None,
) -> EffectiveSettings:
    """Resolve settings (user values take precedence over estimates).

    Max HR falls back to the highest recorded HR, then to DEFAULT_HR_MAX.

    Raises:
        ValidationError: if the resulting zone configuration is invalid
    """
    notes = []
    estimated = estimate_max_hr(runs)

    if hr_max is not None:
        effective_hr_max = hr_max
    elif estimated is not None:
        effective_hr_max = estimated
        notes.append(f"Max HR estimated from activities: {estimated} bpm")
    else:
        effective_hr_max = DEFAULT_HR_MAX
        notes.append(f"Max HR defaulted to {DEFAULT_HR_MAX} bpm")

    bounds = {**DEFAULT_ZONE_BOUNDARIES, **(boundaries or {})}
    zones = ZoneConfig(
        z2=bounds["z2"],
        z3=bounds["z3"],
        z4=bounds["z4"],
        z5=bounds["z5"],
        hr_max=effective_hr_max,
    )

    profile = RiderProfile(
        ftp=ftp,
        weight_kg=weight_kg,
        resting_hr=resting_hr if resting_hr is not None else DEFAULT_RESTING_HR,
        max_hr=effective_hr_max,
    )

    return EffectiveSettings(
        zones=zones,
        profile=profile,
        has_user_hr_max=hr_max is not None,
        estimated_hr_max=estimated,
        notes=notes,
    )
