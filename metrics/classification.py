"""Session classification (easy, intensity, race, mixed) from HR or power."""

from dataclasses import dataclass

from metrics.config import (
    CATEGORY_EASY,
    CATEGORY_INTENSITY,
    CATEGORY_MIXED,
    CATEGORY_RACE,
    EASY_MAX_ABOVE_Z4_PCT,
    EASY_MIN_PCT,
    INTENSITY_MIN_PCT,
    LONG_RIDE_MIN_KM,
    LONG_RUN_FRACTION,
    LONG_RUN_MIN_KM,
    POWER_ZONE_BOUNDARIES,
    RACE_MIN_PCT,
    TENDENCY_MIN_PCT,
    ZONE_COUNT,
)
from metrics.models import Run
from metrics.profile import ZoneConfig
from metrics.zones import RecordProvider, heart_rates_from_records, zone_fractions, zone_index


@dataclass(frozen=True)
class Classification:
    """Effort category of one session.

    data_type is 'detailed' (per-sample zones), 'basic' (average/max only)
    or 'none'; basis says whether HR or power decided the category.
    """

    category: str
    tendency: str | None = None
    is_long: bool = False
    data_type: str = "none"
    basis: str = "hr"
    zone_percentages: tuple[float, ...] | None = None

    @property
    def label(self) -> str:
        if self.tendency:
            return f"{self.category} (→ {self.tendency})"
        return self.category

    @property
    def is_hard(self) -> bool:
        return self.category in (CATEGORY_INTENSITY, CATEGORY_RACE)

    @property
    def is_easy(self) -> bool:
        return self.category == CATEGORY_EASY

    def to_dict(self) -> dict:
        result = {
            "category": self.category,
            "label": self.label,
            "tendency": self.tendency,
            "is_long": self.is_long,
            "data_type": self.data_type,
            "basis": self.basis,
        }
        if self.zone_percentages is not None:
            result["zone_percentages"] = list(self.zone_percentages)
        return result


def power_zone_index(watts: float, ftp: float) -> int:
    """0-based power zone (0 = Z1 .. 5 = Z6) from the fraction of FTP."""
    fraction = watts / ftp
    for i, upper in enumerate(POWER_ZONE_BOUNDARIES):
        if fraction < upper:
            return i
    return ZONE_COUNT - 1


def category_from_percentages(percentages) -> tuple[str, str | None]:
    """Category and tendency from per-zone time percentages (Z1..Z6).

    Easy needs 75% in Z1+Z2 with at most 5% in Z5+Z6; race needs 80% in
    Z5+Z6; intensity needs 80% in Z3-Z5. Anything else is mixed, with the
    dominant share named as tendency when it exceeds 30%.
    """
    p = list(percentages)
    easy = p[0] + p[1]
    above_z4 = p[4] + p[5]
    z3_to_z5 = p[2] + p[3] + p[4]

    if easy >= EASY_MIN_PCT and above_z4 <= EASY_MAX_ABOVE_Z4_PCT:
        return CATEGORY_EASY, None
    if above_z4 >= RACE_MIN_PCT:
        return CATEGORY_RACE, None
    if z3_to_z5 >= INTENSITY_MIN_PCT:
        return CATEGORY_INTENSITY, None

    # First entry wins ties
    tendencies = [("Z2", easy), ("Intensity", z3_to_z5), ("Race", above_z4)]
    name, share = max(tendencies, key=lambda t: t[1])
    return CATEGORY_MIXED, name if share > TENDENCY_MIN_PCT else None


def category_from_zones(avg_zone: int, max_zone: int) -> str:
    """Category from the 0-based zones of the average and peak values."""
    if avg_zone <= 1 and max_zone <= 3:
        return CATEGORY_EASY
    if avg_zone >= 4:
        return CATEGORY_RACE
    if avg_zone in (2, 3):
        return CATEGORY_INTENSITY
    return CATEGORY_MIXED


def session_heart_rates(run: Run, records: RecordProvider | None = None) -> list[float]:
    """Per-sample HR: detailed records first, then the run's own HR stream."""
    heart_rates = []
    if records is not None and run.filename is not None:
        heart_rates = heart_rates_from_records(records.get(run.filename))
    if not heart_rates and run.hr_stream:
        heart_rates = [hr for _, hr in run.hr_stream]
    return heart_rates


def _is_long(run: Run, avg_weekly: float | None, min_km: float) -> bool:
    if avg_weekly is None:
        return False
    return run.distance > LONG_RUN_FRACTION * avg_weekly and run.distance > min_km


def _classify_by_hr(
    run: Run,
    zone_config: ZoneConfig,
    is_long: bool,
    records: RecordProvider | None,
) -> Classification:
    fractions = zone_fractions(session_heart_rates(run, records), zone_config)
    if fractions is not None:
        percentages = tuple(f * 100 for f in fractions)
        category, tendency = category_from_percentages(percentages)
        return Classification(category, tendency, is_long, "detailed", "hr", percentages)

    if run.has_basic_hr:
        category = category_from_zones(
            zone_index(run.avg_hr, zone_config),
            zone_index(run.max_hr, zone_config),
        )
        return Classification(category, None, is_long, "basic", "hr")

    return Classification(CATEGORY_MIXED, None, is_long, "none", "hr")


def classify_run(
    run: Run,
    zone_config: ZoneConfig,
    avg_weekly: float | None = None,
    records: RecordProvider | None = None,
) -> Classification:
    """Classify a run from detailed HR, falling back to average/max HR.

    A run is long when it covers more than half the average weekly distance
    and more than 10 km.
    """
    return _classify_by_hr(run, zone_config, _is_long(run, avg_weekly, LONG_RUN_MIN_KM), records)


def classify_ride(
    ride: Run,
    zone_config: ZoneConfig,
    ftp: float | None,
    avg_weekly: float | None = None,
    records: RecordProvider | None = None,
) -> Classification:
    """Classify a ride from power zones relative to FTP.

    Without an FTP, or without usable power data, the ride is classified by
    heart rate like a run. Long rides must exceed 30 km.
    """
    is_long = _is_long(ride, avg_weekly, LONG_RIDE_MIN_KM)

    if ftp is not None and ftp > 0:
        watts = [w for w in ride.power_stream or () if w is not None and w >= 0]
        if watts:
            counts = [0] * ZONE_COUNT
            for w in watts:
                counts[power_zone_index(w, ftp)] += 1
            percentages = tuple(c / len(watts) * 100 for c in counts)
            category, tendency = category_from_percentages(percentages)
            return Classification(category, tendency, is_long, "detailed", "power", percentages)

        if ride.avg_power and ride.avg_power > 0 and ride.max_power and ride.max_power > 0:
            category = category_from_zones(
                power_zone_index(ride.avg_power, ftp),
                power_zone_index(ride.max_power, ftp),
            )
            return Classification(category, None, is_long, "basic", "power")

    return _classify_by_hr(ride, zone_config, is_long, records)


def classify_activity(
    run: Run,
    zone_config: ZoneConfig,
    ftp: float | None = None,
    avg_weekly: float | None = None,
    records: RecordProvider | None = None,
) -> Classification:
    """Rides (anything with power data) by power, everything else by HR."""
    if run.power_stream or run.avg_power:
        return classify_ride(run, zone_config, ftp, avg_weekly, records)
    return classify_run(run, zone_config, avg_weekly, records)
