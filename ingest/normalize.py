"""Normalization of raw activity records into Run values."""
import logging
import re
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping

from dateutil import parser as dateparser

from metrics.config import HR_SAMPLE_RANGE, PACE_SAMPLE_RANGE
from metrics.models import Run, as_naive_utc, parse_float

logger = logging.getLogger(__name__)


def normalize_header(header: str) -> str:
    """
    Convert header to snake_case.

    Examples:
        'Activity ID' -> 'activity_id'
        'Max Heart Rate' -> 'max_heart_rate'
        'movingTime' -> 'moving_time'
        'avgHR' -> 'avg_hr'
    """
    header = header.strip()

    # Split camelCase before lowercasing
    header = re.sub(r"(?<=[a-z0-9])([A-Z])", r"_\1", header)

    header = re.sub(r"[\s\-/]+", "_", header)
    header = header.lower()
    header = re.sub(r"_+", "_", header)
    header = header.strip("_")

    return header


def parse_date(value: Any) -> datetime | None:
    """
    Parse a date value robustly.

    Handles datetimes, unix timestamps and strings such as:
        - 'Mar 31, 2020, 9:26:15 PM'
        - '2020-03-31T21:26:15Z'
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        return as_naive_utc(value)

    if isinstance(value, (int, float)):
        if value > 1e9:  # Reasonable timestamp range
            return datetime.fromtimestamp(value, tz=timezone.utc).replace(tzinfo=None)
        return None

    value = str(value).strip()
    if not value:
        return None

    try:
        ts = float(value)
        if ts > 1e9:
            return datetime.fromtimestamp(ts, tz=timezone.utc).replace(tzinfo=None)
    except ValueError:
        pass

    try:
        return as_naive_utc(dateparser.parse(value))
    except (ValueError, TypeError, OverflowError):
        return None


def velocity_to_pace(velocity_mps: Any) -> float:
    """Convert m/s to min/km; zero or missing velocity maps to 0."""
    velocity_mps = parse_float(velocity_mps)
    if not velocity_mps or velocity_mps <= 0:
        return 0.0
    return 1000 / (velocity_mps * 60)


# Mapping from normalized keys to Run fields
FIELD_MAPPING = {
    "id": "id",
    "activity_id": "id",
    "date": "date",
    "start_date": "date",
    "start_time": "date",
    "activity_date": "date",
    "distance": "distance",
    "duration": "duration",
    "moving_time": "moving_time",
    "avg_hr": "avg_hr",
    "average_heartrate": "avg_hr",
    "average_heart_rate": "avg_hr",
    "max_hr": "max_hr",
    "max_heartrate": "max_hr",
    "max_heart_rate": "max_hr",
    "avg_power": "avg_power",
    "average_watts": "avg_power",
    "avg_watts": "avg_power",
    "max_power": "max_power",
    "max_watts": "max_power",
    "hr_stream": "hr_stream",
    "pace_stream": "pace_stream",
    "power_stream": "power_stream",
    "filename": "filename",
    "source": "source",
}

FLOAT_FIELDS = {
    "distance", "duration", "moving_time", "avg_hr", "max_hr", "avg_power", "max_power",
}


def _as_list(value: Any) -> list:
    """Sample arrays arrive as JSON lists; anything else counts as empty."""
    if isinstance(value, (list, tuple)):
        return list(value)
    return []


def _sample_pairs(raw: list) -> Iterable[tuple[Any, Any]]:
    """(time, value) pairs from a list of pairs, or from a flat list at 1 Hz."""
    for i, sample in enumerate(raw):
        if isinstance(sample, (list, tuple)):
            if len(sample) == 2:
                yield sample[0], sample[1]
            else:
                yield None, None
        else:
            yield i, sample


def _filter_samples(
    pairs: Iterable[tuple[Any, Any]],
    bounds: tuple[float, float],
    kind: str,
) -> tuple[tuple[float, float], ...] | None:
    """Keep numeric samples strictly inside bounds.

    Out-of-range values are expected (sensor dropouts) and dropped silently;
    malformed samples are dropped with a warning.
    """
    low, high = bounds
    stream = []
    malformed = 0

    for t, value in pairs:
        t = parse_float(t)
        value = parse_float(value)
        if t is None or value is None:
            malformed += 1
            continue
        if low < value < high:
            stream.append((t, value))

    if malformed:
        logger.warning("Dropped %d malformed %s samples", malformed, kind)
    return tuple(stream) or None


def normalize_hr_stream(raw: Any) -> tuple[tuple[float, float], ...] | None:
    """Normalize an HR stream to (time, heartrate) pairs.

    Accepts {"heartrate": [...], "time": [...]}, {"records": [{"heart_rate"}]}
    (sample index used as time), a list of pairs or a flat list of samples
    at 1 Hz. Implausible samples are dropped together with their timestamps.
    """
    if not raw:
        return None

    if isinstance(raw, Mapping):
        if "heartrate" in raw:
            heart_rates = _as_list(raw.get("heartrate"))
            times = _as_list(raw.get("time")) or list(range(len(heart_rates)))
            pairs = zip(times, heart_rates)
        elif "records" in raw:
            pairs = (
                (i, r.get("heart_rate"))
                for i, r in enumerate(_as_list(raw.get("records")))
                if isinstance(r, Mapping) and r.get("heart_rate") is not None
            )
        else:
            return None
    elif isinstance(raw, (list, tuple)):
        pairs = _sample_pairs(raw)
    else:
        logger.warning("Ignoring HR stream of type %s", type(raw).__name__)
        return None

    return _filter_samples(pairs, HR_SAMPLE_RANGE, "heart rate")


def normalize_pace_stream(raw: Any) -> tuple[tuple[float, float], ...] | None:
    """Normalize a pace stream to (time, min/km) pairs, dropping unrealistic values."""
    if not raw:
        return None

    if isinstance(raw, Mapping):
        if "pace" not in raw:
            return None
        paces = _as_list(raw.get("pace"))
        times = _as_list(raw.get("time")) or list(range(len(paces)))
        pairs = zip(times, paces)
    elif isinstance(raw, (list, tuple)):
        pairs = _sample_pairs(raw)
    else:
        logger.warning("Ignoring pace stream of type %s", type(raw).__name__)
        return None

    return _filter_samples(pairs, PACE_SAMPLE_RANGE, "pace")


def normalize_power_stream(raw: Any) -> tuple[float, ...] | None:
    if not raw:
        return None
    if isinstance(raw, Mapping):
        raw = raw.get("watts")
    if not isinstance(raw, (list, tuple)):
        return None

    # Gaps (None) are dropped, as are non-numeric samples
    stream = tuple(w for w in (parse_float(v) for v in raw) if w is not None)
    return stream or None


def normalize_run(raw: Mapping[str, Any], source: str | None = None) -> Run | None:
    """Convert one raw record (CSV row, stored run, API payload) into a Run.

    Keys are matched after snake_case normalization, so 'Activity ID',
    'activity_id' and 'id' all land on Run.id.

    Returns:
        Run, or None if the record has no id or no parseable date
    """
    fields: dict[str, Any] = {}

    for key, value in raw.items():
        normalized = normalize_header(str(key))
        field_name = FIELD_MAPPING.get(normalized)
        if field_name is None or field_name in fields:
            continue
        if value is None or (isinstance(value, str) and value.strip() == ""):
            continue

        if field_name == "date":
            parsed = parse_date(value)
        elif field_name in FLOAT_FIELDS:
            parsed = parse_float(value)
        elif field_name == "hr_stream":
            parsed = normalize_hr_stream(value)
        elif field_name == "pace_stream":
            parsed = normalize_pace_stream(value)
        elif field_name == "power_stream":
            parsed = normalize_power_stream(value)
        else:
            parsed = str(value).strip()

        if parsed is not None:
            fields[field_name] = parsed

    if "id" not in fields:
        logger.warning("Skipping record without id: %s", list(raw)[:5])
        return None
    if "date" not in fields:
        logger.warning("Skipping record %s without a parseable date", fields["id"])
        return None

    if source is not None:
        fields["source"] = source

    # Zero and missing HR mean the same thing
    for hr_field in ("avg_hr", "max_hr"):
        if fields.get(hr_field) is not None and fields[hr_field] <= 0:
            del fields[hr_field]

    return Run(**fields)


def normalize_runs(raw_runs: Iterable[Mapping[str, Any]], source: str | None = None) -> list[Run]:
    """Normalize a batch, skipping invalid records."""
    runs = []
    for raw in raw_runs:
        if not isinstance(raw, Mapping):
            logger.warning("Skipping record of type %s", type(raw).__name__)
            continue
        run = normalize_run(raw, source)
        if run is not None:
            runs.append(run)
    return runs


def _stream_data(streams: Mapping[str, Any], key: str) -> list:
    """The data array of one key_by_type stream, empty if absent or malformed."""
    stream = streams.get(key)
    if not isinstance(stream, Mapping):
        return []
    return _as_list(stream.get("data"))


def normalize_strava_activity(
    activity: Mapping[str, Any],
    streams: Mapping[str, Any] | None = None,
    source: str = "Strava API",
) -> Run | None:
    """Convert a Strava API activity (and optional key_by_type streams) into a Run.

    Strava reports distance in meters and times in seconds.

    Args:
        activity: Activity summary/detail JSON
        streams: Streams JSON keyed by type (heartrate, time, velocity_smooth, watts)
        source: Provenance tag

    Returns:
        Run, or None if the activity has no id, start date or distance.
        Zero distance (indoor trainer, treadmill without a footpod) is kept.
    """
    distance_m = parse_float(activity.get("distance"))
    moving_time = parse_float(activity.get("moving_time"))
    start = parse_date(activity.get("start_date"))

    if activity.get("id") is None or start is None or distance_m is None or distance_m < 0:
        logger.warning("Skipping Strava activity %s: incomplete summary", activity.get("id"))
        return None

    hr_stream = None
    pace_stream = None
    power_stream = None

    if isinstance(streams, Mapping):
        times = _stream_data(streams, "time")
        heart_rates = _stream_data(streams, "heartrate")
        velocities = _stream_data(streams, "velocity_smooth")
        watts = _stream_data(streams, "watts")

        if heart_rates:
            hr_stream = normalize_hr_stream({"heartrate": heart_rates, "time": times})
        if velocities:
            pace_stream = normalize_pace_stream(
                {"pace": [velocity_to_pace(v) for v in velocities], "time": times}
            )
        if watts:
            power_stream = normalize_power_stream(watts)

    avg_hr = parse_float(activity.get("average_heartrate"))
    max_hr = parse_float(activity.get("max_heartrate"))

    return Run(
        id=str(activity["id"]),
        date=start,
        distance=distance_m / 1000,
        duration=(moving_time or 0) / 60,
        moving_time=moving_time,
        avg_hr=avg_hr or None,
        max_hr=max_hr or None,
        avg_power=parse_float(activity.get("average_watts")),
        max_power=parse_float(activity.get("max_watts")),
        hr_stream=hr_stream,
        pace_stream=pace_stream,
        power_stream=power_stream,
        source=source,
    )
