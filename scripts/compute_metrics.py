"""Compute training metrics for a set of runs.

Usage:
    python -m scripts.compute_metrics runs.json
    python -m scripts.compute_metrics runs.json --records records.json
    python -m scripts.compute_metrics runs.json --ftp 250 --weight 70
    python -m scripts.compute_metrics runs.json --zones 0.7 0.8 0.88 0.94 --hr-max 188
    python -m scripts.compute_metrics runs.json --output metrics.json --quiet
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from ingest.normalize import normalize_runs, parse_date
from metrics.compute import run_full_computation
from metrics.exceptions import ValidationError
from metrics.profile import get_effective_settings
from metrics.store import RunStore


def load_json(path: Path):
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def print_summary(result: dict, effective) -> None:
    summary = result["summary"]

    print()
    print("=" * 50)
    print("Computation Summary")
    print("=" * 50)
    print(f"Runs: {summary['total_runs']}")
    for days in (7, 28):
        window = summary[f"last_{days}_days"]
        print(f"Last {days} days: {window['runs']} runs, {window['distance']:.1f} km")
    if "average_weekly" in result:
        print(f"Average weekly distance (6 months): {result['average_weekly']:.1f} km")
    print(f"Activities with metrics: {len(result['activities'])}")

    if result["errors"]:
        print(f"Errors: {len(result['errors'])}")
        for error in result["errors"][:5]:
            print(f"  - {error}")
        if len(result["errors"]) > 5:
            print(f"  ... and {len(result['errors']) - 5} more")

    # Show effective profile values
    print()
    print("Profile Values:")
    print(f"  Max HR: {effective.zones.hr_max:g} {'(estimated)' if not effective.has_user_hr_max else ''}")
    print(f"  FTP: {effective.profile.ftp if effective.profile.ftp else 'not set'}")
    for note in effective.notes:
        print(f"  {note}")

    # Show zone distribution
    zones = result["zones"]
    print()
    if zones["has_data"]:
        print(f"HR Zones (last 28 days, {zones['runs_with_detail']} runs with detail):")
        for zone in zones["zones"]:
            print(f"  {zone['label']:<32} {zone['percent']:5.1f}%  {zone['distance']:6.1f} km")
        if "polarization_ratio" in zones:
            print(f"  Polarization ratio: {zones['polarization_ratio']:.2f}")
    else:
        print("HR Zones: no detailed HR data in the last 28 days")

    # Show traffic lights
    print()
    print("Training Load:")
    for light in result["traffic_lights"].values():
        print(f"  [{light['status'].upper()}] {light['metric']}: {light['message']}")


def main():
    parser = argparse.ArgumentParser(
        description="Compute training metrics (weekly volume, HR zones, NP/IF/TSS, hrTSS)"
    )
    parser.add_argument("runs", type=Path, help="JSON file with a list of runs")
    parser.add_argument(
        "--records",
        type=Path,
        help="JSON file mapping filename -> list of detailed records",
    )
    parser.add_argument("--source", default="file", help="Source tag for the runs")
    parser.add_argument("--ftp", type=float, help="Functional threshold power (W)")
    parser.add_argument("--weight", type=float, help="Body weight (kg)")
    parser.add_argument("--hr-max", type=float, help="Max heart rate (default: estimated)")
    parser.add_argument("--resting-hr", type=int, help="Resting heart rate")
    parser.add_argument(
        "--zones",
        type=float,
        nargs=4,
        metavar=("Z2", "Z3", "Z4", "Z5"),
        help="Zone boundaries as fractions of max HR",
    )
    parser.add_argument(
        "--reference-date",
        help="End of all windows (default: now)",
    )
    parser.add_argument("--output", type=Path, help="Write the full result as JSON")
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    raw = load_json(args.runs)
    if isinstance(raw, dict):
        raw = raw.get("runs", [])

    store = RunStore()
    store.add(normalize_runs(raw, source=args.source), source=args.source)

    records = load_json(args.records) if args.records else {}

    reference_date = None
    if args.reference_date:
        reference_date = parse_date(args.reference_date)
        if reference_date is None:
            parser.error(f"Invalid reference date: {args.reference_date}")

    boundaries = None
    if args.zones:
        boundaries = dict(zip(("z2", "z3", "z4", "z5"), args.zones))

    try:
        effective = get_effective_settings(
            store.runs,
            boundaries=boundaries,
            hr_max=args.hr_max,
            ftp=args.ftp,
            weight_kg=args.weight,
            resting_hr=args.resting_hr,
        )
    except ValidationError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if not args.quiet:
        print(f"Loaded {len(store)} runs from {args.runs}")
        if records:
            print(f"Loaded detailed records for {len(records)} files")

    result = run_full_computation(
        store.runs,
        effective.zones,
        effective.profile,
        records,
        reference_date,
    )

    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            json.dump(result, f, indent=2)
        if not args.quiet:
            print(f"Wrote {args.output}")

    if not args.quiet:
        print_summary(result, effective)


if __name__ == "__main__":
    main()
