from datetime import datetime, timedelta

import pytest

from metrics.aggregations import (
    average_weekly,
    get_week_start,
    iso_week_key,
    summarize_runs,
    weekly_distances,
    weekly_zone_distances,
    window_start,
)

from conftest import hr_records, make_run


@pytest.mark.parametrize(
    "date, expected",
    [
        (datetime(2024, 12, 31), "2025-W01"),
        (datetime(2025, 1, 1), "2025-W01"),
        (datetime(2021, 1, 1), "2020-W53"),
        (datetime(2025, 3, 10), "2025-W11"),
    ],
)
def test_iso_week_key_year_boundaries(date, expected):
    assert iso_week_key(date) == expected


def test_get_week_start_is_monday():
    assert get_week_start(datetime(2025, 3, 15, 18, 30)) == datetime(2025, 3, 10)


def test_window_start_clamps_month_end():
    assert window_start(datetime(2024, 8, 31), 6) == datetime(2024, 2, 29)


def test_weekly_distances_groups_by_iso_week(reference_date):
    runs = [
        make_run("a", datetime(2025, 3, 10), 5.0),
        make_run("b", datetime(2025, 3, 12), 7.5),
        make_run("c", datetime(2025, 3, 3), 10.0),
        make_run("old", datetime(2024, 8, 1), 42.0),
    ]

    weekly = weekly_distances(runs, reference_date)

    assert weekly == {"2025-W10": 10.0, "2025-W11": 12.5}
    assert list(weekly) == sorted(weekly)


def test_average_weekly_ignores_empty_weeks(reference_date):
    runs = [
        make_run("a", datetime(2025, 1, 6), 10.0),
        make_run("b", datetime(2025, 3, 10), 20.0),
    ]
    assert average_weekly(runs, reference_date) == 15.0


def test_average_weekly_none_without_runs(reference_date):
    assert average_weekly([], reference_date) is None
    assert average_weekly([make_run("old", datetime(2020, 1, 1))], reference_date) is None


def test_summarize_runs(reference_date):
    runs = [
        make_run("a", reference_date - timedelta(days=1), 8.0, avg_hr=140, max_hr=170),
        make_run("b", reference_date - timedelta(days=2), 6.0, hr_stream=((0, 140),)),
        make_run("c", reference_date - timedelta(days=20), 12.0),
    ]

    summary = summarize_runs(runs, reference_date)

    assert summary["total_runs"] == 3
    assert summary["last_7_days"] == {"runs": 2, "distance": 14.0}
    assert summary["last_28_days"] == {"runs": 3, "distance": 26.0}
    assert summary["last_6_months"]["avg_weekly"] == pytest.approx(13.0)
    assert summary["runs_with_basic_hr"] == 1
    assert summary["runs_with_stream_hr"] == 1
    assert summary["consecutive_run_days"] == 2


def test_summarize_runs_without_runs(reference_date):
    summary = summarize_runs([], reference_date)
    assert summary["total_runs"] == 0
    assert "avg_weekly" not in summary["last_6_months"]
    assert summary["consecutive_run_days"] == 0


def test_weekly_zone_distances(zone_config, reference_date):
    runs = [
        make_run("detail", datetime(2025, 3, 10), 10.0, filename="a.fit"),
        make_run("avg", datetime(2025, 3, 11), 4.0, avg_hr=175),
        make_run("none", datetime(2025, 3, 12), 3.0),
    ]
    # Two samples in Z1, two in Z2
    records = {"a.fit": hr_records(120, 130, 155, 160)}

    weeks = weekly_zone_distances(runs, zone_config, records, reference_date)

    assert len(weeks) == 1
    week = weeks[0]
    assert week["week"] == "2025-W11"
    assert week["week_start"] == "2025-03-10"
    assert week["total"] == 17.0
    assert week["z1"] == pytest.approx(5.0)
    assert week["z2"] == pytest.approx(5.0)
    assert week["z3"] == 4.0
    assert week["no_hr"] == 3.0
