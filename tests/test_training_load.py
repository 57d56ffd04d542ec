from datetime import timedelta

from metrics.classification import Classification
from metrics.config import (
    CATEGORY_EASY,
    CATEGORY_INTENSITY,
    CATEGORY_MIXED,
    CATEGORY_RACE,
)
from metrics.training_load import (
    analyze_intensity_distribution,
    analyze_long_runs,
    analyze_race_efforts,
    analyze_recovery,
    analyze_training_load,
    analyze_volume,
)

from conftest import make_run


def _days_ago(reference_date, days, run_id, distance):
    return make_run(run_id, reference_date - timedelta(days=days), distance)


def test_volume_consistent(reference_date):
    runs = [
        _days_ago(reference_date, 2, "a", 20.0),
        _days_ago(reference_date, 9, "b", 20.0),
    ]
    result = analyze_volume(runs, reference_date)
    assert result["status"] == "green"
    assert result["change_pct"] == 0.0


def test_volume_spike_is_red(reference_date):
    # 40 km this week vs (40 + 10) / 2 = 25 km average -> +60%
    runs = [
        _days_ago(reference_date, 2, "a", 40.0),
        _days_ago(reference_date, 10, "b", 10.0),
    ]
    result = analyze_volume(runs, reference_date)
    assert result["status"] == "red"
    assert result["change_pct"] == 60.0


def test_volume_drop_is_yellow(reference_date):
    runs = [
        _days_ago(reference_date, 2, "a", 5.0),
        _days_ago(reference_date, 10, "b", 45.0),
    ]
    assert analyze_volume(runs, reference_date)["status"] == "yellow"


def test_volume_without_recent_runs(reference_date):
    result = analyze_volume([_days_ago(reference_date, 10, "a", 10.0)], reference_date)
    assert result["status"] == "yellow"
    assert result["distance_7d"] == 0


def test_long_runs_green(reference_date):
    runs = [_days_ago(reference_date, 5, "long", 18.0), _days_ago(reference_date, 3, "a", 6.0)]
    result = analyze_long_runs(runs, reference_date, avg_weekly=30.0)
    assert result["status"] == "green"
    assert result["long_runs"] == 1
    assert result["days_since_long_run"] == 5


def test_long_runs_none(reference_date):
    runs = [_days_ago(reference_date, 3, "a", 6.0)]
    assert analyze_long_runs(runs, reference_date, avg_weekly=30.0)["status"] == "yellow"
    assert analyze_long_runs(runs, reference_date, avg_weekly=None)["long_runs"] == 0


def test_long_runs_too_frequent(reference_date):
    runs = [_days_ago(reference_date, d, f"r{d}", 20.0) for d in (2, 8, 14, 20)]
    result = analyze_long_runs(runs, reference_date, avg_weekly=30.0)
    assert result["status"] == "yellow"
    assert result["long_runs"] == 4


def _sessions(reference_date, *entries):
    """(days ago, category) entries -> classified 8 km runs."""
    return [
        (_days_ago(reference_date, days, f"s{i}", 8.0), Classification(category))
        for i, (days, category) in enumerate(entries)
    ]


def test_recovery_too_many_hard_days(reference_date):
    classified = _sessions(
        reference_date,
        (1, CATEGORY_RACE), (2, CATEGORY_INTENSITY), (3, CATEGORY_INTENSITY), (5, CATEGORY_RACE),
    )
    result = analyze_recovery(classified, reference_date)
    assert result["status"] == "red"
    assert result["hard_7d"] == 4


def test_recovery_three_hard_few_easy(reference_date):
    classified = _sessions(
        reference_date,
        (1, CATEGORY_INTENSITY), (2, CATEGORY_EASY), (3, CATEGORY_INTENSITY), (4, CATEGORY_RACE),
    )
    assert analyze_recovery(classified, reference_date)["status"] == "yellow"


def test_recovery_busy_week_without_easy_days(reference_date):
    classified = _sessions(
        reference_date,
        (0, CATEGORY_EASY), (1, CATEGORY_EASY), (2, CATEGORY_INTENSITY),
        (3, CATEGORY_MIXED), (4, CATEGORY_MIXED), (5, CATEGORY_INTENSITY),
    )
    result = analyze_recovery(classified, reference_date)
    assert result["status"] == "yellow"
    assert result["runs_7d"] == 6


def test_recovery_balanced(reference_date):
    classified = _sessions(
        reference_date,
        (1, CATEGORY_EASY), (2, CATEGORY_EASY), (4, CATEGORY_INTENSITY), (5, CATEGORY_EASY),
        # Outside the week
        (9, CATEGORY_RACE), (10, CATEGORY_RACE),
    )
    result = analyze_recovery(classified, reference_date)
    assert result["status"] == "green"
    assert result["easy_7d"] == 3
    assert result["message"].startswith("Good recovery balance")


def test_recovery_without_recent_runs(reference_date):
    result = analyze_recovery(_sessions(reference_date, (10, CATEGORY_EASY)), reference_date)
    assert result["status"] == "yellow"
    assert "10 days ago" in result["message"]
    assert analyze_recovery([], reference_date)["status"] == "yellow"


def test_intensity_too_much_hard_running(reference_date):
    entries = [(d, CATEGORY_EASY) for d in (1, 3, 5, 7)]
    entries += [(d, CATEGORY_INTENSITY) for d in (2, 4, 6, 8, 10)]
    entries += [(12, CATEGORY_MIXED)]
    result = analyze_intensity_distribution(_sessions(reference_date, *entries), reference_date)
    assert result["status"] == "red"
    assert result["easy_pct"] == 40.0
    assert result["hard_pct"] == 50.0


def test_intensity_moderately_hard(reference_date):
    entries = [(d, CATEGORY_EASY) for d in (1, 3, 5, 7, 9)]
    entries += [(d, CATEGORY_RACE) for d in (2, 4, 6, 8)]
    entries += [(12, CATEGORY_MIXED)]
    result = analyze_intensity_distribution(_sessions(reference_date, *entries), reference_date)
    assert result["status"] == "yellow"


def test_intensity_polarized(reference_date):
    entries = [(d, CATEGORY_EASY) for d in range(1, 9)]
    entries += [(d, CATEGORY_INTENSITY) for d in (10, 20)]
    # Outside 28 days
    entries += [(40, CATEGORY_RACE)]
    result = analyze_intensity_distribution(_sessions(reference_date, *entries), reference_date)
    assert result["status"] == "green"
    assert result["runs_28d"] == 10
    assert result["easy_km"] == 64.0
    assert result["message"].startswith("Excellent polarization")


def test_intensity_without_runs(reference_date):
    result = analyze_intensity_distribution([], reference_date)
    assert result["status"] == "yellow"
    assert result["easy_pct"] == 0.0


def test_race_efforts_too_many_this_week(reference_date):
    classified = _sessions(reference_date, (1, CATEGORY_RACE), (3, CATEGORY_RACE), (5, CATEGORY_RACE))
    result = analyze_race_efforts(classified, reference_date)
    assert result["status"] == "red"
    assert result["race_7d"] == 3


def test_race_efforts_two_in_light_week(reference_date):
    classified = _sessions(
        reference_date, (1, CATEGORY_RACE), (3, CATEGORY_EASY), (5, CATEGORY_RACE),
    )
    assert analyze_race_efforts(classified, reference_date)["status"] == "yellow"


def test_race_efforts_crowded_fortnight(reference_date):
    classified = _sessions(reference_date, *[(d, CATEGORY_RACE) for d in (8, 9, 11, 13)])
    result = analyze_race_efforts(classified, reference_date)
    assert result["status"] == "yellow"
    assert result["race_7d"] == 0
    assert result["race_14d"] == 4


def test_race_efforts_green(reference_date):
    assert analyze_race_efforts(_sessions(reference_date, (2, CATEGORY_EASY)), reference_date)[
        "status"
    ] == "green"
    classified = _sessions(reference_date, (2, CATEGORY_RACE), (20, CATEGORY_RACE))
    result = analyze_race_efforts(classified, reference_date)
    assert result["status"] == "green"
    assert result["race_28d"] == 2


def test_race_efforts_too_many_this_month(reference_date):
    classified = _sessions(reference_date, *[(d, CATEGORY_RACE) for d in (2, 15, 20, 25, 27)])
    result = analyze_race_efforts(classified, reference_date)
    assert result["status"] == "yellow"
    assert result["race_28d"] == 5


def test_analyze_training_load(zone_config, reference_date):
    easy = tuple((float(i), 140.0) for i in range(10))
    race = tuple((float(i), 195.0) for i in range(10))
    runs = [
        make_run("a", reference_date - timedelta(days=1), 8.0, hr_stream=easy),
        make_run("b", reference_date - timedelta(days=3), 10.0, hr_stream=race),
        make_run("c", reference_date - timedelta(days=9), 8.0, hr_stream=easy),
    ]
    result = analyze_training_load(runs, zone_config, {}, reference_date)
    assert set(result) == {"recovery", "intensity", "volume", "long_runs", "race_efforts"}
    assert result["recovery"]["easy_7d"] == 1
    assert result["recovery"]["hard_7d"] == 1
    assert result["race_efforts"]["race_7d"] == 1
    assert result["intensity"]["runs_28d"] == 3
