from datetime import datetime, timedelta

import pytest

from metrics.compute import compute_activity_metrics, run_full_computation
from metrics.exceptions import ValidationError
from metrics.profile import RiderProfile, ZoneConfig, get_effective_settings

from conftest import hr_records, make_run


def test_activity_metrics_prefers_power_tss():
    run = make_run(
        power_stream=tuple([250] * 60),
        moving_time=3600,
        avg_hr=150,
    )
    metrics = compute_activity_metrics(run, RiderProfile(ftp=250, max_hr=190))
    assert metrics["tss"] == 100
    assert "hrTSS" not in metrics


def test_activity_metrics_falls_back_to_hr_tss():
    run = make_run(moving_time=3600, avg_hr=150)
    metrics = compute_activity_metrics(run, RiderProfile(max_hr=190))
    assert metrics == {"hrTSS": 51}


def test_activity_metrics_empty_without_inputs():
    assert compute_activity_metrics(make_run(), RiderProfile()) == {}


def test_run_full_computation(zone_config, reference_date):
    runs = [
        make_run("a", reference_date - timedelta(days=1), 10.0, filename="a.fit",
                 moving_time=3000, avg_hr=150),
        make_run("b", reference_date - timedelta(days=8), 8.0),
        make_run("c", datetime(2024, 1, 1), 30.0),
    ]
    records = {"a.fit": hr_records(120, 160)}

    result = run_full_computation(runs, zone_config, RiderProfile(max_hr=200), records, reference_date)

    assert result["reference_date"] == reference_date.isoformat()
    assert result["weekly_distances"] == {"2025-W10": 8.0, "2025-W11": 10.0}
    assert result["average_weekly"] == 9.0
    assert result["zones"]["has_data"]
    assert result["zones"]["zones"][0]["distance"] == pytest.approx(5.0)
    assert result["summary"]["total_runs"] == 3
    assert set(result["traffic_lights"]) == {
        "recovery", "intensity", "volume", "long_runs", "race_efforts",
    }
    assert result["classifications"]["a"]["category"] == "Z2"
    assert result["classifications"]["a"]["data_type"] == "detailed"
    assert result["classifications"]["b"]["data_type"] == "none"
    assert "hrTSS" in result["activities"]["a"]
    assert result["activities"]["b"] == {}
    assert result["errors"] == []


def test_run_full_computation_without_runs(zone_config, reference_date):
    result = run_full_computation([], zone_config, RiderProfile(), {}, reference_date)
    assert "average_weekly" not in result
    assert result["weekly_distances"] == {}
    assert not result["zones"]["has_data"]


def test_effective_settings_user_values_take_precedence():
    runs = [make_run(max_hr=185)]

    estimated = get_effective_settings(runs)
    assert estimated.zones.hr_max == 185
    assert not estimated.has_user_hr_max

    user = get_effective_settings(runs, hr_max=195, boundaries={"z2": 0.7})
    assert user.zones.hr_max == 195
    assert user.zones.z2 == 0.7
    assert user.has_user_hr_max


def test_effective_settings_keep_fractional_max_hr():
    settings = get_effective_settings(hr_max=185.7)
    assert settings.profile.max_hr == 185.7
    assert settings.zones.hr_max == 185.7


def test_effective_settings_defaults_without_data():
    settings = get_effective_settings()
    assert settings.zones == ZoneConfig()
    assert settings.profile.resting_hr == 50


def test_effective_settings_rejects_invalid_boundaries():
    with pytest.raises(ValidationError):
        get_effective_settings(boundaries={"z2": 0.9, "z3": 0.8})
