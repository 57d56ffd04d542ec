import pytest

from metrics.tss import compute_run_hr_tss, hr_reserve_fraction, hr_tss

from conftest import make_run


def test_hr_tss_one_hour():
    # HRr = (150 - 50) / (190 - 50) = 0.714; 0.714^2 * 100 = 51.02
    assert hr_tss(3600, 150, 190, 50) == 51


@pytest.mark.parametrize(
    "args",
    [
        (None, 150, 190, 50),
        (3600, None, 190, 50),
        (3600, 150, None, 50),
        (3600, 150, 50, 50),  # no heart rate reserve
    ],
)
def test_hr_tss_absent(args):
    assert hr_tss(*args) is None


def test_hr_reserve_fraction_clamped():
    assert hr_reserve_fraction(40, 190, 50) == 0.0
    assert hr_reserve_fraction(200, 190, 50) == 1.0


def test_compute_run_hr_tss_prefers_profile_max_hr():
    run = make_run(moving_time=3600, avg_hr=150, max_hr=170)
    assert compute_run_hr_tss(run, 190, 50) == 51
    # Falls back to the run's own max HR: (100 / 120)^2 * 100 = 69.4
    assert compute_run_hr_tss(run, None, 50) == 69
