from datetime import datetime

import pytest

from metrics.models import Run
from metrics.profile import ZoneConfig

REFERENCE = datetime(2025, 3, 15, 12, 0)


def make_run(run_id="r1", date=REFERENCE, distance=10.0, **kwargs) -> Run:
    return Run(id=run_id, date=date, distance=distance, **kwargs)


def hr_records(*heart_rates):
    return [{"heart_rate": hr, "timestamp": i} for i, hr in enumerate(heart_rates)]


@pytest.fixture
def reference_date():
    return REFERENCE


@pytest.fixture
def zone_config():
    # Defaults: 75/85/90/95% of 200 bpm -> 150/170/180/190 bpm
    return ZoneConfig(hr_max=200)
