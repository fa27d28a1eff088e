import numpy as np
import pandas as pd
import pytest

from hostcaplogic.series import NetLoadSeries, SolarPerUnitSeries

TZ = "America/New_York"
HOUR_MS = 3_600_000

# Net load (MW) for seven consecutive hours; thermal limit -10 MW
SCENARIO_LOAD = [-5.0, -8.0, -12.0, -9.0, -3.0, 2.0, 5.0]


@pytest.fixture
def t0():
    return pd.Timestamp("2023-05-18 09:00", tz=TZ)


@pytest.fixture
def t0_ms(t0):
    return int(t0.value // 1_000_000)


@pytest.fixture
def seven_hours(t0):
    return pd.date_range(t0, periods=len(SCENARIO_LOAD), freq="h")


@pytest.fixture
def scenario_load(seven_hours):
    return NetLoadSeries.from_arrays(seven_hours, SCENARIO_LOAD, tz=TZ)


@pytest.fixture
def scenario_solar(seven_hours):
    """Per-unit output of 1.0 at every load hour."""
    return SolarPerUnitSeries.from_arrays(seven_hours, [1.0] * len(seven_hours), tz=TZ)


@pytest.fixture
def year_rng():
    return pd.date_range("2023-01-01", periods=8760, freq="h", tz=TZ)


@pytest.fixture
def year_solar(year_rng):
    """Bell-shaped daylight output, stronger in summer."""
    hours = year_rng.hour.to_numpy(dtype=float)
    doy = year_rng.dayofyear.to_numpy(dtype=float)
    shape = np.clip(np.sin((hours - 6.0) / 12.0 * np.pi), 0.0, None)
    shape[(hours < 6) | (hours > 18)] = 0.0
    season = 0.75 + 0.25 * np.sin((doy - 80.0) / 365.0 * 2 * np.pi)
    return SolarPerUnitSeries.from_arrays(year_rng, shape * season, tz=TZ)


@pytest.fixture
def year_load(year_rng, year_solar):
    """Net load that dips into export around midday as local PV ramps up."""
    doy = year_rng.dayofyear.to_numpy(dtype=float)
    base = 4.0 + 3.0 * np.cos((doy - 15.0) / 365.0 * 2 * np.pi)
    return NetLoadSeries.from_arrays(
        year_rng, base - 12.0 * np.asarray(year_solar.values), tz=TZ
    )
