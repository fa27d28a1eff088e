"""Static vs flexible scenario orchestration and the memoised study."""

import numpy as np
import pandas as pd
import pytest
from pydantic import ValidationError

from hostcaplogic import aggregate, scenario
from hostcaplogic.config import SimulationConfig, default_config
from hostcaplogic.exceptions import ConfigError
from hostcaplogic.series import NetLoadSeries, SolarPerUnitSeries
from hostcaplogic.types import MonthlyStat, PlantConfiguration

TZ = "America/New_York"


def test_run_worked_example(scenario_load, scenario_solar):
    plant = PlantConfiguration(plant_size_mw=3.0, thermal_limit_mw=-10.0)
    res = scenario.run(scenario_load, scenario_solar, plant)

    assert res.plant == plant
    assert res.capacity.tolist() == [5.0, 2.0, -2.0, 1.0, 7.0, 12.0, 15.0]
    assert res.static_capacity_mw == -2.0
    assert res.flexible["curtailed_mw"].sum() == pytest.approx(8.0)
    assert res.annual_curtailment_pct == pytest.approx(100 * 8 / 21)
    assert len(res.monthly) == 12
    assert len(res.reverse_flow) == 8
    assert res.summary["totals"]["production_mwh"] == pytest.approx(13.0)


def test_run_defaults_plant_from_config(scenario_load, scenario_solar):
    cfg = SimulationConfig(plant_size_mw=2.0, thermal_limit_mw=-12.0)
    res = scenario.run(scenario_load, scenario_solar, config=cfg)
    assert res.plant.plant_size_mw == 2.0
    assert res.plant.thermal_limit_mw == -12.0


def test_run_window_limits_display_only(year_load, year_solar):
    """Display series cover the window; annual figures cover the whole year."""
    plant = PlantConfiguration(plant_size_mw=15.0, thermal_limit_mw=-10.0)
    res = scenario.run(year_load, year_solar, plant, window=("2023-05-16", "2023-05-20"))
    assert len(res.flexible) == 5 * 24
    assert len(res.capacity) == 5 * 24
    assert len(res.static) == 5 * 24
    full = aggregate.monthly_stats(year_load, year_solar, plant)
    assert res.monthly == full


def test_study_memoises_by_configuration(year_load, year_solar):
    study = scenario.HostingStudy(year_load, year_solar)
    first = study.monthly_stats(15, -10)
    again = study.monthly_stats(15.0, -10.0)
    assert first == again
    info = study.cache_info()
    assert info.hits == 1 and info.misses == 1

    study.annual_curtailment_pct(15.0, -10.0)
    assert study.cache_info().hits == 2


def test_study_sweep_defaults(year_load, year_solar):
    study = scenario.HostingStudy(year_load, year_solar)
    points = study.sweep()
    assert [p.plant_size_mw for p in points][1:] == [10.0, 15.0]
    expected = aggregate.sweep(
        year_load, year_solar, [p.plant_size_mw for p in points], -10.0
    )
    for got, want in zip(points, expected):
        assert got.production_mwh == pytest.approx(want.production_mwh)
        assert got.curtailment_pct == pytest.approx(want.curtailment_pct)


def test_study_run_uses_display_window(year_load, year_solar):
    study = scenario.HostingStudy(year_load, year_solar)
    res = study.run(15.0, -10.0)
    assert res.window == ("2023-05-16", "2023-05-20")
    assert res.flexible.index[0] == pd.Timestamp("2023-05-16", tz="America/New_York")


def test_plant_configuration_validation():
    with pytest.raises(ValidationError):
        PlantConfiguration(plant_size_mw=-1.0, thermal_limit_mw=-10.0)
    plant = PlantConfiguration.from_planning_limit(15.0, 10.0)
    assert plant.thermal_limit_mw == -10.0
    with pytest.raises(ValidationError):
        plant.plant_size_mw = 3.0


def test_monthly_stat_validation():
    with pytest.raises(ValidationError):
        MonthlyStat(month=12, production_mwh=0.0, curtailment_mwh=0.0)
    with pytest.raises(ValidationError):
        MonthlyStat(month=0, production_mwh=0.0, curtailment_mwh=-1.0)


def test_config_validation():
    assert default_config().policy == "first"
    with pytest.raises(ConfigError):
        SimulationConfig(policy="closest")
    with pytest.raises(ConfigError):
        SimulationConfig(tolerance_ms=0)
    with pytest.raises(ConfigError):
        SimulationConfig(tz="Mars/Olympus_Mons")


def test_config_tz_sets_month_buckets():
    """
    Input: one sample at 2023-02-01 04:00 UTC (Jan 31 23:00 in New York).
    Expect: January under the default config, February with tz='UTC'.
    """
    ms = pd.Timestamp("2023-02-01 04:00", tz="UTC").value // 1_000_000
    load = NetLoadSeries(np.array([ms]), np.array([0.0]))
    solar = SolarPerUnitSeries(np.array([ms]), np.array([1.0]))

    local = scenario.HostingStudy(load, solar).monthly_stats(1.0, -10.0)
    assert local[0].production_mwh == 1.0
    assert local[1].production_mwh == 0.0

    utc = scenario.HostingStudy(load, solar, SimulationConfig(tz="UTC"))
    stats = utc.monthly_stats(1.0, -10.0)
    assert stats[0].production_mwh == 0.0
    assert stats[1].production_mwh == 1.0

    res = scenario.run(load, solar, config=SimulationConfig(tz="UTC", plant_size_mw=1.0))
    assert res.monthly[1].production_mwh == 1.0
    assert res.summary["meta"]["tz"] == "UTC"


def test_run_window_cuts_solar_to_load_span(year_load, year_solar):
    """
    Input: load missing the first three and last two hours of the window.
    Expect: the solar display starts and ends with the load samples present.
    """
    ts = year_load.timestamps_ms
    lo = pd.Timestamp("2023-05-16 03:00", tz=TZ).value // 1_000_000
    hi = pd.Timestamp("2023-05-20 21:00", tz=TZ).value // 1_000_000
    window_start = pd.Timestamp("2023-05-16", tz=TZ).value // 1_000_000
    window_end = pd.Timestamp("2023-05-21", tz=TZ).value // 1_000_000
    gap = ((ts >= window_start) & (ts < lo)) | ((ts > hi) & (ts < window_end))
    load = NetLoadSeries(ts[~gap], year_load.values[~gap], tz=TZ)

    plant = PlantConfiguration(plant_size_mw=15.0, thermal_limit_mw=-10.0)
    res = scenario.run(load, year_solar, plant, window=("2023-05-16", "2023-05-20"))

    assert len(res.capacity) == 5 * 24 - 5
    assert len(res.flexible) == 5 * 24 - 5
    assert res.flexible.index[0] == pd.Timestamp("2023-05-16 03:00", tz=TZ)
    assert res.flexible.index[-1] == pd.Timestamp("2023-05-20 21:00", tz=TZ)
    assert res.flexible["matched"].all()
    assert res.static.index.equals(res.flexible.index)


def test_run_window_without_load_is_empty(scenario_load, scenario_solar):
    res = scenario.run(scenario_load, scenario_solar, window=("2024-01-01", "2024-01-02"))
    assert res.flexible.empty
    assert res.capacity.empty
    assert res.static_capacity_mw == 0.0
