from __future__ import annotations
from typing import Optional

import numpy as np
import pandas as pd

from . import align, canon
from .series import NetLoadSeries, SolarPerUnitSeries
from .types import AlignmentPolicy, PlantConfiguration, TimePoint


def hosting_capacity(net_load_mw, thermal_limit_mw: float):
    """Spare capacity before the thermal limit is reached: net load − limit."""
    return net_load_mw - thermal_limit_mw


def raw_output(per_unit, plant_size_mw: float):
    """Unconstrained plant output in MW (per-unit AC × DC nameplate)."""
    return per_unit * plant_size_mw


def clip_output(raw_mw, capacity_mw):
    """
    Return (firm_mw, curtailed_mw) for raw output against hosting capacity.

    Firm output is not floored at zero: when capacity is negative the firm
    value follows it below zero and curtailment exceeds the raw output.
    Hourly samples mean MW here is also MWh for the hour.
    """
    firm = np.minimum(raw_mw, capacity_mw)
    curtailed = raw_mw - firm
    if np.ndim(firm) == 0:
        return float(firm), float(curtailed)
    return firm, curtailed


def hosting_capacity_series(load: NetLoadSeries, thermal_limit_mw: float) -> pd.Series:
    """Real-time hosting capacity over the load timeline."""
    return pd.Series(
        hosting_capacity(np.array(load.values), thermal_limit_mw),
        index=load.index(),
        name="capacity_mw",
    )


def static_hosting_capacity(load: NetLoadSeries, thermal_limit_mw: float) -> float:
    """Worst-hour capacity: the size a plant may take under a static limit."""
    if load.is_empty:
        return 0.0
    return float(hosting_capacity(load.values, thermal_limit_mw).min())


def worst_hour(load: NetLoadSeries) -> Optional[TimePoint[float]]:
    """
    The sample with the lowest net load, i.e. the hour that sets the static
    limit. Ties go to the earliest sample; None for an empty series.
    """
    if load.is_empty:
        return None
    return load[int(np.argmin(load.values))]


def daily_minimums(
    load: NetLoadSeries,
    start: str | pd.Timestamp | None = None,
    end: str | pd.Timestamp | None = None,
    *,
    thermal_limit_mw: float = canon.DEFAULT_THERMAL_LIMIT_MW,
) -> pd.DataFrame:
    """
    Lowest net load of each local day and when it occurs.

    Index: day (tz-aware midnight). Columns: min_load_mw, min_time, capacity_mw.
    start/end restrict to whole days as in TimeSeries.between; days without
    samples are absent.
    """
    if start is not None:
        load = load.between(start, end)
    s = load.to_series()
    columns = ["min_load_mw", "min_time", "capacity_mw"]
    if s.empty:
        return pd.DataFrame(
            columns=columns, index=pd.DatetimeIndex([], tz=load.tz, name="day")
        )

    grouped = s.groupby(s.index.normalize().rename("day"))
    out = pd.DataFrame({"min_load_mw": grouped.min(), "min_time": grouped.idxmin()})
    out["capacity_mw"] = hosting_capacity(out["min_load_mw"], thermal_limit_mw)
    return out[columns]


def flexible_output(
    load: NetLoadSeries,
    solar: SolarPerUnitSeries,
    plant: PlantConfiguration,
    *,
    policy: AlignmentPolicy = "first",
    tolerance_ms: int = canon.MATCH_TOLERANCE_MS,
) -> pd.DataFrame:
    """
    Per-solar-sample output of a plant operated against real-time capacity.

    Columns: raw_mw, capacity_mw, firm_mw, curtailed_mw, matched.
    This is the display view: a sample with no load match is drawn
    unconstrained (capacity NaN, nothing curtailed). Aggregation skips such
    samples instead. A 0 MW plant produces and curtails nothing, matching
    the monthly statistics.
    """
    positions = align.match_indices(load, solar, policy=policy, tolerance_ms=tolerance_ms)
    matched = positions >= 0

    raw = raw_output(np.array(solar.values), plant.plant_size_mw)
    capacity = np.full(len(solar), np.nan)
    capacity[matched] = hosting_capacity(
        load.values[positions[matched]], plant.thermal_limit_mw
    )

    firm = raw.copy()
    if plant.plant_size_mw > 0:
        clipped, _ = clip_output(raw[matched], capacity[matched])
        firm[matched] = clipped
    curtailed = raw - firm

    return pd.DataFrame(
        {
            "raw_mw": raw,
            "capacity_mw": capacity,
            "firm_mw": firm,
            "curtailed_mw": curtailed,
            "matched": matched,
        },
        index=solar.index(),
    )


def static_output(
    load: NetLoadSeries,
    solar: SolarPerUnitSeries,
    thermal_limit_mw: float,
    *,
    plant_size_mw: Optional[float] = None,
) -> pd.Series:
    """
    Output of a plant sized to the static (worst-hour) limit, never curtailed.

    plant_size_mw overrides the worst-hour size, e.g. to plot a fixed plant.
    """
    size = (
        static_hosting_capacity(load, thermal_limit_mw)
        if plant_size_mw is None
        else plant_size_mw
    )
    return pd.Series(
        raw_output(np.array(solar.values), size),
        index=solar.index(),
        name="static_mw",
    )
