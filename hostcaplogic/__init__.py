from . import (
    canon,
    exceptions,
    types,
    utils,
    validate,
    series,
    align,
    clip,
    crossing,
    aggregate,
    config,
    scenario,
    ingest,
)
from .series import NetLoadSeries, SolarPerUnitSeries
from .types import MonthlyStat, PlantConfiguration, TimePoint

__all__ = [
    "canon",
    "exceptions",
    "types",
    "utils",
    "validate",
    "series",
    "align",
    "clip",
    "crossing",
    "aggregate",
    "config",
    "scenario",
    "ingest",
    "NetLoadSeries",
    "SolarPerUnitSeries",
    "MonthlyStat",
    "PlantConfiguration",
    "TimePoint",
]
