from __future__ import annotations
from typing import Final, Dict, Tuple

INDEX_NAME: Final[str] = "timestamp"
DEFAULT_TZ: Final[str] = "America/New_York"
COMMON_TIMESTAMP_NAMES = ("timestamp", "t_start", "time", "ts", "datetime", "date")

# Solar samples further than this from every load sample are left unmatched.
MATCH_TOLERANCE_MS: Final[int] = 3_600_000

# Thermal limit is signed like net load: -10 MW allows 10 MW of export.
DEFAULT_THERMAL_LIMIT_MW: Final[float] = -10.0
DEFAULT_PLANT_SIZE_MW: Final[float] = 15.0
DEFAULT_SWEEP_SIZES_MW: Final[Tuple[float, ...]] = (10.0, 15.0)

# Window shown by the multi-day flexible interconnection chart
DEFAULT_DISPLAY_START: Final[str] = "2023-05-16"
DEFAULT_DISPLAY_END: Final[str] = "2023-05-20"

LOAD_COL: Final[str] = "net_load_mw"
SOLAR_COL: Final[str] = "ac_per_dc"

# Candidate value columns per series kind (first match wins on ingest)
VALUE_COLUMNS: Dict[str, Tuple[str, ...]] = {
    "load": ("net_load_mw", "net_load", "load_mw", "load", "value"),
    "solar": ("ac_per_dc", "ac_kw_per_kwdc", "per_unit", "pu", "value"),
}

MONTH_LABELS: Final[Tuple[str, ...]] = (
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
)
