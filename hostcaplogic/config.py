from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from . import canon
from .exceptions import ConfigError, require
from .types import AlignmentPolicy


@dataclass
class SimulationConfig:
    # Alignment of solar samples onto the load timeline
    tolerance_ms: int = canon.MATCH_TOLERANCE_MS
    policy: AlignmentPolicy = "first"  # "first" | "nearest"

    # Local time used for month bucketing and day windows
    tz: str = canon.DEFAULT_TZ

    # Default plant under study
    thermal_limit_mw: float = canon.DEFAULT_THERMAL_LIMIT_MW
    plant_size_mw: float = canon.DEFAULT_PLANT_SIZE_MW

    # Fixed plant sizes compared against the worst-hour size
    sweep_sizes_mw: Tuple[float, ...] = field(
        default_factory=lambda: tuple(canon.DEFAULT_SWEEP_SIZES_MW)
    )

    # Multi-day window for display series
    display_start: str = canon.DEFAULT_DISPLAY_START
    display_end: str = canon.DEFAULT_DISPLAY_END

    # Memoised (plant size, thermal limit) evaluations kept by HostingStudy
    cache_size: int = 128

    def __post_init__(self):
        require(
            self.policy in ("first", "nearest"),
            f"policy must be 'first' or 'nearest', got {self.policy!r}",
            ConfigError,
        )
        require(self.tolerance_ms > 0, "tolerance_ms must be positive", ConfigError)
        require(self.cache_size >= 0, "cache_size must be >= 0", ConfigError)
        try:
            ZoneInfo(self.tz)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ConfigError(f"Unknown time zone: {self.tz!r}") from e


def default_config() -> SimulationConfig:
    return SimulationConfig()
