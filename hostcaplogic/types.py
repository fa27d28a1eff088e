from __future__ import annotations
from typing import TypedDict, Literal, List, Dict, Optional, Generic, TypeVar
from dataclasses import dataclass

import pandas as pd
from pydantic import BaseModel, Field

from . import canon, utils

V = TypeVar("V")

AlignmentPolicy = Literal["first", "nearest"]
SeriesKind = Literal["load", "solar"]


@dataclass(frozen=True)
class TimePoint(Generic[V]):
    timestamp: pd.Timestamp  # tz-aware
    value: V

    @property
    def epoch_ms(self) -> int:
        return utils.to_epoch_ms(self.timestamp)


@dataclass(frozen=True)
class AlignedSample:
    """A solar sample paired with the load sample it was matched to."""

    load: TimePoint[float]
    solar: TimePoint[float]


## Plant and statistics
class PlantConfiguration(BaseModel):
    plant_size_mw: float = Field(ge=0.0, allow_inf_nan=False)  # DC nameplate
    thermal_limit_mw: float = Field(allow_inf_nan=False)  # signed like net load
    model_config = {"frozen": True}

    @classmethod
    def from_planning_limit(
        cls, plant_size_mw: float, planning_limit_mw: float
    ) -> "PlantConfiguration":
        """Build from a positive export planning limit (10 MW → thermal limit −10 MW)."""
        return cls(plant_size_mw=plant_size_mw, thermal_limit_mw=-planning_limit_mw)


class MonthlyStat(BaseModel):
    month: int = Field(ge=0, le=11)  # 0 = January
    # Not floored: negative hosting capacity yields negative firm output
    production_mwh: float
    curtailment_mwh: float = Field(ge=0.0)
    model_config = {"frozen": True}

    @property
    def label(self) -> str:
        return utils.month_label(self.month)


@dataclass(frozen=True)
class SweepPoint:
    plant_size_mw: float
    thermal_limit_mw: float
    production_mwh: float
    curtailment_mwh: float
    curtailment_pct: float

    @property
    def production_gwh(self) -> float:
        return self.production_mwh / 1000.0

    @property
    def curtailment_gwh(self) -> float:
        return self.curtailment_mwh / 1000.0

    @property
    def label(self) -> str:
        return f"{self.plant_size_mw:.1f} MW"


## Summary payloads
class SummaryMeta(TypedDict):
    start: str
    end: str
    tz: str
    load_samples: int
    solar_samples: int
    matched_samples: int
    unmatched_samples: int


class SummaryTotals(TypedDict):
    production_mwh: float
    curtailment_mwh: float
    production_gwh: float
    curtailment_pct: float
    static_capacity_mw: float


class AnnualSummary(TypedDict):
    meta: SummaryMeta
    plant: Dict[str, float]
    totals: SummaryTotals
    months: List[Dict[str, float | str]]


@dataclass
class ScenarioResult:
    plant: PlantConfiguration
    capacity: pd.Series  # real-time hosting capacity, MW
    static_capacity_mw: float
    flexible: pd.DataFrame  # raw_mw, capacity_mw, firm_mw, curtailed_mw, matched
    static: pd.Series  # output of a plant sized to the worst hour, MW
    reverse_flow: pd.Series  # net load with gaps above zero, crossings interpolated
    monthly: List[MonthlyStat]
    annual_curtailment_pct: float
    summary: AnnualSummary
    window: Optional[tuple[str, str]] = None
