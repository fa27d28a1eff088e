from __future__ import annotations
import logging
from functools import lru_cache
from typing import List, Optional, Sequence

from . import aggregate, clip, crossing
from .config import SimulationConfig, default_config
from .series import NetLoadSeries, SolarPerUnitSeries
from .types import MonthlyStat, PlantConfiguration, ScenarioResult, SweepPoint

logger = logging.getLogger(__name__)


def run(
    load: NetLoadSeries,
    solar: SolarPerUnitSeries,
    plant: Optional[PlantConfiguration] = None,
    *,
    config: Optional[SimulationConfig] = None,
    window: Optional[tuple[str, str]] = None,
) -> ScenarioResult:
    """
    Compare a plant under a static limit with the same plant operated flexibly.

    Annual figures always cover the full series. The display series
    (capacity, flexible/static output, reverse flow) cover `window` when given,
    as an inclusive (start_day, end_day) pair; the config's display window is
    not applied unless passed explicitly.

    Both series are re-expressed in the config tz, which sets month buckets
    and day boundaries.
    """
    cfg = config or default_config()
    if plant is None:
        plant = PlantConfiguration(
            plant_size_mw=cfg.plant_size_mw, thermal_limit_mw=cfg.thermal_limit_mw
        )
    load, solar = load.with_tz(cfg.tz), solar.with_tz(cfg.tz)

    stats, matched = aggregate.evaluate(
        load, solar, plant, policy=cfg.policy, tolerance_ms=cfg.tolerance_ms
    )
    summary = aggregate.summarise(
        load,
        solar,
        plant,
        policy=cfg.policy,
        tolerance_ms=cfg.tolerance_ms,
        stats=stats,
        matched_samples=matched,
    )

    view_load, view_solar = load, solar
    if window is not None:
        view_load = load.between(*window)
        # solar is cut to the load samples actually present in the window
        if view_load.is_empty:
            view_solar = type(solar).empty(tz=solar.tz)
        else:
            view_solar = solar.span_ms(
                int(view_load.timestamps_ms[0]), int(view_load.timestamps_ms[-1])
            )

    # worst hour of the displayed period, as drawn next to the flexible plant
    static_capacity = clip.static_hosting_capacity(view_load, plant.thermal_limit_mw)

    result = ScenarioResult(
        plant=plant,
        capacity=clip.hosting_capacity_series(view_load, plant.thermal_limit_mw),
        static_capacity_mw=static_capacity,
        flexible=clip.flexible_output(
            view_load,
            view_solar,
            plant,
            policy=cfg.policy,
            tolerance_ms=cfg.tolerance_ms,
        ),
        static=clip.static_output(view_load, view_solar, plant.thermal_limit_mw),
        reverse_flow=crossing.reverse_flow_series(view_load),
        monthly=stats,
        annual_curtailment_pct=aggregate.annual_curtailment_pct(stats),
        summary=summary,
        window=window,
    )
    logger.debug(
        "Scenario %.2f MW @ %.2f MW limit: %.2f%% curtailed",
        plant.plant_size_mw,
        plant.thermal_limit_mw,
        result.annual_curtailment_pct,
    )
    return result


class HostingStudy:
    """
    One pair of immutable series evaluated for many plant configurations.

    Monthly statistics are memoised by (plant_size_mw, thermal_limit_mw), so
    interactive controls that revisit a setting do not rescan the series.
    """

    def __init__(
        self,
        load: NetLoadSeries,
        solar: SolarPerUnitSeries,
        config: Optional[SimulationConfig] = None,
    ):
        self.config = config or default_config()
        self.load = load.with_tz(self.config.tz)
        self.solar = solar.with_tz(self.config.tz)
        self._monthly = lru_cache(maxsize=self.config.cache_size)(self._compute_monthly)

    def _compute_monthly(
        self, plant_size_mw: float, thermal_limit_mw: float
    ) -> tuple[MonthlyStat, ...]:
        plant = PlantConfiguration(
            plant_size_mw=plant_size_mw, thermal_limit_mw=thermal_limit_mw
        )
        return tuple(
            aggregate.monthly_stats(
                self.load,
                self.solar,
                plant,
                policy=self.config.policy,
                tolerance_ms=self.config.tolerance_ms,
            )
        )

    def monthly_stats(
        self, plant_size_mw: float, thermal_limit_mw: float
    ) -> List[MonthlyStat]:
        return list(self._monthly(float(plant_size_mw), float(thermal_limit_mw)))

    def annual_curtailment_pct(
        self, plant_size_mw: float, thermal_limit_mw: float
    ) -> float:
        return aggregate.annual_curtailment_pct(
            self._monthly(float(plant_size_mw), float(thermal_limit_mw))
        )

    def sweep(
        self,
        plant_sizes_mw: Optional[Sequence[float]] = None,
        thermal_limit_mw: Optional[float] = None,
    ) -> List[SweepPoint]:
        """Sweep plant sizes; defaults to worst-hour size plus the configured sizes."""
        limit = self.config.thermal_limit_mw if thermal_limit_mw is None else thermal_limit_mw
        sizes = (
            aggregate.default_sweep_sizes(self.load, limit, self.config.sweep_sizes_mw)
            if plant_sizes_mw is None
            else plant_sizes_mw
        )
        out: List[SweepPoint] = []
        for size in sizes:
            stats = self._monthly(float(size), float(limit))
            production = sum(s.production_mwh for s in stats)
            curtailment = sum(s.curtailment_mwh for s in stats)
            out.append(
                SweepPoint(
                    plant_size_mw=float(size),
                    thermal_limit_mw=float(limit),
                    production_mwh=production,
                    curtailment_mwh=curtailment,
                    curtailment_pct=aggregate.curtailment_pct(production, curtailment),
                )
            )
        return out

    def run(self, plant_size_mw: float, thermal_limit_mw: float) -> ScenarioResult:
        plant = PlantConfiguration(
            plant_size_mw=plant_size_mw, thermal_limit_mw=thermal_limit_mw
        )
        return run(
            self.load,
            self.solar,
            plant,
            config=self.config,
            window=(self.config.display_start, self.config.display_end),
        )

    def cache_info(self):
        return self._monthly.cache_info()
