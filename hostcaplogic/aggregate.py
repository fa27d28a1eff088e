from __future__ import annotations
import logging
from typing import Iterable, List, Optional, Sequence, cast

import numpy as np
import pandas as pd

from . import align, canon, clip
from .series import NetLoadSeries, SolarPerUnitSeries
from .types import (
    AlignmentPolicy,
    AnnualSummary,
    MonthlyStat,
    PlantConfiguration,
    SweepPoint,
)

logger = logging.getLogger(__name__)


def _clipped(
    load: NetLoadSeries,
    solar: SolarPerUnitSeries,
    plant: PlantConfiguration,
    policy: AlignmentPolicy,
    tolerance_ms: int,
) -> tuple[np.ndarray, np.ndarray, np.ndarray, int]:
    """(month, firm_mwh, curtailed_mwh) for every matched solar sample, plus the match count."""
    positions = align.match_indices(load, solar, policy=policy, tolerance_ms=tolerance_ms)
    matched = positions >= 0
    n_matched = int(matched.sum())
    months = solar.months()[matched]

    if plant.plant_size_mw == 0:
        # no nameplate, nothing to produce or curtail
        zeros = np.zeros(n_matched, dtype=float)
        return months, zeros, zeros.copy(), n_matched

    raw = clip.raw_output(solar.values[matched], plant.plant_size_mw)
    capacity = clip.hosting_capacity(load.values[positions[matched]], plant.thermal_limit_mw)
    firm, curtailed = clip.clip_output(raw, capacity)
    logger.debug(
        "Clipped %d of %d solar samples (plant=%.2f MW, limit=%.2f MW)",
        n_matched,
        len(solar),
        plant.plant_size_mw,
        plant.thermal_limit_mw,
    )
    return months, firm, curtailed, n_matched


def evaluate(
    load: NetLoadSeries,
    solar: SolarPerUnitSeries,
    plant: PlantConfiguration,
    *,
    policy: AlignmentPolicy = "first",
    tolerance_ms: int = canon.MATCH_TOLERANCE_MS,
) -> tuple[List[MonthlyStat], int]:
    """
    Monthly stats and the number of solar samples that found a load match,
    from a single alignment pass.
    """
    months, firm, curtailed, n_matched = _clipped(load, solar, plant, policy, tolerance_ms)
    production = np.bincount(months, weights=firm, minlength=12)
    curtailment = np.bincount(months, weights=curtailed, minlength=12)
    stats = [
        MonthlyStat(
            month=m,
            production_mwh=float(production[m]),
            curtailment_mwh=float(curtailment[m]),
        )
        for m in range(12)
    ]
    return stats, n_matched


def monthly_stats(
    load: NetLoadSeries,
    solar: SolarPerUnitSeries,
    plant: PlantConfiguration,
    *,
    policy: AlignmentPolicy = "first",
    tolerance_ms: int = canon.MATCH_TOLERANCE_MS,
) -> List[MonthlyStat]:
    """
    Firm production and curtailment per calendar month, always 12 entries.

    Solar samples without a load sample inside the tolerance window are
    skipped. Months come from the solar series' local time.
    """
    stats, _ = evaluate(load, solar, plant, policy=policy, tolerance_ms=tolerance_ms)
    return stats



def annual_totals(
    load: NetLoadSeries,
    solar: SolarPerUnitSeries,
    plant: PlantConfiguration,
    *,
    policy: AlignmentPolicy = "first",
    tolerance_ms: int = canon.MATCH_TOLERANCE_MS,
) -> tuple[float, float]:
    """(production_mwh, curtailment_mwh) over the whole year in one pass."""
    _, firm, curtailed, _ = _clipped(load, solar, plant, policy, tolerance_ms)
    return float(firm.sum()), float(curtailed.sum())


def curtailment_pct(production_mwh: float, curtailment_mwh: float) -> float:
    denom = production_mwh + curtailment_mwh
    if denom == 0 or curtailment_mwh == 0:
        return 0.0
    return 100.0 * curtailment_mwh / denom


def annual_curtailment_pct(stats: Iterable[MonthlyStat]) -> float:
    """Share of potential output curtailed over the year, in percent."""
    stats = list(stats)
    production = sum(s.production_mwh for s in stats)
    curtailment = sum(s.curtailment_mwh for s in stats)
    return curtailment_pct(production, curtailment)


def default_sweep_sizes(
    load: NetLoadSeries,
    thermal_limit_mw: float,
    fixed_sizes_mw: Sequence[float] = canon.DEFAULT_SWEEP_SIZES_MW,
) -> List[float]:
    """Worst-hour plant size followed by the fixed comparison sizes."""
    worst = max(clip.static_hosting_capacity(load, thermal_limit_mw), 0.0)
    return [worst, *[float(s) for s in fixed_sizes_mw]]


def sweep(
    load: NetLoadSeries,
    solar: SolarPerUnitSeries,
    plant_sizes_mw: Iterable[float],
    thermal_limit_mw: float,
    *,
    policy: AlignmentPolicy = "first",
    tolerance_ms: int = canon.MATCH_TOLERANCE_MS,
) -> List[SweepPoint]:
    """Evaluate each plant size independently against the same limit."""
    out: List[SweepPoint] = []
    for size in plant_sizes_mw:
        plant = PlantConfiguration(plant_size_mw=size, thermal_limit_mw=thermal_limit_mw)
        production, curtailment = annual_totals(
            load, solar, plant, policy=policy, tolerance_ms=tolerance_ms
        )
        out.append(
            SweepPoint(
                plant_size_mw=plant.plant_size_mw,
                thermal_limit_mw=plant.thermal_limit_mw,
                production_mwh=production,
                curtailment_mwh=curtailment,
                curtailment_pct=curtailment_pct(production, curtailment),
            )
        )
        logger.debug(
            "Sweep %.2f MW: %.1f MWh produced, %.1f MWh curtailed",
            plant.plant_size_mw,
            production,
            curtailment,
        )
    return out


def monthly_frame(stats: Iterable[MonthlyStat]) -> pd.DataFrame:
    """Tabular view of monthly stats with short month labels."""
    rows = [
        {
            "month": s.month,
            "label": s.label,
            "production_mwh": s.production_mwh,
            "curtailment_mwh": s.curtailment_mwh,
        }
        for s in stats
    ]
    return pd.DataFrame(
        rows, columns=["month", "label", "production_mwh", "curtailment_mwh"]
    )


def sweep_frame(points: Iterable[SweepPoint]) -> pd.DataFrame:
    rows = [
        {
            "label": p.label,
            "plant_size_mw": p.plant_size_mw,
            "production_gwh": p.production_gwh,
            "curtailment_gwh": p.curtailment_gwh,
            "curtailment_pct": p.curtailment_pct,
        }
        for p in points
    ]
    return pd.DataFrame(
        rows,
        columns=[
            "label",
            "plant_size_mw",
            "production_gwh",
            "curtailment_gwh",
            "curtailment_pct",
        ],
    )


def summarise(
    load: NetLoadSeries,
    solar: SolarPerUnitSeries,
    plant: PlantConfiguration,
    *,
    policy: AlignmentPolicy = "first",
    tolerance_ms: int = canon.MATCH_TOLERANCE_MS,
    stats: Optional[List[MonthlyStat]] = None,
    matched_samples: Optional[int] = None,
) -> AnnualSummary:
    """
    JSON-ready annual summary. Pass the stats and match count from
    evaluate() to skip aligning the series again.
    """
    if stats is None or matched_samples is None:
        stats, matched_samples = evaluate(
            load, solar, plant, policy=policy, tolerance_ms=tolerance_ms
        )
    matched = matched_samples

    production = float(sum(s.production_mwh for s in stats))
    curtailment = float(sum(s.curtailment_mwh for s in stats))

    idx = solar.index()
    start_str: str = idx[0].isoformat() if len(idx) else ""
    end_str: str = idx[-1].isoformat() if len(idx) else ""

    months_records: list[dict[str, float | str]] = monthly_frame(stats).to_dict(orient="records")  # type: ignore[assignment]

    payload: AnnualSummary = cast(
        AnnualSummary,
        {
            "meta": {
                "start": start_str,
                "end": end_str,
                "tz": solar.tz,
                "load_samples": len(load),
                "solar_samples": len(solar),
                "matched_samples": matched,
                "unmatched_samples": len(solar) - matched,
            },
            "plant": {
                "plant_size_mw": plant.plant_size_mw,
                "thermal_limit_mw": plant.thermal_limit_mw,
            },
            "totals": {
                "production_mwh": production,
                "curtailment_mwh": curtailment,
                "production_gwh": production / 1000.0,
                "curtailment_pct": curtailment_pct(production, curtailment),
                "static_capacity_mw": clip.static_hosting_capacity(
                    load, plant.thermal_limit_mw
                ),
            },
            "months": months_records,
        },
    )
    return payload
