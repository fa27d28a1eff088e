from __future__ import annotations
from typing import Iterator, Optional

import numpy as np

from . import canon
from .exceptions import AlignmentError
from .series import NetLoadSeries, SolarPerUnitSeries
from .types import AlignedSample, AlignmentPolicy, TimePoint

_NO_MATCH = -1


def _match(
    load_ms: np.ndarray,
    solar_ms: np.ndarray,
    policy: AlignmentPolicy,
    tolerance_ms: int,
) -> np.ndarray:
    """
    Load position for every solar instant, or -1 where nothing lies strictly
    within tolerance_ms.

    - 'first': earliest load sample in sequence order inside the window, even
      when a later one is closer.
    - 'nearest': closest load sample in absolute time; ties go to the earlier.
    """
    n = len(load_ms)
    if n == 0 or len(solar_ms) == 0:
        return np.full(len(solar_ms), _NO_MATCH, dtype=np.intp)

    if policy == "first":
        # load_ms is ascending, so the first qualifying sample is the first one
        # strictly after the window's lower edge
        cand = np.searchsorted(load_ms, solar_ms - tolerance_ms, side="right")
    elif policy == "nearest":
        right = np.searchsorted(load_ms, solar_ms, side="left")
        left = right - 1
        rc = np.clip(right, 0, n - 1)
        lc = np.clip(left, 0, n - 1)
        far = np.iinfo(np.int64).max
        d_right = np.where(right < n, np.abs(load_ms[rc] - solar_ms), far)
        d_left = np.where(left >= 0, np.abs(solar_ms - load_ms[lc]), far)
        cand = np.where(d_left <= d_right, lc, rc)
    else:
        raise AlignmentError(f"Unknown alignment policy '{policy}'.")

    safe = np.clip(cand, 0, n - 1)
    ok = (cand < n) & (np.abs(load_ms[safe] - solar_ms) < tolerance_ms)
    return np.where(ok, safe, _NO_MATCH).astype(np.intp)


def match_indices(
    load: NetLoadSeries,
    solar: SolarPerUnitSeries,
    *,
    policy: AlignmentPolicy = "first",
    tolerance_ms: int = canon.MATCH_TOLERANCE_MS,
) -> np.ndarray:
    """Vectorised alignment: one load position per solar sample, -1 if unmatched."""
    return _match(load.timestamps_ms, solar.timestamps_ms, policy, tolerance_ms)


def _match_point(
    solar_point: TimePoint[float],
    load: NetLoadSeries,
    policy: AlignmentPolicy,
    tolerance_ms: int,
) -> Optional[TimePoint[float]]:
    ms = np.array([solar_point.epoch_ms], dtype=np.int64)
    pos = int(_match(load.timestamps_ms, ms, policy, tolerance_ms)[0])
    return None if pos == _NO_MATCH else load[pos]


def first_within_tolerance(
    solar_point: TimePoint[float],
    load: NetLoadSeries,
    tolerance_ms: int = canon.MATCH_TOLERANCE_MS,
) -> Optional[TimePoint[float]]:
    """First load point (in sequence order) strictly within tolerance_ms, else None."""
    return _match_point(solar_point, load, "first", tolerance_ms)


def nearest_within_tolerance(
    solar_point: TimePoint[float],
    load: NetLoadSeries,
    tolerance_ms: int = canon.MATCH_TOLERANCE_MS,
) -> Optional[TimePoint[float]]:
    """Closest load point strictly within tolerance_ms, else None."""
    return _match_point(solar_point, load, "nearest", tolerance_ms)


def iter_aligned(
    load: NetLoadSeries,
    solar: SolarPerUnitSeries,
    *,
    policy: AlignmentPolicy = "first",
    tolerance_ms: int = canon.MATCH_TOLERANCE_MS,
) -> Iterator[AlignedSample]:
    """Yield matched (load, solar) pairs in solar order; unmatched samples are skipped."""
    positions = match_indices(load, solar, policy=policy, tolerance_ms=tolerance_ms)
    for i, pos in enumerate(positions):
        if pos == _NO_MATCH:
            continue
        yield AlignedSample(load=load[int(pos)], solar=solar[i])
