from __future__ import annotations
from typing import Iterable, Iterator, Optional, Tuple, TypeVar

import numpy as np
import pandas as pd

from . import utils
from .series import NetLoadSeries

T = TypeVar("T")


def _crosses(y0: float, y1: float, threshold: float) -> bool:
    return (y0 <= threshold and y1 > threshold) or (y0 > threshold and y1 <= threshold)


def iter_reverse_flow(
    times: Iterable[T],
    values: Iterable[float],
    threshold: float = 0.0,
) -> Iterator[Tuple[T, Optional[float]]]:
    """
    Yield (time, value) points for shading the region where value <= threshold.

    Points above the threshold come out as gaps (None). Between two samples
    that straddle the threshold an extra point is emitted at the linearly
    interpolated crossing time, so the shaded edge lands on the true crossing
    rather than the nearest sample. Times may be epoch-ms numbers, datetimes
    or pandas Timestamps. An n-point input gives between n and 2n - 1 points.
    """
    points = iter(zip(times, values))
    prev = next(points, None)
    if prev is None:
        return

    for t1, y1 in points:
        t0, y0 = prev
        yield t0, (y0 if y0 <= threshold else None)

        # equal values never count as a crossing (zero-width denominator)
        if _crosses(y0, y1, threshold) and y1 != y0:
            frac = (threshold - y0) / (y1 - y0)  # 0..1
            yield t0 + (t1 - t0) * frac, threshold

        prev = (t1, y1)

    t_last, y_last = prev
    yield t_last, (y_last if y_last <= threshold else None)


def reverse_flow_series(
    load: NetLoadSeries | pd.Series, threshold: float = 0.0
) -> pd.Series:
    """
    Materialise iter_reverse_flow over a load series for plotting.

    Gaps become NaN; the index is tz-aware and includes the crossing instants.
    """
    if isinstance(load, pd.Series):
        load = NetLoadSeries.from_series(load)

    pts = list(
        iter_reverse_flow(load.timestamps_ms.tolist(), load.values.tolist(), threshold)
    )
    if not pts:
        return pd.Series(
            [], index=utils.from_epoch_ms([], load.tz), name="reverse_flow_mw", dtype=float
        )

    # crossing instants are fractional; keep millisecond resolution
    ms = np.rint(np.array([t for t, _ in pts], dtype=float)).astype(np.int64)
    vals = np.array([np.nan if v is None else v for _, v in pts], dtype=float)
    return pd.Series(vals, index=utils.from_epoch_ms(ms, load.tz), name="reverse_flow_mw")


def limit_crossing_series(load: NetLoadSeries, thermal_limit_mw: float) -> pd.Series:
    """Same shading, but for net load at or beyond the thermal limit."""
    out = reverse_flow_series(load, threshold=thermal_limit_mw)
    return out.rename("over_limit_mw")
