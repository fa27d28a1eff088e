from __future__ import annotations
import numpy as np
import pandas as pd
from typing import cast

from . import exceptions


def assert_ascending(timestamps_ms: np.ndarray) -> None:
    """Timestamps must be strictly ascending (which also makes them unique)."""
    if len(timestamps_ms) < 2:
        return
    steps = np.diff(timestamps_ms)
    if (steps == 0).any():
        pos = int(np.flatnonzero(steps == 0)[0]) + 1
        raise exceptions.SeriesError(
            f"Duplicate timestamp at position {pos}; timestamps must be unique."
        )
    if (steps < 0).any():
        pos = int(np.flatnonzero(steps < 0)[0]) + 1
        raise exceptions.SeriesError(
            f"Timestamp at position {pos} is earlier than its predecessor; "
            "timestamps must be sorted ascending."
        )


def assert_series_frame(df: pd.DataFrame, value_col: str) -> None:
    """Structural checks on a frame about to become a series."""
    if not isinstance(df.index, pd.DatetimeIndex):
        raise exceptions.SeriesError("Index must be a DatetimeIndex.")
    tz_index = cast(pd.DatetimeIndex, df.index)
    if tz_index.tz is None:
        raise exceptions.SeriesError("Index must be tz-aware.")
    if value_col not in df.columns:
        raise exceptions.SeriesError(f"Missing value column '{value_col}'.")
    if not tz_index.is_monotonic_increasing:
        raise exceptions.SeriesError("Index must be sorted ascending.")
    if tz_index.has_duplicates:
        raise exceptions.SeriesError("Index must not contain duplicate timestamps.")
    if not pd.api.types.is_numeric_dtype(df[value_col]):
        raise exceptions.SeriesError(f"Column '{value_col}' must be numeric.")
