# hostcaplogic/utils.py
from __future__ import annotations
import numpy as np
import pandas as pd
from zoneinfo import ZoneInfo
from typing import Iterable

from . import canon


def _fall_back_mask(idx: pd.DatetimeIndex) -> np.ndarray:
    # first occurrence of a repeated wall time is the DST hour, later ones standard
    return ~idx.duplicated(keep="first")


def localize_index(
    idx: pd.DatetimeIndex, tz: str, nonexistent: str = "NaT"
) -> pd.DatetimeIndex:
    """
    Localize a naive index to tz, or convert an aware one.

    Ambiguous fall-back wall times are resolved in order of appearance, so an
    hourly file that repeats 01:00 keeps both hours.
    """
    if idx.tz is None:
        return idx.tz_localize(
            ZoneInfo(tz), ambiguous=_fall_back_mask(idx), nonexistent=nonexistent
        )
    return idx.tz_convert(ZoneInfo(tz))


def parse_timestamps(values: Iterable, tz: str = canon.DEFAULT_TZ) -> pd.DatetimeIndex:
    """
    Parse timestamp-like values into a tz-aware DatetimeIndex.

    Unparseable entries (and wall times that do not exist in tz) become NaT.
    """
    try:
        idx = pd.DatetimeIndex(pd.to_datetime(values, errors="coerce"))
    except (TypeError, ValueError):
        # mixed UTC offsets, e.g. a file spanning a DST change
        idx = pd.DatetimeIndex(pd.to_datetime(values, errors="coerce", utc=True))
    return localize_index(idx, tz)


def to_epoch_ms(ts, tz: str = canon.DEFAULT_TZ) -> int:
    """Epoch milliseconds for a single instant; numbers are taken as epoch ms already."""
    if isinstance(ts, (int, np.integer)) and not isinstance(ts, bool):
        return int(ts)
    if isinstance(ts, (float, np.floating)):
        # fractional ms, e.g. an interpolated crossing instant
        return int(round(float(ts)))
    stamp = pd.Timestamp(ts)
    if stamp.tzinfo is None:
        stamp = stamp.tz_localize(ZoneInfo(tz), ambiguous=True)
    return int(stamp.value // 1_000_000)


def _is_number(v) -> bool:
    return isinstance(v, (int, float, np.integer, np.floating)) and not isinstance(v, bool)


def to_epoch_ms_array(values, tz: str = canon.DEFAULT_TZ) -> np.ndarray:
    """Vectorised to_epoch_ms; naive timestamps are read as wall time in tz."""
    if isinstance(values, pd.Series):
        values = values.to_numpy()
    if not isinstance(values, (pd.DatetimeIndex, np.ndarray)):
        values = list(values)
        if all(_is_number(v) for v in values):
            values = np.asarray(values)
    if isinstance(values, np.ndarray) and values.dtype.kind in "iu":
        return values.astype(np.int64)
    if isinstance(values, np.ndarray) and values.dtype.kind == "f":
        return np.rint(values).astype(np.int64)
    idx = localize_index(pd.DatetimeIndex(pd.to_datetime(values)), tz, nonexistent="raise")
    return idx.as_unit("ns").asi8 // 1_000_000


def from_epoch_ms(ms, tz: str = canon.DEFAULT_TZ) -> pd.DatetimeIndex:
    idx = pd.DatetimeIndex(pd.to_datetime(np.asarray(ms), unit="ms", utc=True))
    return idx.tz_convert(ZoneInfo(tz)).rename(canon.INDEX_NAME)


def month_index(ms: np.ndarray, tz: str = canon.DEFAULT_TZ) -> np.ndarray:
    """Calendar month (0 = January) of each epoch-ms instant, in local time."""
    if len(ms) == 0:
        return np.zeros(0, dtype=np.intp)
    months = from_epoch_ms(ms, tz).month.to_numpy()
    return (months - 1).astype(np.intp)


def day_bounds_ms(
    start: str | pd.Timestamp, end: str | pd.Timestamp | None, tz: str
) -> tuple[int, int]:
    """
    Inclusive [00:00 of start day, 23:59:59.999 of end day] in epoch ms.
    A missing end means the single start day.
    """
    lo = pd.Timestamp(start)
    hi = pd.Timestamp(end) if end is not None else lo
    if lo.tzinfo is None:
        lo = lo.tz_localize(ZoneInfo(tz))
    if hi.tzinfo is None:
        hi = hi.tz_localize(ZoneInfo(tz))
    lo = lo.normalize()
    hi = hi.normalize() + pd.DateOffset(days=1) - pd.Timedelta(milliseconds=1)
    return int(lo.value // 1_000_000), int(hi.value // 1_000_000)


def month_label(month: int) -> str:
    """Short label for a 0-based month index."""
    return canon.MONTH_LABELS[month]
