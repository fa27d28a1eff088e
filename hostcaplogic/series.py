from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, TypeVar

import numpy as np
import pandas as pd

from . import canon, utils, validate
from .exceptions import SeriesError, require
from .types import TimePoint

S = TypeVar("S", bound="TimeSeries")


@dataclass(frozen=True, eq=False)
class TimeSeries:
    """
    Immutable, strictly ascending hourly series.

    Backed by two read-only numpy arrays:
      - timestamps_ms: int64 epoch milliseconds (UTC instants)
      - values: float64
    tz only affects how instants are shown and bucketed into months.
    """

    timestamps_ms: np.ndarray
    values: np.ndarray
    tz: str = canon.DEFAULT_TZ

    name = "value"

    def __post_init__(self):
        ts = np.array(self.timestamps_ms, dtype=np.int64).reshape(-1)
        vals = np.array(self.values, dtype=float).reshape(-1)
        require(
            ts.shape == vals.shape,
            f"{len(ts)} timestamps but {len(vals)} values.",
            SeriesError,
        )
        validate.assert_ascending(ts)
        ts.setflags(write=False)
        vals.setflags(write=False)
        object.__setattr__(self, "timestamps_ms", ts)
        object.__setattr__(self, "values", vals)

    # Constructors
    @classmethod
    def from_arrays(
        cls: type[S],
        timestamps: Iterable,
        values: Iterable[float],
        *,
        tz: str = canon.DEFAULT_TZ,
    ) -> S:
        """Timestamps may be datetimes, strings or epoch-ms integers."""
        return cls(utils.to_epoch_ms_array(timestamps, tz), np.asarray(list(values)), tz=tz)

    @classmethod
    def from_points(
        cls: type[S],
        points: Iterable[TimePoint[float] | tuple],
        *,
        tz: str = canon.DEFAULT_TZ,
    ) -> S:
        stamps: list = []
        vals: list[float] = []
        for p in points:
            if isinstance(p, TimePoint):
                stamps.append(p.epoch_ms)
                vals.append(p.value)
            else:
                t, v = p
                stamps.append(utils.to_epoch_ms(t, tz))
                vals.append(v)
        return cls(np.asarray(stamps, dtype=np.int64), np.asarray(vals, dtype=float), tz=tz)

    @classmethod
    def from_series(cls: type[S], s: pd.Series, *, tz: Optional[str] = None) -> S:
        """Build from a pandas Series indexed by time; naive indexes are read as tz."""
        if tz is None:
            index_tz = getattr(s.index, "tz", None)
            tz = str(index_tz) if index_tz is not None else canon.DEFAULT_TZ
        return cls(
            utils.to_epoch_ms_array(pd.DatetimeIndex(s.index), tz),
            s.to_numpy(dtype=float),
            tz=tz,
        )

    @classmethod
    def empty(cls: type[S], *, tz: str = canon.DEFAULT_TZ) -> S:
        return cls(np.zeros(0, dtype=np.int64), np.zeros(0, dtype=float), tz=tz)

    # Sequence protocol
    def __len__(self) -> int:
        return len(self.timestamps_ms)

    def __iter__(self) -> Iterator[TimePoint[float]]:
        idx = utils.from_epoch_ms(self.timestamps_ms, self.tz)
        for t, v in zip(idx, self.values):
            yield TimePoint(timestamp=t, value=float(v))

    def __getitem__(self, i: int) -> TimePoint[float]:
        ms = int(self.timestamps_ms[i])
        stamp = pd.Timestamp(ms, unit="ms", tz="UTC").tz_convert(self.tz)
        return TimePoint(timestamp=stamp, value=float(self.values[i]))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(n={len(self)}, tz={self.tz!r})"

    @property
    def is_empty(self) -> bool:
        return len(self) == 0

    # Views
    def index(self) -> pd.DatetimeIndex:
        return utils.from_epoch_ms(self.timestamps_ms, self.tz)

    def to_series(self) -> pd.Series:
        return pd.Series(np.array(self.values), index=self.index(), name=self.name)

    def months(self) -> np.ndarray:
        """Calendar month (0–11) of every sample, in the series' local time."""
        return utils.month_index(self.timestamps_ms, self.tz)

    def between(
        self: S,
        start: str | pd.Timestamp,
        end: str | pd.Timestamp | None = None,
    ) -> S:
        """Samples from 00:00 of the start day through the end of the end day."""
        lo, hi = utils.day_bounds_ms(start, end, self.tz)
        return self.span_ms(lo, hi)

    def span_ms(self: S, lo_ms: int, hi_ms: int) -> S:
        """Samples with lo_ms <= timestamp <= hi_ms."""
        mask = (self.timestamps_ms >= lo_ms) & (self.timestamps_ms <= hi_ms)
        return type(self)(self.timestamps_ms[mask], self.values[mask], tz=self.tz)

    def with_tz(self: S, tz: str) -> S:
        """Same instants, shown and bucketed in another time zone."""
        if tz == self.tz:
            return self
        return type(self)(self.timestamps_ms, self.values, tz=tz)


class NetLoadSeries(TimeSeries):
    """Substation net load in MW; negative means export upstream."""

    name = canon.LOAD_COL

    @property
    def net_load_mw(self) -> np.ndarray:
        return self.values


class SolarPerUnitSeries(TimeSeries):
    """AC output per unit of installed DC nameplate (MW per MWdc)."""

    name = canon.SOLAR_COL

    @property
    def per_unit(self) -> np.ndarray:
        return self.values
